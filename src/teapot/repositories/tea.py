"""Tea data-access layer.

``TeaRepository`` is the boundary the handlers depend on; ``SqlTeaRepository``
is the implementation backed by the ``teas`` table. No HTTP concerns here:
failures surface as domain exceptions (NotFoundError, InvalidIdError,
StoreError) and the pipeline decides what the client sees.
"""

import re
import secrets
import time
from typing import Protocol

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teapot.exceptions import InvalidIdError, NotFoundError, StoreError
from teapot.models import TeaRecord
from teapot.schemas.tea import Tea

_OBJECT_ID = re.compile(r"[0-9a-fA-F]{24}")


def new_object_id() -> str:
    """Return a fresh 24-hex-char id: 4-byte timestamp followed by 8 random bytes.

    The timestamp prefix keeps ids roughly ordered by creation time.
    """
    return int(time.time()).to_bytes(4, "big").hex() + secrets.token_hex(8)


def parse_object_id(value: str) -> str:
    """Validate and normalize an object id, raising InvalidIdError if malformed."""
    if not isinstance(value, str) or not _OBJECT_ID.fullmatch(value):
        raise InvalidIdError(value)
    return value.lower()


class TeaRepository(Protocol):
    async def list_all(self) -> list[Tea]: ...

    async def find_by_id(self, tea_id: str) -> Tea: ...

    async def create(self, tea: Tea) -> Tea: ...

    async def update_by_id(self, tea: Tea) -> None: ...

    async def delete_by_id(self, tea_id: str) -> None: ...


class SqlTeaRepository:
    """TeaRepository over an AsyncSession. The session dependency owns the transaction."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_all(self) -> list[Tea]:
        stmt = select(TeaRecord).order_by(TeaRecord.id)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return [Tea.model_validate(row) for row in result.scalars().all()]

    async def find_by_id(self, tea_id: str) -> Tea:
        key = parse_object_id(tea_id)
        try:
            record = await self.db.get(TeaRecord, key)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        if record is None:
            raise NotFoundError("Tea", key)
        return Tea.model_validate(record)

    async def create(self, tea: Tea) -> Tea:
        record = TeaRecord(id=new_object_id(), name=tea.name, category=tea.category)
        self.db.add(record)
        try:
            await self.db.flush()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        tea.id = record.id
        return tea

    async def update_by_id(self, tea: Tea) -> None:
        if tea.id is None:
            raise InvalidIdError(tea.id)
        key = parse_object_id(tea.id)
        stmt = (
            update(TeaRecord)
            .where(TeaRecord.id == key)
            .values(name=tea.name, category=tea.category)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        if result.rowcount == 0:
            raise NotFoundError("Tea", key)

    async def delete_by_id(self, tea_id: str) -> None:
        key = parse_object_id(tea_id)
        stmt = delete(TeaRecord).where(TeaRecord.id == key)
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        if result.rowcount == 0:
            raise NotFoundError("Tea", key)
