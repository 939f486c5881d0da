"""Shared FastAPI dependencies.

Kept out of main.py so routers can import them without a circular import.
Tests swap the repository by overriding ``get_tea_repository``.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from teapot.db.session import get_db
from teapot.repositories.tea import SqlTeaRepository, TeaRepository

DB = Annotated[AsyncSession, Depends(get_db)]


def get_tea_repository(db: DB) -> TeaRepository:
    return SqlTeaRepository(db)


TeaRepo = Annotated[TeaRepository, Depends(get_tea_repository)]
