"""Tea resource schemas.

JSON:API-style envelopes: a single record under ``data`` or an ordered
list of records under ``data``. The same ``TeaResource`` shape is used for
request bodies (create, update) and single-record responses.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class Tea(BaseModel):
    """A persisted tea. ``id`` is unset until the repository assigns it."""

    model_config = ConfigDict(from_attributes=True)

    id: str | None = None
    name: str
    category: str


class TeaResource(BaseModel):
    """Single-record envelope: ``{"data": {...}}``."""

    data: Tea

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class TeasCollection(BaseModel):
    """Collection envelope: ``{"data": [...]}``, an empty list when there are no teas."""

    data: list[Tea] = []

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
