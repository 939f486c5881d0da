"""Error response schemas.

Every error leaves the service in the same envelope:
{"errors": [{"id": "...", "status": 406, "title": "...", "detail": "..."}]}.
"""

from pydantic import BaseModel, ConfigDict


class ApiError(BaseModel):
    """One error object. ``id`` is the stable machine-readable code."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: int
    title: str
    detail: str


class ErrorResponse(BaseModel):
    """Top-level error envelope."""

    errors: list[ApiError]
