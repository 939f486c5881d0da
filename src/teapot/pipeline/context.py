from dataclasses import dataclass, field
from typing import Any

from starlette.requests import Request


@dataclass
class RequestContext:
    """Per-request state handed down the stage chain.

    A new context is built for every request, so the decoded body slot is
    never shared between concurrent requests.
    """

    request: Request
    params: dict[str, str] = field(default_factory=dict)
    body: Any = None
    request_id: str | None = None

    @classmethod
    def from_request(cls, request: Request) -> "RequestContext":
        return cls(request=request, params=dict(request.path_params))


def mark_failed(request: Request) -> None:
    """Flag the request as answered with an error, for dependencies that clean up after it."""
    request.state.failed = True


def has_failed(request: Request) -> bool:
    return getattr(request.state, "failed", False)
