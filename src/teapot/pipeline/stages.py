"""Request interceptors for the JSON:API pipeline.

Each stage exposes ``handle(ctx, call_next)``. A stage either returns a
response of its own (short-circuiting everything after it) or awaits
``call_next(ctx)`` and returns what the rest of the chain produced.
"""

import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Generic, Protocol, TypeVar

import structlog
from pydantic import BaseModel, ValidationError
from starlette.responses import Response

from teapot.exceptions import DomainError, InvalidIdError, NotFoundError
from teapot.logging import get_logger
from teapot.pipeline.context import RequestContext, mark_failed
from teapot.pipeline.errors import (
    BAD_REQUEST,
    INTERNAL_SERVER_ERROR,
    MEDIA_TYPE,
    NOT_ACCEPTABLE,
    NOT_FOUND,
    UNSUPPORTED_MEDIA_TYPE,
    write_error,
)
from teapot.schemas.error import ApiError

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

Handler = Callable[[RequestContext], Awaitable[Response]]


class Stage(Protocol):
    async def handle(self, ctx: RequestContext, call_next: Handler) -> Response: ...


# Domain errors with a dedicated client-facing error. Order matters: first match wins.
TRANSLATED_ERRORS: tuple[tuple[type[DomainError], ApiError], ...] = (
    (NotFoundError, NOT_FOUND),
    (InvalidIdError, NOT_FOUND),
)


def translate(exc: Exception) -> ApiError | None:
    """Return the API error a recognized domain exception maps to, or None for a fault."""
    for exc_type, error in TRANSLATED_ERRORS:
        if isinstance(exc, exc_type):
            return error
    return None


class Recover:
    """Outermost stage: the one place faults are turned into responses.

    Recognized domain errors map to their API error. Anything else is
    logged with its traceback and answered with the generic
    internal_server_error, so exception text never reaches the client.
    Either way the request is marked failed, so the session dependency
    rolls back instead of committing.
    """

    async def handle(self, ctx: RequestContext, call_next: Handler) -> Response:
        try:
            return await call_next(ctx)
        except Exception as exc:
            mark_failed(ctx.request)
            response = write_error(self._translate(ctx, exc))
            if ctx.request_id is not None:
                response.headers[REQUEST_ID_HEADER] = ctx.request_id
            return response

    def _translate(self, ctx: RequestContext, exc: Exception) -> ApiError:
        request = ctx.request
        error = translate(exc)
        if error is not None:
            logger.warning(
                "domain_error",
                error=error.id,
                reason=str(exc),
                path=request.url.path,
                method=request.method,
            )
            return error
        logger.exception("unhandled_exception", path=request.url.path, method=request.method)
        return INTERNAL_SERVER_ERROR


class LogRequest:
    """Tag the request with an id and log its outcome and duration.

    The id comes from X-Request-ID when the client sends one, otherwise a
    UUID4. It is bound to structlog context vars, so every event logged
    while handling the request carries it, and echoed on the response.

    Exceptions pass through to Recover. A recognized domain error is an
    ordinary answer and is logged as ``request_completed`` with the status
    Recover will send; anything else is ``request_failed`` with 500.
    """

    async def handle(self, ctx: RequestContext, call_next: Handler) -> Response:
        request = ctx.request
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        ctx.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        try:
            response = await call_next(ctx)
        except Exception as exc:
            error = translate(exc)
            logger.info(
                "request_completed" if error is not None else "request_failed",
                method=request.method,
                path=request.url.path,
                status=error.status if error is not None else INTERNAL_SERVER_ERROR.status,
                duration_ms=_elapsed_ms(started),
            )
            raise

        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequireAccept:
    """Reject with 406 unless Accept is exactly the JSON:API media type."""

    async def handle(self, ctx: RequestContext, call_next: Handler) -> Response:
        if ctx.request.headers.get("accept") != MEDIA_TYPE:
            return write_error(NOT_ACCEPTABLE)
        return await call_next(ctx)


class RequireContentType:
    """Reject with 415 unless Content-Type is exactly the JSON:API media type.

    Runs before DecodeBody, so a rejected request's body is never read.
    """

    async def handle(self, ctx: RequestContext, call_next: Handler) -> Response:
        if ctx.request.headers.get("content-type") != MEDIA_TYPE:
            return write_error(UNSUPPORTED_MEDIA_TYPE)
        return await call_next(ctx)


T = TypeVar("T", bound=BaseModel)


class DecodeBody(Generic[T]):
    """Parse the request body into a fresh ``model`` instance.

    Stores the result on ``ctx.body`` for the handler. Malformed JSON or a
    body that does not match the model is answered with 400 and the rest of
    the chain does not run. The same stage serves any resource envelope::

        DecodeBody(TeaResource)
    """

    def __init__(self, model: type[T]) -> None:
        self.model = model

    async def handle(self, ctx: RequestContext, call_next: Handler) -> Response:
        raw = await ctx.request.body()
        try:
            ctx.body = self.model.model_validate_json(raw)
        except ValidationError:
            return write_error(BAD_REQUEST)
        return await call_next(ctx)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
