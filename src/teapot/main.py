from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import Response
from sqlalchemy import text

from teapot.db.session import shutdown
from teapot.dependencies import DB
from teapot.logging import get_logger
from teapot.pipeline.errors import INTERNAL_SERVER_ERROR, write_error
from teapot.routers.tea import router as tea_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Dispose of the connection pool on shutdown."""
    yield
    await shutdown()


app = FastAPI(title="Teapot", lifespan=lifespan)
app.include_router(tea_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Last line for faults raised outside a route pipeline (e.g. in dependencies).

    Same envelope the pipeline's Recover stage produces; details go to the log only.
    """
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    return write_error(INTERNAL_SERVER_ERROR)


@app.get("/health")
async def health(db: DB) -> dict[str, str]:
    """Health check: 200 only when the database answers SELECT 1."""
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}
