"""Tea endpoints.

Each route runs its handler behind a pipeline. Reads and deletes share the
negotiated prefix; create and update additionally require the JSON:API
Content-Type and decode the body into a ``TeaResource``.
"""

from fastapi import APIRouter, Request
from starlette.responses import Response

from teapot.dependencies import TeaRepo
from teapot.pipeline.builder import Pipeline
from teapot.pipeline.context import RequestContext
from teapot.pipeline.errors import JSONAPIResponse
from teapot.pipeline.stages import (
    DecodeBody,
    LogRequest,
    Recover,
    RequireAccept,
    RequireContentType,
)
from teapot.repositories.tea import TeaRepository
from teapot.schemas.tea import TeaResource, TeasCollection

router = APIRouter()

read_chain = Pipeline(Recover(), LogRequest(), RequireAccept())
write_chain = read_chain.append(RequireContentType(), DecodeBody(TeaResource))


class TeaHandlers:
    """Terminal handlers: one repository call each, no error handling of their own."""

    def __init__(self, repo: TeaRepository) -> None:
        self.repo = repo

    async def list_all(self, ctx: RequestContext) -> Response:
        teas = await self.repo.list_all()
        return JSONAPIResponse(content=TeasCollection(data=teas).to_json())

    async def get(self, ctx: RequestContext) -> Response:
        tea = await self.repo.find_by_id(ctx.params["tea_id"])
        return JSONAPIResponse(content=TeaResource(data=tea).to_json())

    async def create(self, ctx: RequestContext) -> Response:
        body: TeaResource = ctx.body
        # Ids are assigned by the repository only
        body.data.id = None
        body.data = await self.repo.create(body.data)
        return JSONAPIResponse(status_code=201, content=body.to_json())

    async def update(self, ctx: RequestContext) -> Response:
        body: TeaResource = ctx.body
        # The path id is authoritative; any id in the body is overwritten
        body.data.id = ctx.params["tea_id"]
        await self.repo.update_by_id(body.data)
        return Response(status_code=204)

    async def delete(self, ctx: RequestContext) -> Response:
        await self.repo.delete_by_id(ctx.params["tea_id"])
        return Response(status_code=204)


@router.get("/teas")
async def list_teas(request: Request, repo: TeaRepo) -> Response:
    """List every tea as a collection envelope."""
    return await read_chain.run(request, TeaHandlers(repo).list_all)


@router.post("/teas")
async def create_tea(request: Request, repo: TeaRepo) -> Response:
    """Create a tea; the response carries the assigned id."""
    return await write_chain.run(request, TeaHandlers(repo).create)


@router.get("/teas/{tea_id}")
async def get_tea(request: Request, repo: TeaRepo) -> Response:
    return await read_chain.run(request, TeaHandlers(repo).get)


@router.put("/teas/{tea_id}")
async def update_tea(request: Request, repo: TeaRepo) -> Response:
    """Replace a tea's fields. 204 on success."""
    return await write_chain.run(request, TeaHandlers(repo).update)


@router.delete("/teas/{tea_id}")
async def delete_tea(request: Request, repo: TeaRepo) -> Response:
    return await read_chain.run(request, TeaHandlers(repo).delete)
