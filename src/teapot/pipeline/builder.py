"""Declarative composition of pipeline stages.

A ``Pipeline`` is an immutable, ordered list of stages. Routes share a
common prefix and extend it with ``append``::

    read = Pipeline(Recover(), LogRequest(), RequireAccept())
    write = read.append(RequireContentType(), DecodeBody(TeaResource))

    response = await write.run(request, handlers.create)

The first stage is outermost: it sees the request first and the response
(or exception) last.
"""

from starlette.requests import Request
from starlette.responses import Response

from teapot.pipeline.context import RequestContext
from teapot.pipeline.stages import Handler, Stage


class Pipeline:
    def __init__(self, *stages: Stage) -> None:
        self.stages: tuple[Stage, ...] = stages

    def append(self, *stages: Stage) -> "Pipeline":
        """Return a new pipeline with ``stages`` added after the existing ones."""
        return Pipeline(*self.stages, *stages)

    def then(self, handler: Handler) -> Handler:
        """Wrap ``handler`` in every stage and return the composed callable."""
        chain = handler
        for stage in reversed(self.stages):
            chain = _link(stage, chain)
        return chain

    async def run(self, request: Request, handler: Handler) -> Response:
        """Run ``handler`` behind the stages with a fresh context for ``request``."""
        return await self.then(handler)(RequestContext.from_request(request))


def _link(stage: Stage, call_next: Handler) -> Handler:
    async def step(ctx: RequestContext) -> Response:
        return await stage.handle(ctx, call_next)

    return step
