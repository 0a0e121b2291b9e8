"""Dishka FastAPI integration opening a Scope.UOW container per request."""

from dishka import AsyncContainer
from fastapi import FastAPI
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Send
from starlette.types import Scope as ASGIScope

from idgate.util.di.scope import Scope


class ContainerMiddleware:
    """ASGI middleware that creates a Scope.UOW container for each HTTP request.

    Replaces dishka.integrations.starlette.ContainerMiddleware, which only knows
    dishka.Scope.REQUEST.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: ASGIScope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)
        async with request.app.state.dishka_container(
            {Request: request},
            scope=Scope.UOW,
        ) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app: FastAPI) -> None:
    """Install the per-request container middleware and attach the root container."""
    app.add_middleware(ContainerMiddleware)
    app.state.dishka_container = container
