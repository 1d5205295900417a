"""CORS limited to a path prefix.

Starlette's CORSMiddleware applies to the whole app. We only want the browser
front-end to reach /api/...; /oauth/... is opened by the host in a normal tab
and must not answer cross-origin preflights.
"""

from collections.abc import Sequence

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send


class PathScopedCORSMiddleware:
    """Run CORSMiddleware only for requests under path_prefix."""

    def __init__(
        self,
        app: ASGIApp,
        path_prefix: str,
        allow_origins: Sequence[str],
        allow_methods: Sequence[str] = ("GET",),
        allow_headers: Sequence[str] = ("*",),
    ) -> None:
        self.app = app
        self.path_prefix = path_prefix.rstrip("/") + "/"
        self.cors = CORSMiddleware(
            app,
            allow_origins=allow_origins,
            allow_methods=allow_methods,
            allow_headers=allow_headers,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].startswith(self.path_prefix):
            await self.cors(scope, receive, send)
            return
        await self.app(scope, receive, send)
