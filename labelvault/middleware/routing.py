"""API prefix handling and uniform CORS answers."""

import logging
from typing import Optional

from starlette.datastructures import MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


class ApiPrefixMiddleware:
    """
    Serves the API both with and without its public prefix.

    ``/api/releases`` and ``/releases`` reach the same route. Every
    ``OPTIONS`` request is answered here with the permissive CORS headers,
    and every other response gets them added.
    """

    def __init__(self, app: ASGIApp, prefix: str = "/api", cors_headers: Optional[dict] = None):
        self.app = app
        self.prefix = prefix.rstrip("/")
        self.cors_headers = cors_headers or CORS_HEADERS

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        scope = self._strip_prefix(scope)

        if scope["method"] == "OPTIONS":
            response = Response(status_code=204, headers=self.cors_headers)
            await response(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in self.cors_headers.items():
                    if name.lower() not in headers:
                        headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_cors)

    def _strip_prefix(self, scope: Scope) -> Scope:
        path = scope["path"]
        if not self.prefix or not self._has_prefix(path):
            return scope

        stripped = path[len(self.prefix):] or "/"
        scope = dict(scope)
        scope["path"] = stripped
        raw_path = scope.get("raw_path")
        if raw_path and raw_path.startswith(self.prefix.encode()):
            scope["raw_path"] = raw_path[len(self.prefix.encode()):] or b"/"
        return scope

    def _has_prefix(self, path: str) -> bool:
        return path == self.prefix or path.startswith(self.prefix + "/")
