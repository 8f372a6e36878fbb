"""
Request logging middleware.

Logs method, path, status and duration of every HTTP request and reports
the duration back in an ``x-response-time-ms`` header. Uploads also log
their declared body size.
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("migrator.middleware.request_logger")


class RequestLoggerMiddleware:
    """Logs one line per HTTP request."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code = 0
        method = scope.get("method", "?")
        path = scope.get("path", "?")

        headers = dict(scope.get("headers", []))
        content_length = headers.get(b"content-length")
        if method == "POST" and content_length:
            logger.debug("%s %s body=%s bytes", method, path, content_length.decode())

        async def send_wrapper(message: Message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
                elapsed = round((time.perf_counter() - start) * 1000, 2)
                out_headers = list(message.get("headers", []))
                out_headers.append([b"x-response-time-ms", str(elapsed).encode()])
                message = {**message, "headers": out_headers}
            elif message["type"] == "http.response.body" and not message.get("more_body", False):
                elapsed = (time.perf_counter() - start) * 1000
                level = logging.WARNING if status_code >= 500 else logging.INFO
                logger.log(level, "%s %s -> %s (%.2fms)", method, path, status_code, elapsed)
            await send(message)

        await self.app(scope, receive, send_wrapper)
