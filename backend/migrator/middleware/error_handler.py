"""
Error mapping middleware.

Turns exceptions escaping a route into JSON error responses. A
``MigratorError`` answers with its own status code and body
(``{error, message, details}``); anything else becomes a 500.

Pure ASGI middleware, so it can be stacked with the request logger without
touching response bodies.
"""

import json
import logging
import traceback

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.exceptions import MigratorError

logger = logging.getLogger("migrator.middleware.error_handler")


class ErrorHandlerMiddleware:
    """Catches route exceptions and returns structured JSON error responses."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            # Headers already went out; nothing sensible can be sent any more.
            if response_started:
                raise

            path = scope.get("path", "unknown")
            method = scope.get("method", "unknown")
            if isinstance(exc, MigratorError):
                status = exc.status_code
                payload = exc.to_dict()
                logger.warning("%s %s failed: %s (%s)", method, path, exc.message, exc.error_code)
            else:
                status = 500
                payload = {
                    "error": "internal_server_error",
                    "message": "An unexpected error occurred. Please try again.",
                    "details": {},
                }
                logger.error("Unhandled exception on %s %s: %s", method, path, exc)
                logger.debug(traceback.format_exc())
            payload["path"] = path

            body = json.dumps(payload).encode("utf-8")
            await send({
                "type": "http.response.start",
                "status": status,
                "headers": [
                    [b"content-type", b"application/json"],
                    [b"content-length", str(len(body)).encode()],
                ],
            })
            await send({
                "type": "http.response.body",
                "body": body,
            })
