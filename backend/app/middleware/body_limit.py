"""
Sparkz Backend: Request Body Size Limit
========================================

What:  Rejects request bodies larger than MAX_BODY_SIZE with 413.
How:   Pure ASGI middleware. A declared Content-Length above the cap is
       refused before anything is read. Otherwise `receive` is wrapped and the
       bytes of every `http.request` message are counted, so chunked bodies
       without a Content-Length are cut off as soon as the running total
       passes the cap. Whatever the downstream app tries to send after that
       point is dropped and replaced by the 413.
"""

import logging

from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.exceptions import PayloadTooLargeError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class _BodyTooLarge(Exception):
    """Raised from the wrapped receive once the streamed body passes the cap."""


class BodySizeLimitMiddleware:

    def __init__(self, app: ASGIApp, max_body_size: int):
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = self._declared_length(scope)
        if content_length is not None and content_length > self.max_body_size:
            logger.warning(
                "Rejected %s %s: Content-Length %d exceeds %d",
                scope.get("method"), scope.get("path"), content_length, self.max_body_size,
            )
            await self._reject(scope, receive, send)
            return

        received = 0
        exceeded = False
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received, exceeded
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    exceeded = True
                    raise _BodyTooLarge()
            return message

        async def guarded_send(message: Message) -> None:
            nonlocal response_started
            if exceeded:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except _BodyTooLarge:
            pass

        if exceeded:
            logger.warning(
                "Rejected %s %s: streamed body exceeds %d bytes",
                scope.get("method"), scope.get("path"), self.max_body_size,
            )
            if not response_started:
                await self._reject(scope, receive, send)

    @staticmethod
    def _declared_length(scope: Scope):
        for name, value in scope.get("headers", []):
            if name == b"content-length":
                try:
                    return int(value)
                except ValueError:
                    return None
        return None

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        error = PayloadTooLargeError(max_size=self.max_body_size)
        response = JSONResponse(
            status_code=413,
            content={
                "error": "payload_too_large",
                "message": error.message,
                "details": {"max_size_bytes": self.max_body_size},
                "request_id": request_id_var.get(""),
            },
        )
        await response(scope, receive, send)
