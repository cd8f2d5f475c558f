"""
Request body size limit middleware.

JSON bodies get a small limit, multipart form uploads a larger one. A
declared Content-Length over the limit is rejected before the body is read.
Bodies without one (chunked transfer) are counted as they stream in and
rejected once the received bytes pass the limit. Per-file limits for
uploads are enforced again while staging.
"""

import logging

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from common.utils import PayloadTooLargeException, error_response

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """Return 413 for request bodies over the configured size."""

    def __init__(self, app: ASGIApp, max_json_bytes: int, max_multipart_bytes: int):
        self.app = app
        self.max_json_bytes = max_json_bytes
        self.max_multipart_bytes = max_multipart_bytes

    def _limit_for(self, content_type: str) -> int:
        if content_type.startswith("multipart/form-data"):
            return self.max_multipart_bytes
        return self.max_json_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        limit = self._limit_for(headers.get("content-type", "").lower())
        path = scope.get("path", "")

        content_length = headers.get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                response = JSONResponse(
                    status_code=400,
                    content=error_response("Invalid Content-Length header", code="BAD_REQUEST"),
                )
                await response(scope, receive, send)
                return

            if size > limit:
                logger.warning(f"Rejected {scope['method']} {path}: declared body of {size} bytes")
                await self._reject(scope, receive, send, limit)
                return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    logger.warning(f"Rejected {scope['method']} {path}: body passed {limit} bytes")
                    raise PayloadTooLargeException(max_bytes=limit)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except PayloadTooLargeException:
            # Raised outside the route's exception handlers
            if response_started:
                raise
            await self._reject(scope, receive, send, limit)

    @staticmethod
    async def _reject(scope: Scope, receive: Receive, send: Send, limit: int) -> None:
        response = JSONResponse(
            status_code=413,
            content=error_response(
                "Request body too large",
                code="PAYLOAD_TOO_LARGE",
                details={"maxBytes": limit},
            ),
        )
        await response(scope, receive, send)
