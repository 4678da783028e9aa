"""
Rejects request bodies larger than the configured limit with 413.
"""

import logging

from ._responses import send_error

log = logging.getLogger(__name__)

PAYLOAD_TOO_LARGE_MESSAGE = "Request body too large"


class _BodyTooLarge(Exception):
    pass


class BodySizeLimitMiddleware:
    """
    Checks ``Content-Length`` up front and counts streamed chunks for
    requests sent without one.
    """

    def __init__(self, app, max_body_bytes: int = 10 * 1024 * 1024):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        for name, value in scope.get("headers", []):
            if name == b"content-length":
                try:
                    declared = int(value)
                except ValueError:
                    break
                if declared > self.max_body_bytes:
                    log.warning(
                        "Rejected %s %s: body of %d bytes exceeds %d",
                        scope.get("method"),
                        scope.get("path"),
                        declared,
                        self.max_body_bytes,
                    )
                    await send_error(scope, receive, send, 413, PAYLOAD_TOO_LARGE_MESSAGE)
                    return
                break

        received = 0
        response_started = False

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise _BodyTooLarge()
            return message

        async def tracking_send(message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except _BodyTooLarge:
            if response_started:
                raise
            await send_error(scope, receive, send, 413, PAYLOAD_TOO_LARGE_MESSAGE)
