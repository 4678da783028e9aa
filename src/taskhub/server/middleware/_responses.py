"""
Helpers for answering a request directly from ASGI middleware.
"""

from typing import Dict, Optional

from fastapi.responses import JSONResponse


async def send_error(
    scope, receive, send, status_code: int, message: str, headers: Optional[Dict[str, str]] = None
) -> None:
    response = JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers,
    )
    await response(scope, receive, send)
