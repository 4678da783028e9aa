"""
Error DTOs returned by the exception handlers.
"""

from typing import List, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error envelope: ``{"success": false, "message": ...}``."""

    success: bool = False
    message: str
    errors: Optional[List[str]] = None
    stack: Optional[str] = None

    def to_content(self) -> dict:
        return self.model_dump(exclude_none=True)
