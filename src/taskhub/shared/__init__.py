"""
Shared building blocks used by the HTTP server and background services.

Subpackages:
  - api: pagination and response envelopes
  - auth: password hashing, JWT tokens, user dependencies
  - exceptions: business exceptions and FastAPI handlers
  - utils: timestamps and type aliases
"""

from .utils.timestamp_utils import epoch_ms_to_iso8601, now_epoch_ms

__all__ = ["epoch_ms_to_iso8601", "now_epoch_ms"]
