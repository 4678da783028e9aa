"""
Data Transfer Objects (DTOs)

Contains request and response DTOs for API contract definition and validation.
"""

from . import requests, responses

__all__ = ["requests", "responses"]
