"""
Request DTOs for API endpoints.
"""
