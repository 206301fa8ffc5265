"""
Error response schemas for API endpoints.

Provides structured error responses for OpenAPI documentation and consistent
error handling across the API.
"""
from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body returned for invalid input and persistence failures."""

    code: str = Field(description="Stable machine-readable error code")
    message: str = Field(description="Human-readable error message")
    timestamp: datetime = Field(description="When the error occurred (UTC)")
