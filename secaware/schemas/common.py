"""
Common schema types used across the API.
"""

from typing import Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""
    
    detail: str
    code: Optional[str] = None
    retryable: bool = False


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str = "ok"
    version: str
    database: str = "connected"
