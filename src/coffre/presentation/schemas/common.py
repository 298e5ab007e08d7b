"""
Common API envelope.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Successful response envelope: {success, message, data}."""

    success: bool = Field(default=True)
    message: Optional[str] = Field(default=None, description="Human readable note")
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    """Error envelope produced by the exception handlers."""

    success: bool = Field(default=False)
    error: str = Field(..., description="Machine readable error code")
    message: str
    details: dict = Field(default_factory=dict)
