"""
Error response models.

Documents the JSON body returned for BaabaError subclasses.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format, matching BaabaError.to_dict()."""

    error: str = Field(..., description="Machine-readable error code")
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
