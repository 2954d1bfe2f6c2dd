"""
Base Pydantic schemas.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """Base Pydantic schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class SuccessResponse(BaseSchema):
    """Standard success response."""

    success: bool = Field(True, description="Operation success status")
    message: str | None = Field(None, description="Success message")


class ErrorResponse(BaseSchema):
    """Standard error response."""

    success: bool = Field(False, description="Operation success status")
    error: str = Field(..., description="Error message")
    error_code: str | None = Field(None, description="Error code")
    details: dict[str, Any] | None = Field(None, description="Error details")
