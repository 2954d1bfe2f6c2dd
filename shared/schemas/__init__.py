"""
Pydantic schemas shared by API responses.
"""

from shared.schemas.base import BaseSchema, ErrorResponse, SuccessResponse

__all__ = [
    "BaseSchema",
    "SuccessResponse",
    "ErrorResponse",
]
