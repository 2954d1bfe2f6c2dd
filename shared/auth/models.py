"""
Authentication models.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """Claims carried by an access token."""

    sub: str = Field(..., min_length=1, description="Subject (user id)")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    iss: str = Field(..., description="Issuer")


class UserIdentity(BaseModel):
    """Caller identity extracted from a verified token."""

    user_id: str = Field(..., description="Owner of the thoughts being processed")
    issued_at: datetime | None = Field(None, description="Token issue time")
    expires_at: datetime | None = Field(None, description="Token expiry")
