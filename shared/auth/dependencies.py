"""
FastAPI dependencies for authentication.
"""

from typing import Annotated

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.auth.config import get_auth_settings
from shared.auth.jwt import JWTHandler
from shared.auth.models import UserIdentity
from shared.exceptions import UnauthenticatedError

bearer_scheme = HTTPBearer(auto_error=False)


def get_jwt_handler() -> JWTHandler:
    """
    Get JWT handler instance.

    Applications may override this dependency to supply their own handler.

    Returns:
        JWT handler built from AUTH_ settings
    """
    return JWTHandler.from_settings(get_auth_settings())


async def get_current_user(
    bearer: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)] = None,
    jwt_handler: Annotated[JWTHandler | None, Depends(get_jwt_handler)] = None,
) -> UserIdentity:
    """
    Get current authenticated user.

    Args:
        bearer: Bearer token from Authorization header
        jwt_handler: JWT handler instance

    Returns:
        User identity

    Raises:
        UnauthenticatedError: If the token is missing or invalid
    """
    if bearer is not None and jwt_handler is not None:
        identity = jwt_handler.verify_token(bearer.credentials)
        if identity is not None:
            return identity

    raise UnauthenticatedError("User must be authenticated")
