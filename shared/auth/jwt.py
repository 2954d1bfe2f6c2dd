"""
Bearer token verification.

Tokens are HS256 JWTs whose subject is the user id that owns the thoughts
being processed. ``sub``, ``exp``, ``iat`` and ``iss`` are all required.
"""

from datetime import UTC, datetime, timedelta

import jwt
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError

from shared.auth.config import AuthSettings
from shared.auth.models import TokenPayload, UserIdentity
from shared.config.logging import get_logger
from shared.utils.datetime_utils import Clock, get_utc_now

logger = get_logger(__name__)

REQUIRED_CLAIMS = ["sub", "exp", "iat", "iss"]


class JWTHandler:
    """Issues and verifies access tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60,
        issuer: str = "focusqueue",
        leeway_seconds: int = 0,
        clock: Clock = get_utc_now,
    ):
        """
        Initialize JWT handler.

        Args:
            secret_key: Signing key
            algorithm: JWT algorithm
            access_token_expire_minutes: Lifetime of issued tokens
            issuer: Expected and issued ``iss`` claim
            leeway_seconds: Clock skew tolerated when checking ``exp``
            clock: Source of the issue time
        """
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes
        self.issuer = issuer
        self.leeway_seconds = leeway_seconds
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "JWTHandler":
        """Build a handler from authentication settings."""
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
            issuer=settings.jwt_issuer,
            leeway_seconds=settings.jwt_leeway_seconds,
        )

    def create_access_token(self, user_id: str, expires_delta: timedelta | None = None) -> str:
        """
        Issue an access token for a user.

        Args:
            user_id: Token subject
            expires_delta: Lifetime override

        Returns:
            Encoded JWT
        """
        lifetime = expires_delta or timedelta(minutes=self.access_token_expire_minutes)
        now = self._clock()
        payload = TokenPayload(
            sub=user_id,
            exp=int((now + lifetime).timestamp()),
            iat=int(now.timestamp()),
            iss=self.issuer,
        )
        return jwt.encode(payload.model_dump(), self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> TokenPayload:
        """
        Verify a token's signature and claims.

        Raises:
            ExpiredSignatureError: If the token has expired
            InvalidTokenError: For any other signature, format or claim problem
        """
        claims = jwt.decode(
            token,
            self.secret_key,
            algorithms=[self.algorithm],
            issuer=self.issuer,
            leeway=self.leeway_seconds,
            options={"require": REQUIRED_CLAIMS},
        )
        return TokenPayload.model_validate(claims)

    def verify_token(self, token: str) -> UserIdentity | None:
        """
        Verify a token and extract the caller.

        Args:
            token: Encoded JWT

        Returns:
            UserIdentity, or None if the token is rejected
        """
        try:
            payload = self.decode_token(token)
        except (InvalidTokenError, ValidationError) as e:
            logger.info("token_rejected", reason=type(e).__name__)
            return None

        return UserIdentity(
            user_id=payload.sub,
            issued_at=datetime.fromtimestamp(payload.iat, UTC),
            expires_at=datetime.fromtimestamp(payload.exp, UTC),
        )
