"""
Entitlement gate.

Decides per user whether AI processing is currently permitted. Registered
users are judged by their subscription snapshot; anonymous users by their
anonymous session record. The only write the gate ever performs is the
merge update that flags a denied anonymous session for cleanup.
"""

from dataclasses import dataclass

from shared.cache.snapshot_cache import NullSnapshotCache, SnapshotCache
from shared.config.logging import get_logger
from shared.documents.base import DocumentStore
from shared.documents.paths import DocumentPaths
from shared.entitlements.config import EntitlementSettings, get_entitlement_settings
from shared.entitlements.evaluation import (
    EntitlementCode,
    EntitlementDecision,
    evaluate_ai_entitlement,
    get_subscription_block_message,
)
from shared.entitlements.identity import IdentityProvider, StoreIdentityProvider
from shared.exceptions import PermissionDeniedError
from shared.models.subscription import AnonymousSession, SubscriptionSnapshot
from shared.utils.datetime_utils import Clock, ensure_utc, get_utc_now

logger = get_logger(__name__)

ANONYMOUS_DENIED_MESSAGE = "Anonymous sessions cannot run AI processing"
ANONYMOUS_BLOCKED = "anonymous-blocked"
ANONYMOUS_EXPIRED = "anonymous-expired"


@dataclass(frozen=True)
class AccessDecision:
    """Result of an entitlement check."""

    allowed: bool
    reason_code: str
    message: str | None = None
    entitlement: EntitlementDecision | None = None

    def raise_if_denied(self) -> None:
        """
        Raise when access was denied.

        Raises:
            PermissionDeniedError: If the decision is a denial
        """
        if not self.allowed:
            raise PermissionDeniedError(
                self.message or "AI processing is not permitted",
                reason_code=self.reason_code,
            )


class EntitlementGate:
    """Per-user AI processing permission check."""

    def __init__(
        self,
        store: DocumentStore,
        identity_provider: IdentityProvider | None = None,
        cache: SnapshotCache | None = None,
        settings: EntitlementSettings | None = None,
        clock: Clock = get_utc_now,
    ):
        """
        Initialize gate.

        Args:
            store: Document store holding subscription and session records
            identity_provider: Anonymous-user lookup (reads user profiles by default)
            cache: Subscription snapshot cache (disabled if not provided)
            settings: Entitlement settings
            clock: Source of the current time
        """
        self.store = store
        self.identity_provider = identity_provider or StoreIdentityProvider(store)
        self.cache = cache or NullSnapshotCache()
        self.settings = settings or get_entitlement_settings()
        self._clock = clock

    async def is_allowed(self, user_id: str) -> AccessDecision:
        """
        Decide whether AI processing is permitted for a user.

        Args:
            user_id: User ID

        Returns:
            AccessDecision with a reason code and, on denial, a user-facing message
        """
        if await self.identity_provider.is_anonymous(user_id):
            return await self._check_anonymous(user_id)

        snapshot = await self.get_subscription_snapshot(user_id)
        entitlement = evaluate_ai_entitlement(snapshot, now=self._clock(), settings=self.settings)

        if not entitlement.allowed:
            logger.info("ai_access_denied", user_id=user_id, reason=entitlement.code.value)
            return AccessDecision(
                allowed=False,
                reason_code=entitlement.code.value,
                message=get_subscription_block_message(entitlement.code),
                entitlement=entitlement,
            )

        return AccessDecision(
            allowed=True,
            reason_code=EntitlementCode.ALLOWED.value,
            entitlement=entitlement,
        )

    async def ensure_allowed(self, user_id: str) -> AccessDecision:
        """
        Check access and raise on denial.

        Raises:
            PermissionDeniedError: If AI processing is not permitted
        """
        decision = await self.is_allowed(user_id)
        decision.raise_if_denied()
        return decision

    async def get_subscription_snapshot(self, user_id: str) -> SubscriptionSnapshot | None:
        """
        Fetch the user's subscription snapshot through the cache.

        Args:
            user_id: User ID

        Returns:
            Snapshot, or None if the user has no subscription record
        """
        cached = await self.cache.get(user_id)
        if cached is not None:
            data = cached.data
        else:
            snapshot = await self.store.get(DocumentPaths.subscription(user_id))
            data = snapshot.to_dict() if snapshot.exists else None
            await self.cache.set(user_id, data)

        if data is None:
            return None
        return SubscriptionSnapshot.from_document(data)

    def _override_matches(self, session: AnonymousSession | None) -> bool:
        key = self.settings.anonymous_ai_override_key
        return bool(key) and session is not None and session.ci_override_key == key

    async def _check_anonymous(self, user_id: str) -> AccessDecision:
        path = DocumentPaths.anonymous_session(user_id)
        snapshot = await self.store.get(path)
        session = AnonymousSession.from_snapshot(snapshot) if snapshot.exists else None
        now = self._clock()

        allow_ai = snapshot.get("allowAi") is True or self._override_matches(session)
        if session is None or not allow_ai or session.cleanup_pending:
            await self.store.set(
                path,
                {"cleanupPending": True, "status": "blocked", "updatedAt": now},
                merge=True,
            )
            logger.info("anonymous_ai_blocked", user_id=user_id, session_exists=session is not None)
            return AccessDecision(False, ANONYMOUS_BLOCKED, ANONYMOUS_DENIED_MESSAGE)

        if session.expires_at is not None and ensure_utc(session.expires_at) <= now:
            await self.store.set(
                path,
                {
                    "cleanupPending": True,
                    "status": "expired",
                    "expiredAt": now,
                    "updatedAt": now,
                },
                merge=True,
            )
            logger.info("anonymous_session_expired", user_id=user_id)
            return AccessDecision(False, ANONYMOUS_EXPIRED, ANONYMOUS_DENIED_MESSAGE)

        return AccessDecision(True, EntitlementCode.ALLOWED.value)
