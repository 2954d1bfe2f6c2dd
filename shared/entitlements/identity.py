"""
Caller identity lookups.
"""

from abc import ABC, abstractmethod

from shared.documents.base import DocumentStore
from shared.documents.paths import DocumentPaths


class IdentityProvider(ABC):
    """Answers whether a user id belongs to an anonymous session."""

    @abstractmethod
    async def is_anonymous(self, user_id: str) -> bool:
        """
        Check whether a user signed in without any identity provider.

        Args:
            user_id: User ID

        Returns:
            True for anonymous users
        """
        pass


class StoreIdentityProvider(IdentityProvider):
    """
    Reads the user's profile document.

    A profile flagged ``isAnonymous``, or one whose ``providers`` list is
    empty, is anonymous. A user without a profile is treated as anonymous.
    """

    def __init__(self, store: DocumentStore):
        """
        Initialize provider.

        Args:
            store: Document store
        """
        self.store = store

    async def is_anonymous(self, user_id: str) -> bool:
        """Check the profile document."""
        profile = await self.store.get(DocumentPaths.user(user_id))
        if not profile.exists:
            return True

        if profile.get("isAnonymous") is True:
            return True

        providers = profile.get("providers")
        if isinstance(providers, list):
            return len(providers) == 0

        return profile.get("isAnonymous") is not False
