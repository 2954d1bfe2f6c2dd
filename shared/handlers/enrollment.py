"""
Handler enrollment lookups.
"""

from shared.documents.base import DocumentStore, Transaction
from shared.documents.paths import DocumentPaths

INACTIVE_STATUS = "inactive"


class EnrollmentRepository:
    """Reads which handlers a user has enrolled in."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_enrolled_handler_ids(
        self, user_id: str, transaction: Transaction | None = None
    ) -> list[str]:
        """
        List enrolled handler ids.

        An enrollment document's id is the handler id. Documents whose
        ``status`` is ``inactive`` are skipped; a missing status counts as
        active.

        Args:
            user_id: User ID
            transaction: Read inside this transaction when given

        Returns:
            Handler ids in collection order
        """
        reader = transaction or self.store
        snapshots = await reader.query(DocumentPaths.tool_enrollments(user_id))
        return [
            snapshot.id
            for snapshot in snapshots
            if snapshot.get("status") != INACTIVE_STATUS
        ]
