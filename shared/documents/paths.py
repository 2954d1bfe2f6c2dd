"""
Document path patterns and builders.
"""


class DocumentPaths:
    """Path builders for every document the processing queue touches."""

    USERS = "users"
    ANONYMOUS_SESSIONS = "anonymousSessions"

    THOUGHTS = "thoughts"
    PROCESSING_QUEUE = "processingQueue"
    PROCESSING_USAGE = "processingUsage"
    DAILY_PROCESSING_COUNT = "dailyProcessingCount"
    LLM_LOGS = "llmLogs"
    TOOL_ENROLLMENTS = "toolEnrollments"
    SUBSCRIPTION_STATUS = "subscriptionStatus"

    USAGE_META_ID = "meta"
    SUBSCRIPTION_CURRENT_ID = "current"

    SEPARATOR = "/"

    @classmethod
    def _join(cls, *segments: str) -> str:
        return cls.SEPARATOR.join(segments)

    @classmethod
    def user(cls, user_id: str) -> str:
        """Identity profile document for a user."""
        return cls._join(cls.USERS, user_id)

    @classmethod
    def user_collection(cls, user_id: str, name: str) -> str:
        """Any per-user sub-collection."""
        return cls._join(cls.USERS, user_id, name)

    @classmethod
    def thoughts(cls, user_id: str) -> str:
        """Collection of a user's thoughts."""
        return cls.user_collection(user_id, cls.THOUGHTS)

    @classmethod
    def thought(cls, user_id: str, thought_id: str) -> str:
        """A single thought."""
        return cls._join(cls.thoughts(user_id), thought_id)

    @classmethod
    def jobs(cls, user_id: str) -> str:
        """Collection of a user's processing jobs."""
        return cls.user_collection(user_id, cls.PROCESSING_QUEUE)

    @classmethod
    def job(cls, user_id: str, job_id: str) -> str:
        """A single processing job."""
        return cls._join(cls.jobs(user_id), job_id)

    @classmethod
    def processing_usage(cls, user_id: str) -> str:
        """Interval-limit state (``lastProcessedAt``)."""
        return cls._join(
            cls.user_collection(user_id, cls.PROCESSING_USAGE), cls.USAGE_META_ID
        )

    @classmethod
    def daily_processing_count(cls, user_id: str, date_key: str) -> str:
        """Per-day dispatch counter."""
        return cls._join(cls.user_collection(user_id, cls.DAILY_PROCESSING_COUNT), date_key)

    @classmethod
    def llm_logs(cls, user_id: str) -> str:
        """Append-only log of LLM interactions."""
        return cls.user_collection(user_id, cls.LLM_LOGS)

    @classmethod
    def tool_enrollments(cls, user_id: str) -> str:
        """Collection of handler enrollments."""
        return cls.user_collection(user_id, cls.TOOL_ENROLLMENTS)

    @classmethod
    def tool_enrollment(cls, user_id: str, handler_id: str) -> str:
        """A single handler enrollment."""
        return cls._join(cls.tool_enrollments(user_id), handler_id)

    @classmethod
    def subscription(cls, user_id: str) -> str:
        """Billing snapshot maintained by the subscription collaborator."""
        return cls._join(
            cls.user_collection(user_id, cls.SUBSCRIPTION_STATUS), cls.SUBSCRIPTION_CURRENT_ID
        )

    @classmethod
    def anonymous_session(cls, user_id: str) -> str:
        """Anonymous session record."""
        return cls._join(cls.ANONYMOUS_SESSIONS, user_id)
