"""
Processing context gatherer.

Reads a bounded snapshot of the user's goals, projects, people, tasks and
moods so the LLM can resolve references in a thought.
"""

from typing import Any

from shared.config.logging import get_logger
from shared.context.config import ContextSettings, get_context_settings
from shared.context.models import (
    ContextGoal,
    ContextMood,
    ContextPerson,
    ContextProject,
    ContextTask,
    ProcessingContext,
)
from shared.documents.base import DocumentSnapshot, DocumentStore, Filter, OrderBy
from shared.documents.paths import DocumentPaths

logger = get_logger(__name__)

ACTIVE_FILTER = Filter("status", "==", "active")


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _optional_text(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) and value else None


def short_name(name: str) -> str:
    """First word of a name, lowercased."""
    parts = name.strip().split()
    return parts[0].lower() if parts else ""


class ProcessingContextGatherer:
    """Collects per-user context for action extraction."""

    def __init__(self, store: DocumentStore, settings: ContextSettings | None = None):
        """
        Initialize gatherer.

        Args:
            store: Document store holding the user's collections
            settings: Context limits
        """
        self.store = store
        self.settings = settings or get_context_settings()

    async def _read(
        self,
        user_id: str,
        collection: str,
        limit: int,
        filters: list[Filter] | None = None,
        order_by: OrderBy | None = None,
    ) -> list[DocumentSnapshot]:
        if limit <= 0:
            return []
        return await self.store.query(
            DocumentPaths.user_collection(user_id, collection),
            filters=filters,
            limit=limit,
            order_by=order_by,
        )

    async def get_processing_context(self, user_id: str) -> ProcessingContext:
        """
        Gather context for a user.

        Args:
            user_id: User ID

        Returns:
            ProcessingContext with every section bounded by the settings
        """
        goals = await self._read(user_id, "goals", self.settings.max_goals, [ACTIVE_FILTER])
        projects = await self._read(
            user_id, "projects", self.settings.max_projects, [ACTIVE_FILTER]
        )
        people = await self._read(user_id, "relationships", self.settings.max_people)
        tasks = await self._read(user_id, "tasks", self.settings.max_tasks, [ACTIVE_FILTER])
        moods = await self._read(
            user_id,
            "moods",
            self.settings.max_moods,
            order_by=OrderBy("createdAt", descending=True),
        )

        context = ProcessingContext(
            goals=[
                ContextGoal(
                    id=snap.id,
                    title=_text(snap.to_dict(), "title"),
                    objective=_text(snap.to_dict(), "objective"),
                )
                for snap in goals
            ],
            projects=[
                ContextProject(
                    id=snap.id,
                    title=_text(snap.to_dict(), "title"),
                    description=_optional_text(snap.to_dict(), "description"),
                )
                for snap in projects
            ],
            people=[self._person(snap) for snap in people],
            tasks=[
                ContextTask(
                    id=snap.id,
                    title=_text(snap.to_dict(), "title"),
                    category=_optional_text(snap.to_dict(), "category"),
                )
                for snap in tasks
            ],
            moods=[self._mood(snap) for snap in moods],
        )

        logger.debug(
            "processing_context_gathered",
            user_id=user_id,
            goals=len(context.goals),
            projects=len(context.projects),
            people=len(context.people),
            tasks=len(context.tasks),
            moods=len(context.moods),
        )
        return context

    @staticmethod
    def _person(snapshot: DocumentSnapshot) -> ContextPerson:
        data = snapshot.to_dict()
        name = _text(data, "name")
        return ContextPerson(
            id=snapshot.id,
            name=name,
            short_name=short_name(name),
            relationship_type=_optional_text(data, "relationshipType"),
        )

    @staticmethod
    def _mood(snapshot: DocumentSnapshot) -> ContextMood:
        data = snapshot.to_dict()
        value = data.get("value")
        if isinstance(value, bool) or not isinstance(value, int | float):
            value = 5
        return ContextMood(value=value, note=_optional_text(data, "note"))


def format_context_for_prompt(context: ProcessingContext, max_tasks: int = 10) -> str:
    """
    Render context as prompt text.

    Empty sections are omitted; an empty context renders as an empty string.

    Args:
        context: Gathered context
        max_tasks: Tasks listed (the header still shows the full count)

    Returns:
        Context text
    """
    sections = []

    if context.goals:
        lines = [f"Goals ({len(context.goals)}):"]
        lines += [
            f'- ID: {goal.id}, Title: "{goal.title}", Objective: "{goal.objective}"'
            for goal in context.goals
        ]
        sections.append("\n".join(lines))

    if context.projects:
        lines = [f"Projects ({len(context.projects)}):"]
        for project in context.projects:
            line = f'- ID: {project.id}, Title: "{project.title}"'
            if project.description:
                line += f', Description: "{project.description}"'
            lines.append(line)
        sections.append("\n".join(lines))

    if context.people:
        lines = [f"People ({len(context.people)}):"]
        for person in context.people:
            line = f"- {person.name} (shortname: {person.short_name})"
            if person.relationship_type:
                line += f" ({person.relationship_type})"
            lines.append(line)
        sections.append("\n".join(lines))

    if context.tasks:
        lines = [f"Active Tasks ({len(context.tasks)}):"]
        for task in context.tasks[:max_tasks]:
            line = f"- {task.title}"
            if task.category:
                line += f" [{task.category}]"
            lines.append(line)
        sections.append("\n".join(lines))

    if context.moods:
        lines = [f"Recent Moods ({len(context.moods)}):"]
        for mood in context.moods:
            line = f"- {mood.value:g}/10"
            if mood.note:
                line += f" - {mood.note}"
            lines.append(line)
        sections.append("\n".join(lines))

    return "\n\n".join(sections)
