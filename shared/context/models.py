"""
Processing context models.
"""

from pydantic import BaseModel, Field


class ContextGoal(BaseModel):
    """Active goal."""

    id: str
    title: str = ""
    objective: str = ""


class ContextProject(BaseModel):
    """Active project."""

    id: str
    title: str = ""
    description: str | None = None


class ContextPerson(BaseModel):
    """Person from the user's relationships."""

    id: str
    name: str = ""
    short_name: str = ""
    relationship_type: str | None = None


class ContextTask(BaseModel):
    """Active task."""

    id: str
    title: str = ""
    category: str | None = None


class ContextMood(BaseModel):
    """Recent mood entry."""

    value: int | float = 5
    note: str | None = None


class ProcessingContext(BaseModel):
    """User context sent to the LLM alongside a thought."""

    goals: list[ContextGoal] = Field(default_factory=list)
    projects: list[ContextProject] = Field(default_factory=list)
    people: list[ContextPerson] = Field(default_factory=list)
    tasks: list[ContextTask] = Field(default_factory=list)
    moods: list[ContextMood] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Whether no context was found."""
        return not (self.goals or self.projects or self.people or self.tasks or self.moods)
