"""
Request schemas for the processing API.
"""

from pydantic import Field

from shared.schemas.base import BaseSchema


class ProcessThoughtRequest(BaseSchema):
    """Body of a process-now request."""

    handler_ids: list[str] | None = Field(
        None, alias="handlerIds", description="Handlers to run (resolved from the thought if empty)"
    )


class ReprocessThoughtRequest(BaseSchema):
    """Body of a reprocess request."""

    revert_first: bool = Field(
        False, alias="revertFirst", description="Revert applied AI changes before reprocessing"
    )
    handler_ids: list[str] | None = Field(
        None, alias="handlerIds", description="Handlers to run (resolved from the thought if empty)"
    )
