"""
Dependency injection for the processing service.

The processing components are built once in the application lifespan and
stored on ``app.state``; these dependencies hand them to the routes.
"""

from typing import Annotated

from fastapi import Depends, Request

from shared.auth.dependencies import get_current_user
from shared.auth.models import UserIdentity
from shared.documents.base import DocumentStore
from shared.processing.factory import ProcessingComponents
from shared.processing.triggers import ProcessingTriggers


def get_components(request: Request) -> ProcessingComponents:
    """
    Get the processing components built at startup.

    Args:
        request: Current request

    Returns:
        ProcessingComponents
    """
    return request.app.state.components


def get_triggers(
    components: Annotated[ProcessingComponents, Depends(get_components)],
) -> ProcessingTriggers:
    """Processing trigger entry points."""
    return components.triggers


def get_document_store(
    components: Annotated[ProcessingComponents, Depends(get_components)],
) -> DocumentStore:
    """Document store used by the processing core."""
    return components.store


def get_user_id(user: Annotated[UserIdentity, Depends(get_current_user)]) -> str:
    """Authenticated caller's user id."""
    return user.user_id
