"""Role and ownership checks applied before engine operations."""

from elections.domain import Caller, Event
from elections.domain.errors import ForbiddenError


def require_authenticated(caller: Caller | None) -> Caller:
    if caller is None:
        raise ForbiddenError("Authentication required")
    return caller


def require_organizer(caller: Caller | None) -> Caller:
    caller = require_authenticated(caller)
    if not caller.is_organizer:
        raise ForbiddenError("Not authorized as an organizer")
    return caller


def require_owner(caller: Caller, event: Event) -> None:
    """Only the organizer who created the event passes."""
    if caller.id != event.created_by:
        raise ForbiddenError("Not authorized to modify this event")
