from __future__ import annotations

from datetime import datetime
from enum import Enum

from .errors import InvalidStatusError, ValidationError


class TicketStatus(str, Enum):
    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"


class TicketPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


RESOLVED_STATUSES = {TicketStatus.resolved, TicketStatus.closed}

# Flat state machine: every status may move to every other one; who may move
# it is decided by permissions, not by adjacency.
ALLOWED_TRANSITIONS: dict[TicketStatus, set[TicketStatus]] = {
    src: {dst for dst in TicketStatus if dst != src} for src in TicketStatus
}


def can_transition(src: TicketStatus, dst: TicketStatus) -> bool:
    return dst in ALLOWED_TRANSITIONS.get(src, set())


def parse_status(raw: str | TicketStatus) -> TicketStatus:
    if isinstance(raw, TicketStatus):
        return raw
    try:
        return TicketStatus(str(raw).strip())
    except ValueError:
        raise InvalidStatusError(f"Invalid status: {raw}")


def parse_priority(raw: str | TicketPriority | None) -> TicketPriority:
    if raw is None:
        return TicketPriority.medium
    if isinstance(raw, TicketPriority):
        return raw
    try:
        return TicketPriority(str(raw).strip())
    except ValueError:
        raise ValidationError(f"Invalid priority: {raw}")


def resolved_at_after(
    src: TicketStatus,
    dst: TicketStatus,
    current: datetime | None,
    now: datetime,
    *,
    clear_on_reopen: bool,
) -> datetime | None:
    """resolved_at value once the ticket moves from src to dst."""
    if dst in RESOLVED_STATUSES:
        return now
    if src in RESOLVED_STATUSES and clear_on_reopen:
        return None
    return current
