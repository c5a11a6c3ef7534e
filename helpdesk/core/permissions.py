from __future__ import annotations

import logging
from typing import Protocol

from .errors import AuthorizationError
from .roles import Actor, Role

logger = logging.getLogger(__name__)


class OwnedTicket(Protocol):
    id: int
    reporter_id: str
    assignee_id: str | None


def can_create_ticket(actor: Actor) -> bool:
    return actor.role in (Role.reporter, Role.admin)


def can_view_ticket(actor: Actor, ticket: OwnedTicket) -> bool:
    if actor.is_admin:
        return True
    if actor.role == Role.technician:
        return ticket.assignee_id == actor.id
    return ticket.reporter_id == actor.id


def can_assign(actor: Actor) -> bool:
    return actor.is_admin


def can_work_ticket(actor: Actor, ticket: OwnedTicket) -> bool:
    """Status, priority and evidence changes: admin or the current assignee."""
    if actor.is_admin:
        return True
    return actor.role == Role.technician and ticket.assignee_id == actor.id


def can_post_internal(actor: Actor) -> bool:
    return actor.is_staff


def deny(actor: Actor, action: str, target: str | None = None) -> AuthorizationError:
    logger.info("denied %s for %s (%s) on %s", action, actor.id, actor.role.value, target or "-")
    return AuthorizationError("You may not perform this action")


def assert_can_view(actor: Actor, ticket: OwnedTicket) -> None:
    if not can_view_ticket(actor, ticket):
        raise deny(actor, "view", f"ticket:{ticket.id}")


def assert_can_work(actor: Actor, ticket: OwnedTicket, action: str) -> None:
    if not can_work_ticket(actor, ticket):
        raise deny(actor, action, f"ticket:{ticket.id}")


def assert_admin(actor: Actor, action: str) -> None:
    if not actor.is_admin:
        raise deny(actor, action)
