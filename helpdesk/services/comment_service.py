from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Protocol

from ..core.clock import utcnow
from ..core.config import settings
from ..core.errors import ValidationError
from ..core.permissions import assert_can_view, can_post_internal, deny
from ..core.roles import Actor
from ..models.comment import TicketComment
from .repository import TicketRepository
from .ticket_service import load_ticket

logger = logging.getLogger(__name__)


class HasComments(Protocol):
    comments: Iterable[TicketComment]


def _filter_visible(actor: Actor, comments: Iterable[TicketComment]) -> list[TicketComment]:
    if actor.is_staff:
        return list(comments)
    return [c for c in comments if not c.is_internal]


def visible_comments(actor: Actor, ticket: HasComments) -> list[TicketComment]:
    """Staff see every comment; reporters only the public ones."""
    return _filter_visible(actor, ticket.comments)


class CommentService:
    def __init__(
        self,
        repo: TicketRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
        strict_internal: bool | None = None,
    ):
        self.repo = repo
        self.clock = clock
        if strict_internal is None:
            strict_internal = settings.strict_internal_comments
        self.strict_internal = strict_internal

    def add_comment(
        self,
        actor: Actor,
        ticket_id: int,
        content: str,
        is_internal: bool = False,
    ) -> TicketComment:
        with self.repo.transaction():
            ticket = load_ticket(self.repo, ticket_id)
            assert_can_view(actor, ticket)

            text = (content or "").strip()
            if not text:
                raise ValidationError("Comment must not be empty")

            if is_internal and not can_post_internal(actor):
                if self.strict_internal:
                    raise deny(actor, "post_internal_comment", f"ticket:{ticket.id}")
                logger.info("internal flag dropped on comment by %s on ticket %s", actor.id, ticket.id)
                is_internal = False

            now = self.clock()
            comment = self.repo.insert_comment(
                TicketComment(
                    ticket=ticket,
                    user_id=actor.id,
                    content=text,
                    is_internal=is_internal,
                    created_at=now,
                )
            )
            self.repo.update_ticket(ticket, {"updated_at": now})

        return comment

    def list_comments(self, actor: Actor, ticket_id: int) -> list[TicketComment]:
        ticket = load_ticket(self.repo, ticket_id)
        assert_can_view(actor, ticket)
        return _filter_visible(actor, self.repo.list_comments(ticket.id))
