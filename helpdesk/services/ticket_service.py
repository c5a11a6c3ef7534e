from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from ..core.clock import utcnow
from ..core.config import settings
from ..core.errors import (
    ConflictError,
    HelpdeskError,
    InvalidAssigneeError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from ..core.permissions import (
    assert_admin,
    assert_can_view,
    assert_can_work,
    can_assign,
    can_create_ticket,
    deny,
)
from ..core.roles import Actor, Role, parse_role
from ..core.storage_keys import ticket_evidence_key
from ..core.ticket_rules import (
    TicketStatus,
    parse_priority,
    parse_status,
    resolved_at_after,
)
from ..models.event import TicketEvent
from ..models.ticket import Ticket
from .blob_store import BlobStore
from .repository import TicketFilter, TicketRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000


@dataclass
class TicketPage:
    items: list[Ticket]
    total: int
    limit: int
    offset: int


def load_ticket(repo: TicketRepository, ticket_id: int) -> Ticket:
    ticket = repo.get_ticket(ticket_id)
    if ticket is None:
        raise NotFoundError("Ticket not found")
    return ticket


def check_version(ticket: Ticket, expected_version: int | None) -> None:
    if expected_version is not None and ticket.version != expected_version:
        raise ConflictError(
            f"Ticket {ticket.id} is at version {ticket.version}, not {expected_version}"
        )


class TicketService:
    """
    Ticket lifecycle engine.

    Every operation takes the acting user explicitly, validates the request
    against the stored ticket and the actor's role, and commits one store
    transaction. Failures are raised as ``helpdesk.core.errors`` types.
    """

    def __init__(
        self,
        repo: TicketRepository,
        blobs: BlobStore | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        clear_resolved_on_reopen: bool | None = None,
    ):
        self.repo = repo
        self.blobs = blobs
        self.clock = clock
        if clear_resolved_on_reopen is None:
            clear_resolved_on_reopen = settings.clear_resolved_at_on_reopen
        self.clear_resolved_on_reopen = clear_resolved_on_reopen

    def _record(self, ticket: Ticket, actor: Actor, type_: str, from_value, to_value, now: datetime) -> None:
        self.repo.insert_event(
            TicketEvent(
                ticket=ticket,
                actor_id=actor.id,
                type=type_,
                from_value=from_value,
                to_value=to_value,
                created_at=now,
            )
        )

    def _discard_blob(self, url: str) -> None:
        if self.blobs is None:
            return
        try:
            self.blobs.delete(url)
        except Exception:
            logger.exception("Could not delete stored attachment %s", url)

    # queries

    def get_ticket(self, actor: Actor, ticket_id: int) -> Ticket:
        ticket = load_ticket(self.repo, ticket_id)
        assert_can_view(actor, ticket)
        return ticket

    def list_tickets(
        self,
        actor: Actor,
        *,
        status: str | None = None,
        priority: str | None = None,
        category_id: int | None = None,
        reporter_id: str | None = None,
        assignee_id: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> TicketPage:
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        if offset < 0:
            raise ValidationError("offset must not be negative")

        flt = TicketFilter(
            status=parse_status(status).value if status is not None else None,
            priority=parse_priority(priority).value if priority is not None else None,
            category_id=category_id,
        )
        # non-admins only ever see their own slice
        if actor.role == Role.reporter:
            flt.reporter_id = actor.id
        elif actor.role == Role.technician:
            flt.assignee_id = actor.id
        else:
            flt.reporter_id = reporter_id
            flt.assignee_id = assignee_id

        items, total = self.repo.list_tickets(flt, limit, offset)
        return TicketPage(items=items, total=total, limit=limit, offset=offset)

    def ticket_events(self, actor: Actor, ticket_id: int) -> list[TicketEvent]:
        ticket = self.get_ticket(actor, ticket_id)
        return self.repo.list_events(ticket.id)

    # commands

    def create_ticket(
        self,
        actor: Actor,
        title: str,
        description: str,
        priority: str | None = None,
        category_id: int | None = None,
    ) -> Ticket:
        if not can_create_ticket(actor):
            raise deny(actor, "create_ticket")

        title = (title or "").strip()
        description = (description or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if not description:
            raise ValidationError("Description is required")
        prio = parse_priority(priority)

        with self.repo.transaction():
            if category_id is not None and self.repo.get_category(category_id) is None:
                raise NotFoundError("Category not found")

            now = self.clock()
            ticket = self.repo.insert_ticket(
                Ticket(
                    title=title,
                    description=description,
                    status=TicketStatus.open.value,
                    priority=prio.value,
                    category_id=category_id,
                    reporter_id=actor.id,
                    assignee_id=None,
                    attachment_url=None,
                    created_at=now,
                    updated_at=now,
                    resolved_at=None,
                )
            )
            self._record(ticket, actor, "ticket_created", None, ticket.status, now)

        logger.info("ticket %s created by %s", ticket.id, actor.id)
        return ticket

    def assign_ticket(
        self,
        actor: Actor,
        ticket_id: int,
        assignee_id: str,
        expected_version: int | None = None,
    ) -> Ticket:
        if not can_assign(actor):
            raise deny(actor, "assign", f"ticket:{ticket_id}")

        with self.repo.transaction():
            ticket = load_ticket(self.repo, ticket_id)
            check_version(ticket, expected_version)

            assignee = self.repo.get_profile(assignee_id)
            if assignee is None:
                raise NotFoundError("Assignee not found")
            if parse_role(assignee.role) != Role.technician:
                raise InvalidAssigneeError("Tickets can only be assigned to technicians")

            # assignment always starts work
            src = TicketStatus(ticket.status)
            dst = TicketStatus.in_progress
            now = self.clock()
            previous_assignee = ticket.assignee_id
            fields = {"assignee_id": assignee.id, "updated_at": now}
            if src != dst:
                fields["status"] = dst.value
                fields["resolved_at"] = resolved_at_after(
                    src, dst, ticket.resolved_at, now, clear_on_reopen=self.clear_resolved_on_reopen
                )
            self.repo.update_ticket(ticket, fields)

            self._record(ticket, actor, "assigned", previous_assignee, assignee.id, now)
            if src != dst:
                self._record(ticket, actor, "status_changed", src.value, dst.value, now)

        logger.info("ticket %s assigned to %s by %s", ticket.id, assignee.id, actor.id)
        return ticket

    def update_status(
        self,
        actor: Actor,
        ticket_id: int,
        new_status: str,
        expected_version: int | None = None,
    ) -> Ticket:
        dst = parse_status(new_status)

        with self.repo.transaction():
            ticket = load_ticket(self.repo, ticket_id)
            assert_can_work(actor, ticket, "update_status")
            check_version(ticket, expected_version)

            # ALLOWED_TRANSITIONS is flat; only same-status moves need handling
            src = TicketStatus(ticket.status)
            if src == dst:
                return ticket

            now = self.clock()
            self.repo.update_ticket(
                ticket,
                {
                    "status": dst.value,
                    "updated_at": now,
                    "resolved_at": resolved_at_after(
                        src, dst, ticket.resolved_at, now, clear_on_reopen=self.clear_resolved_on_reopen
                    ),
                },
            )
            self._record(ticket, actor, "status_changed", src.value, dst.value, now)

        return ticket

    def update_priority(
        self,
        actor: Actor,
        ticket_id: int,
        priority: str,
        expected_version: int | None = None,
    ) -> Ticket:
        if priority is None:
            raise ValidationError("Priority is required")
        new_priority = parse_priority(priority)

        with self.repo.transaction():
            ticket = load_ticket(self.repo, ticket_id)
            assert_can_work(actor, ticket, "update_priority")
            check_version(ticket, expected_version)

            if ticket.priority == new_priority.value:
                return ticket

            now = self.clock()
            previous = ticket.priority
            self.repo.update_ticket(ticket, {"priority": new_priority.value, "updated_at": now})
            self._record(ticket, actor, "priority_changed", previous, new_priority.value, now)

        return ticket

    def evidence_target(self, actor: Actor, ticket_id: int, expected_version: int | None = None) -> Ticket:
        """Load the ticket an upload is for and check the actor may attach to it."""
        ticket = load_ticket(self.repo, ticket_id)
        assert_can_work(actor, ticket, "attach_evidence")
        check_version(ticket, expected_version)
        return ticket

    def attach_evidence(
        self,
        actor: Actor,
        ticket_id: int,
        data: bytes,
        filename: str | None = None,
        content_type: str | None = None,
        expected_version: int | None = None,
    ) -> str:
        ticket = self.evidence_target(actor, ticket_id, expected_version)
        if not data:
            raise ValidationError("Attachment is empty")
        if self.blobs is None:
            raise UploadError("No blob store configured")

        key = ticket_evidence_key(ticket_id=ticket.id, uploaded_at=self.clock(), filename=filename)
        try:
            url = self.blobs.upload(key, data, content_type or "application/octet-stream")
        except Exception as exc:
            logger.exception("Evidence upload failed for ticket %s", ticket.id)
            raise UploadError(str(exc), cause=exc) from exc

        try:
            with self.repo.transaction():
                ticket = load_ticket(self.repo, ticket_id)
                check_version(ticket, expected_version)
                now = self.clock()
                previous = ticket.attachment_url
                self.repo.update_ticket(ticket, {"attachment_url": url, "updated_at": now})
                self._record(ticket, actor, "attachment_added", previous, url, now)
        except HelpdeskError:
            self._discard_blob(url)
            raise

        return url

    def delete_ticket(self, actor: Actor, ticket_id: int) -> None:
        assert_admin(actor, "delete_ticket")

        with self.repo.transaction():
            ticket = load_ticket(self.repo, ticket_id)
            attachment_url = ticket.attachment_url
            self.repo.delete_ticket(ticket)

        logger.info("ticket %s deleted by %s", ticket_id, actor.id)
        if attachment_url:
            self._discard_blob(attachment_url)
