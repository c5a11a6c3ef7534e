from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.errors import ConflictError, PersistenceError, ValidationError
from ..models.user import Profile
from ..models.category import Category
from ..models.ticket import Ticket
from ..models.comment import TicketComment
from ..models.event import TicketEvent

logger = logging.getLogger(__name__)


@dataclass
class TicketFilter:
    reporter_id: str | None = None
    assignee_id: str | None = None
    status: str | None = None
    priority: str | None = None
    category_id: int | None = None


class TicketRepository:
    """
    SQLAlchemy access for tickets and their satellites.

    Writes are staged on the session and committed by ``transaction()``; any
    driver failure rolls back and surfaces as PersistenceError.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def reading(self) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Ticket store read failed")
            raise PersistenceError(str(exc), cause=exc) from exc

    @contextmanager
    def transaction(self) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except StaleDataError as exc:
            self.session.rollback()
            raise ConflictError("Ticket was modified concurrently", cause=exc) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Ticket store write failed")
            raise PersistenceError(str(exc), cause=exc) from exc
        except BaseException:
            self.session.rollback()
            raise

    # tickets

    def get_ticket(self, ticket_id: int) -> Ticket | None:
        with self.reading():
            return self.session.get(Ticket, ticket_id)

    def list_tickets(self, flt: TicketFilter, limit: int, offset: int) -> tuple[list[Ticket], int]:
        stmt = select(Ticket)
        if flt.reporter_id is not None:
            stmt = stmt.where(Ticket.reporter_id == flt.reporter_id)
        if flt.assignee_id is not None:
            stmt = stmt.where(Ticket.assignee_id == flt.assignee_id)
        if flt.status is not None:
            stmt = stmt.where(Ticket.status == flt.status)
        if flt.priority is not None:
            stmt = stmt.where(Ticket.priority == flt.priority)
        if flt.category_id is not None:
            stmt = stmt.where(Ticket.category_id == flt.category_id)

        with self.reading():
            total = self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0
            tickets = self.session.scalars(
                stmt.order_by(Ticket.created_at.desc(), Ticket.id.desc()).limit(limit).offset(offset)
            ).all()
        return list(tickets), total

    def insert_ticket(self, ticket: Ticket) -> Ticket:
        self.session.add(ticket)
        self.session.flush()
        return ticket

    def update_ticket(self, ticket: Ticket, fields: dict) -> Ticket:
        for name, value in fields.items():
            setattr(ticket, name, value)
        self.session.flush()
        return ticket

    def delete_ticket(self, ticket: Ticket) -> None:
        self.session.delete(ticket)
        self.session.flush()

    # comments

    def insert_comment(self, comment: TicketComment) -> TicketComment:
        self.session.add(comment)
        self.session.flush()
        return comment

    def list_comments(self, ticket_id: int) -> list[TicketComment]:
        with self.reading():
            return list(
                self.session.scalars(
                    select(TicketComment)
                    .where(TicketComment.ticket_id == ticket_id)
                    .order_by(TicketComment.id.asc())
                ).all()
            )

    # profiles

    def get_profile(self, profile_id: str) -> Profile | None:
        with self.reading():
            return self.session.get(Profile, profile_id)

    def upsert_profile(self, profile_id: str, **fields) -> Profile:
        profile = self.session.get(Profile, profile_id)
        if profile is None:
            profile = Profile(id=profile_id, **fields)
            self.session.add(profile)
        else:
            for name, value in fields.items():
                setattr(profile, name, value)
        self.session.flush()
        return profile

    def list_profiles(self, role: str | None = None) -> list[Profile]:
        stmt = select(Profile)
        if role is not None:
            stmt = stmt.where(Profile.role == role)
        with self.reading():
            return list(self.session.scalars(stmt.order_by(Profile.full_name.asc(), Profile.id.asc())).all())

    # categories

    def get_category(self, category_id: int) -> Category | None:
        with self.reading():
            return self.session.get(Category, category_id)

    def get_category_by_name(self, name: str) -> Category | None:
        with self.reading():
            return self.session.scalar(select(Category).where(Category.name == name))

    def list_categories(self) -> list[Category]:
        with self.reading():
            return list(self.session.scalars(select(Category).order_by(Category.name.asc())).all())

    def insert_category(self, category: Category) -> Category:
        self.session.add(category)
        try:
            self.session.flush()
        except IntegrityError as exc:
            # unique name taken by a concurrent insert
            raise ValidationError(f"Category already exists: {category.name}", cause=exc) from exc
        return category

    # events

    def insert_event(self, event: TicketEvent) -> TicketEvent:
        self.session.add(event)
        return event

    def list_events(self, ticket_id: int) -> list[TicketEvent]:
        with self.reading():
            return list(
                self.session.scalars(
                    select(TicketEvent)
                    .where(TicketEvent.ticket_id == ticket_id)
                    .order_by(TicketEvent.created_at.desc(), TicketEvent.id.desc())
                ).all()
            )
