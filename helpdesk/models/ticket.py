from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey

from ..core.clock import utcnow
from .user import Base, Profile
from .category import Category

class Ticket(Base):
    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String(32), default="open", index=True)
    priority: Mapped[str] = mapped_column(String(16), default="medium")
    category_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("categories.id"), nullable=True)

    reporter_id: Mapped[str] = mapped_column(String(64), ForeignKey("profiles.id"), index=True)
    assignee_id: Mapped[str | None] = mapped_column(String(64), ForeignKey("profiles.id"), nullable=True, index=True)

    attachment_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # bumped by the ORM on every UPDATE; stale flushes raise StaleDataError
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    reporter: Mapped[Profile] = relationship(foreign_keys=[reporter_id], lazy="selectin")
    assignee: Mapped[Profile | None] = relationship(foreign_keys=[assignee_id], lazy="selectin")
    category: Mapped[Category | None] = relationship(lazy="selectin")
    comments: Mapped[list["TicketComment"]] = relationship(
        back_populates="ticket",
        order_by="TicketComment.id",
        cascade="all, delete-orphan",
    )
    events: Mapped[list["TicketEvent"]] = relationship(
        back_populates="ticket",
        cascade="all, delete-orphan",
    )


from .comment import TicketComment  # noqa: E402,F401
from .event import TicketEvent  # noqa: E402,F401
