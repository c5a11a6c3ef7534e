from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, DateTime, ForeignKey

from ..core.clock import utcnow
from .user import Base

if TYPE_CHECKING:
    from .ticket import Ticket

class TicketEvent(Base):
    __tablename__ = "ticket_events"

    id: Mapped[int] = mapped_column(primary_key=True)

    ticket_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tickets.id", ondelete="CASCADE"), index=True
    )
    actor_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("profiles.id")
    )

    # ticket_created | assigned | status_changed | priority_changed | attachment_added
    type: Mapped[str] = mapped_column(String(32), default="status_changed")

    from_value: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    to_value: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow
    )

    ticket: Mapped["Ticket"] = relationship(back_populates="events")
