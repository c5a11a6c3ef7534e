from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, DateTime

from ..core.clock import utcnow
from .user import Base

DEFAULT_CATEGORY_COLOR = "#6366f1"

class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # display hint only
    color: Mapped[str] = mapped_column(String(16), default=DEFAULT_CATEGORY_COLOR)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
