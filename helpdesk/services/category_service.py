from __future__ import annotations

import re

from ..core.errors import ValidationError
from ..core.permissions import assert_admin
from ..core.roles import Actor
from ..models.category import Category, DEFAULT_CATEGORY_COLOR
from .repository import TicketRepository

COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class CategoryService:
    def __init__(self, repo: TicketRepository):
        self.repo = repo

    def list_categories(self) -> list[Category]:
        return self.repo.list_categories()

    def create_category(
        self,
        actor: Actor,
        name: str,
        description: str | None = None,
        color: str | None = None,
    ) -> Category:
        assert_admin(actor, "create_category")

        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        color = (color or DEFAULT_CATEGORY_COLOR).strip()
        if not COLOR_RE.match(color):
            raise ValidationError(f"Invalid color: {color}")

        with self.repo.transaction():
            if self.repo.get_category_by_name(name) is not None:
                raise ValidationError(f"Category already exists: {name}")
            category = self.repo.insert_category(
                Category(name=name, description=(description or "").strip() or None, color=color)
            )
        return category
