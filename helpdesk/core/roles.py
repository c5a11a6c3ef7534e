from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    reporter = "reporter"
    technician = "technician"
    admin = "admin"


# labels used by the identity provider's user metadata
ROLE_ALIASES: dict[str, Role] = {
    "pelapor": Role.reporter,
    "teknisi": Role.technician,
}

STAFF_ROLES = {Role.technician, Role.admin}


def parse_role(raw: str | Role | None, default: Role | None = None) -> Role | None:
    if raw is None or raw == "":
        return default
    if isinstance(raw, Role):
        return raw
    value = str(raw).strip().lower()
    if value in ROLE_ALIASES:
        return ROLE_ALIASES[value]
    try:
        return Role(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of an engine operation."""

    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
