from sqlalchemy.orm import Session
from sqlalchemy import select

from ..models.category import Category


DEFAULT_CATEGORIES = [
    dict(name="Hardware", description="Laptops, desktops, printers and peripherals", color="#f97316"),
    dict(name="Software", description="Installed applications and licences", color="#6366f1"),
    dict(name="Network", description="Wi-Fi, VPN and connectivity", color="#0ea5e9"),
    dict(name="Account & Access", description="Logins, passwords and permissions", color="#22c55e"),
    dict(name="Email", description="Mailboxes and calendars", color="#eab308"),
    dict(name="Other", description="Anything else", color="#64748b"),
]


def seed_categories(session: Session) -> None:
    """Insert the default categories; existing names are left as they are."""
    for s in DEFAULT_CATEGORIES:
        exists = session.scalar(select(Category).where(Category.name == s["name"]))
        if exists:
            continue
        session.add(Category(**s))

    session.commit()
