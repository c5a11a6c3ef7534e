from __future__ import annotations

import os
from datetime import datetime
from uuid import uuid4

from .clock import utcnow


def _date_path(dt: datetime | None) -> str:
    # folders are YYYY/MM/DD in UTC
    base = dt or utcnow()
    return base.strftime("%Y/%m/%d")


def _ext_from_filename(filename: str | None) -> str:
    _, ext = os.path.splitext((filename or "").lower())
    return ext


def ticket_evidence_key(*, ticket_id: int, uploaded_at: datetime | None, filename: str | None) -> str:
    date_path = _date_path(uploaded_at)
    ext = _ext_from_filename(filename)
    return f"tickets/{date_path}/{ticket_id}/evidence/{uuid4().hex}{ext}"
