from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC, the form every timestamp column stores
    return datetime.now(timezone.utc).replace(tzinfo=None)
