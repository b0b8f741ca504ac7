import uuid
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_ticket_id() -> str:
    """Random 128-bit identifier rendered as a UUID string."""
    return str(uuid.uuid4())
