"""Base helpers for style domain models."""

from datetime import UTC, datetime
from uuid import uuid4


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid4())
