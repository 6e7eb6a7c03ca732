from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Store clock. Timestamps are written naive and always mean UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: str | None) -> datetime | None:
    """
    Read a timestamp sent by a client (list due dates) into store form.

    A bare date means midnight UTC. An offset or trailing "Z" is folded into
    UTC; no offset is taken as UTC already. Blank input is no date at all.
    Raises ValueError for anything else.
    """
    text = (value or "").strip()
    if not text:
        return None

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_utc_z(dt: datetime | None) -> str | None:
    """Serialize a stored timestamp for JSON: whole seconds, trailing 'Z'."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.replace(microsecond=0).isoformat() + "Z"
