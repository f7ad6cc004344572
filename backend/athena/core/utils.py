from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an RFC 822 (RSS) or ISO 8601 date string into an aware UTC datetime.

    Returns None for empty or unparseable input. Naive values are assumed UTC.
    """
    if not value:
        return None

    value = value.strip()
    parsed = None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def days_since(value: Optional[str], now: Optional[datetime] = None) -> Optional[float]:
    parsed = parse_date(value)
    if parsed is None:
        return None
    now = now or utc_now()
    return (now - parsed).total_seconds() / 86400
