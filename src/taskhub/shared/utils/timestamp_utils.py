"""
Epoch-millisecond timestamp helpers.

All persisted timestamps are stored as integer epoch milliseconds (UTC).
These helpers convert between that representation, datetimes and ISO 8601
strings at the API boundary.
"""

from datetime import datetime, timezone
from typing import Optional, Union

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


def now_epoch_ms() -> int:
    """Current UTC time in epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def epoch_ms_to_datetime(epoch_ms: int) -> datetime:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)


def epoch_ms_to_iso8601(epoch_ms: Optional[int]) -> Optional[str]:
    """Convert epoch milliseconds to an ISO 8601 string with millisecond precision."""
    if epoch_ms is None:
        return None
    dt = epoch_ms_to_datetime(int(epoch_ms))
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def datetime_to_epoch_ms(value: datetime) -> int:
    # Naive datetimes are treated as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def to_epoch_ms(value: Union[None, int, float, str, datetime]) -> Optional[int]:
    """
    Coerce an API-supplied date value into epoch milliseconds.

    Accepts epoch milliseconds, datetimes, and ISO 8601 strings (date-only
    strings resolve to midnight UTC). Empty strings become None.

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid date value: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        return datetime_to_epoch_ms(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime_to_epoch_ms(datetime.fromisoformat(text))
        except ValueError:
            raise ValueError(f"Invalid date format: {value!r}") from None
    raise ValueError(f"Invalid date value: {value!r}")
