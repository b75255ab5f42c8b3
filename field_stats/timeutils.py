"""Time parsing and formatting utilities."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Final

from zoneinfo import ZoneInfo

# Field Book writes "yyyy-MM-dd HH:mm:ss.SSSZZZZZ", e.g. "2024-06-01 09:30:15.250-05:00".
TIME_STAMP_PATTERN: Final[str] = "%Y-%m-%d %H:%M:%S.%f%z"
DAY_PATTERN: Final[str] = "%m-%d-%Y"


class TimestampParseError(ValueError):
    """An observation timestamp does not match the export format.

    Attributes:
        text: The offending value.
        index: Position of the record in its season, if known.
    """

    def __init__(self, text: object, index: int | None = None) -> None:
        self.text = text
        self.index = index
        where = f"（记录 #{index}）" if index is not None else ""
        super().__init__(f"无法解析时间戳{where}：{text!r}。期望格式：2024-06-01 09:30:15.250-05:00")


def tzinfo_from_name(tz_name: str | None) -> tzinfo | None:
    """Create tzinfo from an IANA timezone name.

    Args:
        tz_name: Timezone name like "America/Chicago". None selects the local zone.

    Returns:
        tzinfo instance, or None for the local zone.

    Raises:
        ValueError: If timezone name is invalid on this system.
    """

    if tz_name is None:
        return None
    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"无效时区：{tz_name!r}。例如可用：America/Chicago") from exc


def parse_time_stamp(text: str | None) -> datetime:
    """Parse an observation timestamp into an aware datetime.

    Args:
        text: Timestamp text with milliseconds and UTC offset.

    Returns:
        Timezone-aware datetime.

    Raises:
        TimestampParseError: If text is missing, malformed, or has no offset.
    """

    if not isinstance(text, str):
        raise TimestampParseError(text)
    try:
        return datetime.strptime(text.strip(), TIME_STAMP_PATTERN)
    except ValueError as exc:
        raise TimestampParseError(text) from exc


def format_time_stamp(dt: datetime) -> str:
    """Format an aware datetime in the export format (millisecond precision)."""

    if dt.tzinfo is None:
        raise ValueError("format_time_stamp 需要带时区的 datetime")
    return dt.isoformat(sep=" ", timespec="milliseconds")


def day_label(dt: datetime, tz_name: str | None = None) -> str:
    """Calendar day of an instant as "MM-dd-yyyy", in tz_name or the local zone."""

    return dt.astimezone(tzinfo_from_name(tz_name)).strftime(DAY_PATTERN)


def format_hhmmss(seconds: int) -> str:
    """Render whole seconds as HH:MM:SS.

    Hours are not wrapped at 24. Negative totals keep the sign on every non-zero
    part (-90 renders as "00:-1:-30"), matching truncating integer division.
    """

    sign = -1 if seconds < 0 else 1
    s = abs(int(seconds))
    h = s // 3600
    m = (s % 3600) // 60
    sec = s % 60
    return f"{sign * h:02d}:{sign * m:02d}:{sign * sec:02d}"
