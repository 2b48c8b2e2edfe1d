"""Conversion of compact ``YYMMDDHHmm`` timestamps between timezones."""
from __future__ import annotations
import re
from datetime import datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import ConfigurationError, FormatError

COMPACT_TIME_FORMAT = "%y%m%d%H%M"
DEFAULT_COMMUNITY_TIMEZONE = "Asia/Shanghai"

_COMPACT_TIME_RE = re.compile(r"[0-9]{10}")


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Look up an IANA timezone name.

    Args:
        name: Zone name such as "Asia/Shanghai", or None for the system local zone

    Returns:
        ZoneInfo instance, or None meaning "system local"

    Raises:
        ConfigurationError: If the name is unknown
    """
    if name is None:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone: {name!r}") from exc


def parse_compact_time(time_str: str) -> datetime:
    """Parse a 10-character ``YYMMDDHHmm`` string into a naive datetime.

    Raises:
        FormatError: If the string is not five two-digit groups or not a valid date
    """
    if not isinstance(time_str, str) or not _COMPACT_TIME_RE.fullmatch(time_str):
        raise FormatError("time format error.")
    # two-digit years are always 20YY, unlike strptime's %y pivot
    year, month, day, hour, minute = (int(time_str[i:i + 2]) for i in range(0, 10, 2))
    try:
        return datetime(2000 + year, month, day, hour, minute)
    except ValueError as exc:
        raise FormatError("time format error.") from exc


def to_community_time(
    time_str: str,
    community_timezone: str = DEFAULT_COMMUNITY_TIMEZONE,
    local_timezone: Optional[str] = None,
) -> str:
    """Convert an operator-local compact time into community-local compact time.

    An empty string is returned unchanged. When both zone names are equal the
    input is returned as-is after format validation. ``local_timezone=None``
    means the interpreter's system zone.

    Args:
        time_str: ``YYMMDDHHmm`` in the operator's timezone
        community_timezone: IANA name of the community's zone
        local_timezone: IANA name of the operator's zone

    Returns:
        ``YYMMDDHHmm`` in the community's timezone

    Raises:
        FormatError: Malformed input
        ConfigurationError: Unknown timezone name
    """
    if time_str == "":
        return ""
    local_dt = parse_compact_time(time_str)
    if community_timezone == local_timezone:
        return time_str

    community_tz = resolve_timezone(community_timezone)
    local_tz = resolve_timezone(local_timezone)
    if local_tz is None:
        aware = local_dt.astimezone()
    else:
        aware = local_dt.replace(tzinfo=local_tz)
    return aware.astimezone(community_tz).strftime(COMPACT_TIME_FORMAT)


def truncate_to_hour(time_str: str) -> str:
    """Zero the minute field of a compact time; empty input stays empty."""
    if not time_str:
        return time_str
    return time_str[:-2] + "00"
