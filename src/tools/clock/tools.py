"""Clock provider tools - current time in an IANA time zone."""

from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.mcp.errors import HandlerError
from src.mcp.registry import CapabilityKind, CapabilityRegistry
from src.mcp.schema import Schema, StringField

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def load_zone(name: str) -> ZoneInfo:
    """Look up an IANA time zone, raising HandlerError if it does not exist."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise HandlerError(
            f"invalid time zone: {name}. "
            "Use an IANA time zone name such as America/New_York."
        )


def format_offset(moment: datetime) -> str:
    """Format a UTC offset as UTC+HH:MM / UTC-HH:MM."""
    offset = moment.utcoffset()
    total_minutes = int(offset.total_seconds() // 60) if offset else 0
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"UTC{sign}{hours:02d}:{minutes:02d}"


def describe_time(zone_name: str, now: datetime | None = None) -> dict[str, Any]:
    """
    Describe an instant in the given zone.

    Args:
        zone_name: IANA time zone name.
        now: Instant to describe (timezone-aware). Defaults to the current time.

    Returns:
        Local and UTC renderings, the UTC offset, and a millisecond timestamp.
    """
    zone = load_zone(zone_name)
    if now is None:
        now = datetime.now(timezone.utc)
    local = now.astimezone(zone)
    utc = now.astimezone(timezone.utc)

    return {
        "timezone": zone_name,
        "localTime": local.strftime("%Y-%m-%d %H:%M:%S"),
        "utcTime": utc.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "offset": format_offset(local),
        "timestamp": (now - EPOCH) // timedelta(milliseconds=1),
        "date": local.strftime("%Y-%m-%d"),
        "time": local.strftime("%H:%M:%S"),
    }


async def get_time_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle the get_time tool call."""
    return describe_time(arguments["timeZone"])


def register_tools(registry: CapabilityRegistry) -> None:
    """Register clock tools with the registry."""

    registry.register(
        CapabilityKind.TOOL,
        "get_time",
        Schema({
            "timeZone": StringField(
                description="IANA time zone name (e.g. America/New_York, Europe/London, Asia/Seoul)",
            ),
        }),
        get_time_handler,
        description="Returns the current date, time and UTC offset in the given time zone.",
    )
