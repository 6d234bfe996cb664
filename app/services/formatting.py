# app/services/formatting.py
#
# Presentation helpers
# Pure functions that turn stored cents and UTC instants into display strings,
# plus the parser for the datetime-local form value they produce.

from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import config
from app.services.errors import InvalidInput

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# Value format of <input type="datetime-local">
INPUT_DATETIME_FORMAT = "%Y-%m-%dT%H:%M"


@lru_cache(maxsize=None)
def get_timezone(name: str = config.DISPLAY_TIMEZONE) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidInput(f"unknown timezone {name!r}") from e


def _as_utc(instant: datetime) -> datetime:
    # Stored timestamps are naive UTC
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def format_amount(minor_units: int) -> str:
    """
    Cents → major units with exactly two fraction digits, e.g. -1250 → "-12.50".
    """
    return f"{Decimal(int(minor_units)).scaleb(-2):.2f}"


def format_display_datetime(instant: datetime, tz: tzinfo | None = None) -> str:
    """
    UTC instant → "03 May 2024, 14:07" in the display timezone.
    """
    local = _as_utc(instant).astimezone(tz or get_timezone())
    return f"{local.day:02d} {MONTHS[local.month - 1]} {local.year:04d}, {local.hour:02d}:{local.minute:02d}"


def format_for_input(instant: datetime, tz: tzinfo | None = None) -> str:
    """
    UTC instant → "2024-05-03T14:07", the local-time value of a datetime-local input.
    """
    return _as_utc(instant).astimezone(tz or get_timezone()).strftime(INPUT_DATETIME_FORMAT)


def parse_form_input(value: str, tz: tzinfo | None = None) -> datetime:
    """
    Inverse of format_for_input: local "YYYY-MM-DDTHH:MM" → naive UTC datetime.
    """
    try:
        local = datetime.strptime(value.strip(), INPUT_DATETIME_FORMAT)
    except (AttributeError, ValueError) as e:
        raise InvalidInput(f"invalid datetime {value!r}, expected YYYY-MM-DDTHH:MM") from e

    aware = local.replace(tzinfo=tz or get_timezone())
    return aware.astimezone(timezone.utc).replace(tzinfo=None)
