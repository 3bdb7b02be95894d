"""Timezone-aware date parsing and formatting.

Emulates the ``time`` object the host injects into scripts. Every
instance carries its own default timezone, passed explicitly into each
parse and format call, so the zone of the machine running the script
never shows up in script output.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from blip_utils.errors import InvalidDateError, InvalidTimeZoneError
from blip_utils.formatter import TimeFormatter

if TYPE_CHECKING:
    from blip_utils.config import HostConfig

logger = logging.getLogger(__name__)

DEFAULT_TIME_ZONE = "America/Sao_Paulo"
DEFAULT_CULTURE = "en-US"

DATE_STRING_FORMAT = "ddd MMM DD YYYY"
TIME_STRING_FORMAT = "HH:mm:ss [GMT]ZZ"
FULL_STRING_FORMAT = f"{DATE_STRING_FORMAT} {TIME_STRING_FORMAT}"


@lru_cache(maxsize=None)
def get_zone(name: str) -> ZoneInfo:
    """Look up a tz database zone.

    Raises:
        InvalidTimeZoneError: If the identifier is unknown or malformed.
    """
    if not name or not isinstance(name, str):
        raise InvalidTimeZoneError(f"Invalid time zone: {name!r}")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimeZoneError(f"Unknown time zone '{name}': {e}")


@dataclass(frozen=True)
class ZonedDate:
    """An instant paired with the timezone it should be rendered in."""

    instant: datetime
    time_zone: str

    def __post_init__(self) -> None:
        if self.instant.tzinfo is None:
            raise ValueError("ZonedDate requires a timezone-aware datetime")
        object.__setattr__(self, "instant", self.instant.astimezone(get_zone(self.time_zone)))

    @property
    def timestamp_ms(self) -> int:
        """Milliseconds since the unix epoch."""
        return int(self.instant.timestamp() * 1000)

    def to_datetime(self) -> datetime:
        """The instant as an aware datetime in this date's zone."""
        return self.instant

    def with_zone(self, time_zone: str) -> "ZonedDate":
        return ZonedDate(self.instant, time_zone)

    def format(self, format: str, culture: Optional[str] = None) -> str:
        return TimeFormatter.format_date(self.instant, TimeFormatter.normalize_format(format), culture)

    def to_date_string(self) -> str:
        """e.g. ``Mon Jan 15 2024``"""
        return TimeFormatter.format_date(self.instant, DATE_STRING_FORMAT)

    def to_time_string(self) -> str:
        """e.g. ``00:00:00 GMT-0300``"""
        return TimeFormatter.format_date(self.instant, TIME_STRING_FORMAT)

    def to_string(self) -> str:
        return TimeFormatter.format_date(self.instant, FULL_STRING_FORMAT)

    def __str__(self) -> str:
        return self.to_string()


DateInput = Union[str, datetime, ZonedDate, int, float]


class Time:
    """Date helpers bound to a default timezone."""

    def __init__(self, default_time_zone: Optional[str] = None):
        """
        Initialize with a default timezone.

        Args:
            default_time_zone: tz database identifier used when a call
                does not pass one. Defaults to DEFAULT_TIME_ZONE.

        Raises:
            InvalidTimeZoneError: If the zone is unknown.
        """
        self.default_time_zone = default_time_zone or DEFAULT_TIME_ZONE
        get_zone(self.default_time_zone)

    @classmethod
    def from_config(cls, config: "HostConfig") -> "Time":
        """Build from host configuration.

        The bot timezone is only used when the host enables it; otherwise
        the fallback zone applies.
        """
        if config.use_bot_timezone and config.bot_timezone:
            return cls(config.bot_timezone)
        return cls()

    def parse_date(
        self,
        date: DateInput,
        format: Optional[str] = None,
        culture: Optional[str] = None,
        time_zone: Optional[str] = None,
    ) -> ZonedDate:
        """
        Parse a date and convert it to a timezone.

        Strings without an offset are read as wall-clock time in the
        instance's default zone, then converted to ``time_zone``.

        Args:
            date: String, datetime, ZonedDate, or epoch milliseconds.
            format: Host format string. Without one, ISO 8601 and
                RFC 2822 are detected.
            culture: Culture for month and weekday names (default en-US).
            time_zone: Target zone (default: instance default).

        Returns:
            ZonedDate in the target zone.

        Raises:
            InvalidDateError: If the date cannot be parsed.
            InvalidTimeZoneError: If a zone is unknown.
        """
        target = time_zone or self.default_time_zone
        get_zone(target)

        if format and isinstance(date, str):
            instant = TimeFormatter.parse(
                date,
                TimeFormatter.replace_format_tokens(format),
                culture or DEFAULT_CULTURE,
                get_zone(self.default_time_zone),
            )
        else:
            instant = self._to_instant(date)

        logger.debug(f"Parsed {date!r} as {instant.isoformat()} ({target})")
        return ZonedDate(instant, target)

    def date_to_string(
        self,
        date: DateInput,
        format: Optional[str] = None,
        time_zone: Optional[str] = None,
    ) -> str:
        """
        Render a date in a timezone.

        Args:
            date: String, datetime, ZonedDate, or epoch milliseconds.
            format: Host format string (default: DEFAULT_FORMAT, 7
                fractional digits and a numeric offset).
            time_zone: Zone to render in (default: instance default).

        Returns:
            Formatted date string.
        """
        zone = get_zone(time_zone or self.default_time_zone)
        instant = self._to_instant(date).astimezone(zone)
        return TimeFormatter.format_date(instant, TimeFormatter.normalize_format(format))

    async def sleep(self, milliseconds: float) -> None:
        """Suspend the calling script for about ``milliseconds``."""
        await asyncio.sleep(max(milliseconds, 0) / 1000)

    def _to_instant(self, date: Any) -> datetime:
        """Convert any supported input to an aware datetime."""
        zone = get_zone(self.default_time_zone)

        if isinstance(date, ZonedDate):
            return date.instant
        if isinstance(date, datetime):
            return date if date.tzinfo is not None else date.replace(tzinfo=zone)
        if isinstance(date, bool):
            raise InvalidDateError("Date is invalid")
        if isinstance(date, (int, float)):
            try:
                return datetime.fromtimestamp(date / 1000, tz=timezone.utc)
            except (ValueError, OverflowError, OSError) as e:
                raise InvalidDateError(f"Date is invalid: {e}")
        if isinstance(date, str):
            parsed = _detect(date.strip())
            if parsed is None:
                raise InvalidDateError("Date is invalid")
            return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=zone)

        raise InvalidDateError("Date is invalid")


def _detect(text: str) -> Optional[datetime]:
    """Locale-free detection: ISO 8601, then RFC 2822."""
    if not text:
        return None

    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        pass

    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
