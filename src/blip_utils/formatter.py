# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
TimeFormatter - moment-style date tokens.

Host scripts write formats the way the host documents them (yyyy-MM-dd),
which mostly overlaps with moment.js tokens. The only host token that
means something different is ``dd`` (day of month for the host, weekday
for moment), so it is translated before rendering or parsing.

Supported tokens:
    YYYY yyyy YY yy        year
    M MM MMM MMMM          month (number, padded, short name, long name)
    D DD Do                day of month (number, padded, ordinal)
    d dd ddd dddd          weekday (0-6 Sunday first, min, short, long)
    H HH h hh              hour (24h, 12h)
    m mm s ss              minute, second
    S ... SSSSSSSSS        fraction of second (1-9 digits)
    A a                    meridiem
    Z ZZ                   UTC offset (+03:00, +0300)
    z zz                   zone abbreviation (render only)
    X x                    unix seconds, unix milliseconds
    [text]                 literal text
"""

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional, Tuple

from blip_utils.errors import InvalidDateError


DEFAULT_FORMAT = "YYYY-MM-DDTHH:mm:ss.SSSSSSSZ"

TOKEN_PATTERN = re.compile(
    r"\[[^\]]*\]|Do|YYYY|yyyy|YY|yy|MMMM|MMM|MM|M|DD|D|dddd|ddd|dd|d"
    r"|HH|H|hh|h|mm|m|ss|s|S{1,9}|A|a|ZZ|Z|zz|z|X|x"
)

# Host day-of-month token, only when not part of a longer run of d's.
# Bracketed literals are matched too so they can be skipped.
HOST_DAY_TOKEN = re.compile(r"\[[^\]]*\]|(?<!d)dd(?!d)")

LOCALES: Dict[str, Dict[str, Any]] = {
    "en": {
        "months": [
            "January", "February", "March", "April", "May", "June", "July",
            "August", "September", "October", "November", "December",
        ],
        "months_short": [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ],
        "weekdays": [
            "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
        ],
        "weekdays_short": ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
        "weekdays_min": ["Su", "Mo", "Tu", "We", "Th", "Fr", "Sa"],
        "meridiem": ("AM", "PM"),
    },
    "pt": {
        "months": [
            "janeiro", "fevereiro", "março", "abril", "maio", "junho", "julho",
            "agosto", "setembro", "outubro", "novembro", "dezembro",
        ],
        "months_short": [
            "jan", "fev", "mar", "abr", "mai", "jun",
            "jul", "ago", "set", "out", "nov", "dez",
        ],
        "weekdays": [
            "domingo", "segunda-feira", "terça-feira", "quarta-feira",
            "quinta-feira", "sexta-feira", "sábado",
        ],
        "weekdays_short": ["dom", "seg", "ter", "qua", "qui", "sex", "sáb"],
        "weekdays_min": ["do", "2ª", "3ª", "4ª", "5ª", "6ª", "sá"],
        "meridiem": ("AM", "PM"),
    },
}

DEFAULT_LOCALE = "en"


def _locale(culture: Optional[str]) -> Dict[str, Any]:
    """Resolve a culture such as 'en-US' or 'pt-BR' to its locale data.

    Unknown cultures fall back to English.
    """
    if not culture:
        return LOCALES[DEFAULT_LOCALE]
    language = culture.replace("_", "-").split("-")[0].lower()
    return LOCALES.get(language, LOCALES[DEFAULT_LOCALE])


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def _offset(dt: datetime, separator: str) -> str:
    delta = dt.utcoffset() or timedelta(0)
    total_minutes = int(delta.total_seconds() // 60)
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def _weekday(dt: datetime) -> int:
    """Weekday index with Sunday as 0."""
    return dt.isoweekday() % 7


def _alternation(names: List[str]) -> str:
    # Longest first so "March" wins over "Mar"
    return "|".join(re.escape(n) for n in sorted(set(names), key=len, reverse=True))


class TimeFormatter:
    """Stateless helpers for host format strings."""

    @staticmethod
    def default_format() -> str:
        return DEFAULT_FORMAT

    @staticmethod
    def replace_format_tokens(format: str) -> str:
        """Translate the host day-of-month token ``dd`` to ``DD``.

        Only the first standalone occurrence outside ``[literal]`` text
        is translated.
        """
        for match in HOST_DAY_TOKEN.finditer(format):
            if not match.group(0).startswith("["):
                return f"{format[:match.start()]}DD{format[match.end():]}"
        return format

    @staticmethod
    def normalize_format(format: Optional[str]) -> str:
        """Return the translated format, or the default when none given."""
        if not format:
            return DEFAULT_FORMAT
        return TimeFormatter.replace_format_tokens(format)

    @staticmethod
    def format_date(dt: datetime, format: str, culture: Optional[str] = None) -> str:
        """Render an aware datetime with moment-style tokens.

        Args:
            dt: Timezone-aware datetime, already in the zone to render.
            format: Format string (already translated).
            culture: Culture for month/weekday names (default English).

        Returns:
            Rendered string.
        """
        locale = _locale(culture)

        def render(match: "re.Match[str]") -> str:
            token = match.group(0)
            if token.startswith("["):
                return token[1:-1]
            if token in ("YYYY", "yyyy"):
                return f"{dt.year:04d}"
            if token in ("YY", "yy"):
                return f"{dt.year % 100:02d}"
            if token == "M":
                return str(dt.month)
            if token == "MM":
                return f"{dt.month:02d}"
            if token == "MMM":
                return locale["months_short"][dt.month - 1]
            if token == "MMMM":
                return locale["months"][dt.month - 1]
            if token == "D":
                return str(dt.day)
            if token == "DD":
                return f"{dt.day:02d}"
            if token == "Do":
                return _ordinal(dt.day)
            if token == "d":
                return str(_weekday(dt))
            if token == "dd":
                return locale["weekdays_min"][_weekday(dt)]
            if token == "ddd":
                return locale["weekdays_short"][_weekday(dt)]
            if token == "dddd":
                return locale["weekdays"][_weekday(dt)]
            if token == "H":
                return str(dt.hour)
            if token == "HH":
                return f"{dt.hour:02d}"
            if token in ("h", "hh"):
                hour = dt.hour % 12 or 12
                return str(hour) if token == "h" else f"{hour:02d}"
            if token == "m":
                return str(dt.minute)
            if token == "mm":
                return f"{dt.minute:02d}"
            if token == "s":
                return str(dt.second)
            if token == "ss":
                return f"{dt.second:02d}"
            if token.startswith("S"):
                return (f"{dt.microsecond:06d}" + "000")[: len(token)]
            if token in ("A", "a"):
                meridiem = locale["meridiem"][0 if dt.hour < 12 else 1]
                return meridiem if token == "A" else meridiem.lower()
            if token == "Z":
                return _offset(dt, ":")
            if token == "ZZ":
                return _offset(dt, "")
            if token in ("z", "zz"):
                return dt.tzname() or ""
            if token == "X":
                return str(int(dt.timestamp()))
            if token == "x":
                return str(int(dt.timestamp() * 1000))
            return token

        return TOKEN_PATTERN.sub(render, format)

    @staticmethod
    def parse(text: str, format: str, culture: Optional[str], zone: tzinfo) -> datetime:
        """Parse text against a moment-style format.

        The whole string must match. Fields missing from the format
        default to the current year, January, the 1st, and midnight.
        Values without an offset token are read as wall-clock time in
        ``zone``.

        Args:
            text: Date string to parse.
            format: Format string (already translated).
            culture: Culture for month/weekday/meridiem names.
            zone: Zone for values without an explicit offset.

        Returns:
            Timezone-aware datetime.

        Raises:
            InvalidDateError: If the text does not match or the fields
                do not form a valid calendar date.
        """
        locale = _locale(culture)
        pattern, fields = _compile(format, locale)
        match = pattern.fullmatch(text.strip())
        if not match:
            raise InvalidDateError("Date is invalid")

        values: Dict[str, str] = {}
        for group, field in fields:
            value = match.group(group)
            if value is not None:
                values[field] = value

        try:
            return _build(values, locale, zone)
        except (ValueError, OverflowError) as e:
            raise InvalidDateError(f"Date is invalid: {e}")


def _compile(format: str, locale: Dict[str, Any]) -> Tuple["re.Pattern[str]", List[Tuple[str, str]]]:
    """Build a regex for a format. Returns (pattern, [(group, field)])."""
    parts: List[str] = []
    fields: List[Tuple[str, str]] = []
    month_names = _alternation(locale["months"] + locale["months_short"])
    weekday_names = _alternation(
        locale["weekdays"] + locale["weekdays_short"] + locale["weekdays_min"]
    )
    meridiems = _alternation(list(locale["meridiem"]) + ["a.m.", "p.m."])

    def capture(field: str, regex: str) -> str:
        group = f"g{len(fields)}"
        fields.append((group, field))
        return f"(?P<{group}>{regex})"

    position = 0
    for match in TOKEN_PATTERN.finditer(format):
        parts.append(re.escape(format[position:match.start()]))
        position = match.end()
        token = match.group(0)

        if token.startswith("["):
            parts.append(re.escape(token[1:-1]))
        elif token in ("YYYY", "yyyy"):
            parts.append(capture("year", r"\d{4}"))
        elif token in ("YY", "yy"):
            parts.append(capture("year2", r"\d{2}"))
        elif token in ("M", "MM"):
            parts.append(capture("month", r"\d{1,2}"))
        elif token in ("MMM", "MMMM"):
            parts.append(capture("month_name", month_names))
        elif token in ("D", "DD"):
            parts.append(capture("day", r"\d{1,2}"))
        elif token == "Do":
            parts.append(capture("day", r"\d{1,2}") + r"(?:st|nd|rd|th|º|ª)?")
        elif token == "d":
            parts.append(r"[0-6]")
        elif token in ("dd", "ddd", "dddd"):
            parts.append(f"(?:{weekday_names})")
        elif token in ("H", "HH", "h", "hh"):
            parts.append(capture("hour", r"\d{1,2}"))
        elif token in ("m", "mm"):
            parts.append(capture("minute", r"\d{1,2}"))
        elif token in ("s", "ss"):
            parts.append(capture("second", r"\d{1,2}"))
        elif token.startswith("S"):
            parts.append(capture("fraction", r"\d{1,9}"))
        elif token in ("A", "a"):
            parts.append(capture("meridiem", meridiems))
        elif token in ("Z", "ZZ"):
            parts.append(capture("offset", r"Z|[+-]\d{2}:?\d{2}"))
        elif token in ("z", "zz"):
            parts.append(r"[A-Za-z]+")
        elif token == "X":
            parts.append(capture("unix", r"-?\d+(?:\.\d+)?"))
        elif token == "x":
            parts.append(capture("unix_ms", r"-?\d+"))

    parts.append(re.escape(format[position:]))
    return re.compile("".join(parts), re.IGNORECASE), fields


def _build(values: Dict[str, str], locale: Dict[str, Any], zone: tzinfo) -> datetime:
    """Assemble parsed fields into an aware datetime."""
    if "unix" in values:
        return datetime.fromtimestamp(float(values["unix"]), tz=timezone.utc)
    if "unix_ms" in values:
        return datetime.fromtimestamp(int(values["unix_ms"]) / 1000, tz=timezone.utc)

    if "year" in values:
        year = int(values["year"])
    elif "year2" in values:
        short = int(values["year2"])
        year = short + (1900 if short > 68 else 2000)
    else:
        year = datetime.now(zone).year

    month = 1
    if "month" in values:
        month = int(values["month"])
    elif "month_name" in values:
        name = values["month_name"].lower()
        for names in (locale["months"], locale["months_short"]):
            lowered = [n.lower() for n in names]
            if name in lowered:
                month = lowered.index(name) + 1
                break

    hour = int(values.get("hour", 0))
    meridiem = values.get("meridiem")
    if meridiem:
        is_pm = meridiem.lower().startswith("p")
        if hour > 12:
            raise ValueError(f"hour {hour} is not valid with a meridiem")
        if is_pm and hour < 12:
            hour += 12
        elif not is_pm and hour == 12:
            hour = 0

    microsecond = 0
    if "fraction" in values:
        microsecond = int((values["fraction"] + "000000")[:6])

    tz: tzinfo = zone
    if "offset" in values:
        tz = _parse_offset(values["offset"])

    return datetime(
        year,
        month,
        int(values.get("day", 1)),
        hour,
        int(values.get("minute", 0)),
        int(values.get("second", 0)),
        microsecond,
        tzinfo=tz,
    )


def _parse_offset(text: str) -> tzinfo:
    if text.upper() == "Z":
        return timezone.utc
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return timezone(sign * delta)
