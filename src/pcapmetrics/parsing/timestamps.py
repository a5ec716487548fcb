# src/pcapmetrics/parsing/timestamps.py
"""Timestamp parsing for the configured timestamp column.

Three kinds of format are accepted:

- Reference layouts written against Mon Jan 2 15:04:05 MST 2006, e.g.
  "2006-01-02T15:04:05Z07:00" or "Jan _2 15:04:05.000000". This is the
  format language existing pcap/tshark metric configurations are written in.
  A fractional second directly after the seconds element is accepted even
  when the layout does not mention it.
- Epoch formats: "unix" (seconds, optionally with a decimal fraction as in
  tshark's frame.time_epoch), "unix_ms", "unix_us" and "unix_ns".
- Any format containing "%" is handed to datetime.strptime().

Values without zone information are UTC. Precision below one microsecond
is truncated. Elements missing from a layout default to their zero value,
except the year, which defaults to 1 (the smallest year datetime supports).

Example:
    parser = TimestampParser("2006-01-02T15:04:05Z")
    parser.parse("2024-01-01T00:00:00Z")
    # datetime(2024, 1, 1, tzinfo=UTC)
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import MINYEAR, UTC, date, datetime, timedelta, timezone
from decimal import ROUND_FLOOR, Decimal
from functools import partial

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# Power of ten that turns a raw epoch value into seconds
_UNIX_SCALES: dict[str, int] = {
    "unix": 0,
    "unix_ms": 3,
    "unix_us": 6,
    "unix_ns": 9,
}

_UNIX_SECONDS_RE = re.compile(r"[+-]?\d+(?:\.\d+)?")
_UNIX_INTEGER_RE = re.compile(r"[+-]?\d+")

_LONG_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_SHORT_MONTHS = tuple(m[:3] for m in _LONG_MONTHS)
_LONG_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_SHORT_DAYS = tuple(d[:3] for d in _LONG_DAYS)

_OFFSET_PATTERNS: dict[str, str] = {
    "-070000": r"[+-]\d{6}",
    "-07:00:00": r"[+-]\d{2}:\d{2}:\d{2}",
    "-0700": r"[+-]\d{4}",
    "-07:00": r"[+-]\d{2}:\d{2}",
    "-07": r"[+-]\d{2}",
}


@dataclass(frozen=True, slots=True)
class _Element:
    """One layout element: what it parses into and the regex that captures it."""

    kind: str
    pattern: str


def _alternation(names: tuple[str, ...]) -> str:
    return "(?i:" + "|".join(names) + ")"


def _starts_with_lower(text: str) -> bool:
    return bool(text) and "a" <= text[0] <= "z"


def _next_element(layout: str, i: int) -> tuple[_Element, int] | None:
    """Identify the layout element starting at layout[i].

    Returns:
        (element, length) or None if layout[i] starts literal text.
    """
    rest = layout[i:]
    c = rest[0]

    if c == "J" and rest.startswith("Jan"):
        if rest.startswith("January"):
            return _Element("month_name", _alternation(_LONG_MONTHS)), 7
        if not _starts_with_lower(rest[3:]):
            return _Element("month_abbr", _alternation(_SHORT_MONTHS)), 3
    elif c == "M":
        if rest.startswith("Mon"):
            if rest.startswith("Monday"):
                return _Element("weekday", _alternation(_LONG_DAYS)), 6
            if not _starts_with_lower(rest[3:]):
                return _Element("weekday", _alternation(_SHORT_DAYS)), 3
        if rest.startswith("MST"):
            return _Element("zone_name", r"UTC|GMT(?:[+-]\d{1,2})?|[A-Z]{3,5}"), 3
    elif c == "0":
        if len(rest) >= 2 and "1" <= rest[1] <= "6":
            kind = {"1": "month", "2": "day", "3": "hour12", "4": "minute", "5": "second", "6": "year2"}[rest[1]]
            return _Element(kind, r"\d{2}"), 2
        if rest.startswith("002"):
            return _Element("yday", r"\d{3}"), 3
    elif c == "1":
        if rest.startswith("15"):
            return _Element("hour", r"\d{1,2}"), 2
        return _Element("month", r"\d{1,2}"), 1
    elif c == "2":
        if rest.startswith("2006"):
            return _Element("year", r"\d{4}"), 4
        return _Element("day", r"\d{1,2}"), 1
    elif c == "_":
        if rest.startswith("_2"):
            if rest.startswith("_2006"):
                # A literal underscore followed by the long year
                return None
            return _Element("day", r" ?(?:\d{1,2})"), 2
        if rest.startswith("__2"):
            return _Element("yday", r" {0,2}(?:\d{1,3})"), 3
    elif c == "3":
        return _Element("hour12", r"\d{1,2}"), 1
    elif c == "4":
        return _Element("minute", r"\d{1,2}"), 1
    elif c == "5":
        return _Element("second", r"\d{1,2}"), 1
    elif c == "P" and rest.startswith("PM"):
        return _Element("ampm", r"AM|PM"), 2
    elif c == "p" and rest.startswith("pm"):
        return _Element("ampm", r"am|pm"), 2
    elif c in "-Z":
        for offset_layout, pattern in _OFFSET_PATTERNS.items():
            candidate = c + offset_layout[1:]
            if rest.startswith(candidate):
                if c == "Z":
                    return _Element("offset", "Z|" + pattern), len(candidate)
                return _Element("offset", pattern), len(candidate)
    elif c in ".,":
        if len(rest) >= 2 and rest[1] in "09":
            j = 1
            while j < len(rest) and rest[j] == rest[1]:
                j += 1
            if not (j < len(rest) and rest[j].isdigit()):
                if rest[1] == "0":
                    return _Element("fraction", rf"[.,]\d{{{j - 1}}}"), j
                return _Element("fraction_optional", r"(?:[.,]\d+)?"), j
    return None


def _compile_layout(layout: str) -> tuple[re.Pattern[str], tuple[str, ...]]:
    """Translate a reference layout into a regex with one group per element."""
    parts: list[str] = []
    kinds: list[str] = []
    i = 0
    while i < len(layout):
        found = _next_element(layout, i)
        if found is None:
            parts.append(re.escape(layout[i]))
            i += 1
            continue
        element, length = found
        parts.append(f"({element.pattern})")
        kinds.append(element.kind)
        i += length
        if element.kind == "second":
            following = _next_element(layout, i) if i < len(layout) else None
            if following is None or following[0].kind not in ("fraction", "fraction_optional"):
                parts.append(r"((?:[.,]\d+)?)")
                kinds.append("fraction_optional")
    return re.compile("".join(parts)), tuple(kinds)


def _parse_offset(text: str) -> timezone:
    if text == "Z":
        return UTC
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours = int(digits[0:2])
    minutes = int(digits[2:4] or 0)
    seconds = int(digits[4:6] or 0)
    return timezone(sign * timedelta(hours=hours, minutes=minutes, seconds=seconds))


def _parse_zone_name(text: str) -> timezone:
    if text in ("UTC", "GMT"):
        return UTC
    if text.startswith("GMT"):
        return timezone(timedelta(hours=int(text[3:])), text)
    # Unknown abbreviations carry a zero offset under their own name
    return timezone(timedelta(0), text)


def _fraction_to_micros(text: str) -> int:
    digits = text.lstrip(".,")
    if not digits:
        return 0
    return int(digits[:6].ljust(6, "0"))


class _ReferenceLayout:
    """A compiled reference layout."""

    def __init__(self, layout: str) -> None:
        self.layout = layout
        self._regex, self._kinds = _compile_layout(layout)

    def parse(self, value: str) -> datetime:
        match = self._regex.fullmatch(value)
        if match is None:
            raise ValueError(f'cannot parse "{value}" as "{self.layout}"')

        year = MINYEAR
        month: int | None = None
        day: int | None = None
        yday: int | None = None
        hour = minute = second = micros = 0
        hour12: int | None = None
        ampm: str | None = None
        tz: timezone = UTC

        for kind, text in zip(self._kinds, match.groups(), strict=True):
            if kind == "year":
                year = int(text)
            elif kind == "year2":
                short = int(text)
                year = short + (1900 if short >= 69 else 2000)
            elif kind == "month":
                month = int(text)
            elif kind == "month_name":
                month = [m.lower() for m in _LONG_MONTHS].index(text.lower()) + 1
            elif kind == "month_abbr":
                month = [m.lower() for m in _SHORT_MONTHS].index(text.lower()) + 1
            elif kind == "day":
                day = int(text)
            elif kind == "yday":
                yday = int(text)
            elif kind == "hour":
                hour = int(text)
            elif kind == "hour12":
                hour12 = int(text)
                if hour12 > 12:
                    raise ValueError(f'hour out of range in "{value}"')
            elif kind == "minute":
                minute = int(text)
            elif kind == "second":
                second = int(text)
            elif kind in ("fraction", "fraction_optional"):
                micros = _fraction_to_micros(text)
            elif kind == "ampm":
                ampm = text.upper()
            elif kind == "offset":
                tz = _parse_offset(text)
            elif kind == "zone_name":
                tz = _parse_zone_name(text)
            # weekday names are validated by the regex and otherwise ignored

        if hour12 is not None:
            hour = hour12
        if ampm == "PM" and hour < 12:
            hour += 12
        elif ampm == "AM" and hour == 12:
            hour = 0

        if yday is not None:
            days_in_year = (date(year + 1, 1, 1) - date(year, 1, 1)).days if year < 9999 else 365
            if not 1 <= yday <= days_in_year:
                raise ValueError(f'day-of-year out of range in "{value}"')
            ordinal = date(year, 1, 1) + timedelta(days=yday - 1)
            if (month is not None and month != ordinal.month) or (day is not None and day != ordinal.day):
                raise ValueError(f'day-of-year does not match month and day in "{value}"')
            month, day = ordinal.month, ordinal.day

        return datetime(
            year,
            1 if month is None else month,
            1 if day is None else day,
            hour,
            minute,
            second,
            micros,
            tzinfo=tz,
        )


def _parse_unix(value: str, scale: int) -> datetime:
    pattern = _UNIX_SECONDS_RE if scale == 0 else _UNIX_INTEGER_RE
    if pattern.fullmatch(value) is None:
        raise ValueError(f'cannot parse "{value}" as an epoch timestamp')
    micros = (Decimal(value) * 10**6 / 10**scale).to_integral_value(rounding=ROUND_FLOOR)
    return _EPOCH + timedelta(microseconds=int(micros))


class TimestampParser:
    """Parses timestamp cells with one configured format.

    The format is compiled once; parse() is called for every record.
    parse() raises ValueError for any value that does not match.
    """

    def __init__(self, fmt: str) -> None:
        self.format = fmt
        self._parse: Callable[[str], datetime]
        if fmt in _UNIX_SCALES:
            self._parse = partial(_parse_unix, scale=_UNIX_SCALES[fmt])
        elif "%" in fmt:
            self._parse = self._parse_strptime
        else:
            self._parse = _ReferenceLayout(fmt).parse

    def _parse_strptime(self, value: str) -> datetime:
        parsed = datetime.strptime(value, self.format)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed

    def parse(self, value: str) -> datetime:
        try:
            return self._parse(value)
        except OverflowError as e:
            raise ValueError(f'timestamp "{value}" is out of range: {e}') from e
