"""Date/time layout parsing shared by rules, builders and format checkers.

Layouts are either ``strptime`` format strings or one of the named layouts
below. ``strptime`` cannot express RFC3339 on its own (nanosecond fractions,
``Z`` vs numeric offsets), so the named layouts use dedicated parsers.
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable

RFC3339 = "RFC3339"
RFC3339_NANO = "RFC3339Nano"
ISO8601 = "ISO8601"
DATE_ONLY = "%Y-%m-%d"
TIME_ONLY = "%H:%M:%S"

_OFFSET = r"(?P<offset>Z|z|[+-]\d{2}:\d{2})"

_RFC3339_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})(?P<frac>\.\d+)?" + _OFFSET + r"$"
)
_RFC3339_NANO_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})(?P<frac>\.\d{1,9})" + _OFFSET + r"$"
)
_ISO8601_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})(?P<frac>\.\d{1,3})?" + _OFFSET + r"$"
)
_ISO8601_MILLIS_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})(?P<frac>\.\d{3})" + _OFFSET + r"$"
)
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}:\d{2}$")
_TIME_OFFSET_RE = re.compile(r"^(?P<time>\d{2}:\d{2}:\d{2})" + _OFFSET + r"$")


def _parse_offset(offset: str) -> timezone:
    if offset in ("Z", "z"):
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    hours, minutes = int(offset[1:3]), int(offset[4:6])
    if hours > 23 or minutes > 59:
        raise ValueError(f"offset out of range: {offset}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def _parse_matched(match: re.Match | None, value: str) -> datetime:
    if match is None:
        raise ValueError(f"cannot parse {value!r}")
    day = date.fromisoformat(match.group("date"))
    clock = datetime.strptime(match.group("time"), TIME_ONLY).time()
    micros = 0
    frac = match.group("frac")
    if frac:
        # Sub-microsecond digits are dropped
        micros = int(frac[1:7].ljust(6, "0"))
    return datetime.combine(day, clock.replace(microsecond=micros), _parse_offset(match.group("offset")))


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp; fractional seconds optional."""
    return _parse_matched(_RFC3339_RE.fullmatch(value), value)


def parse_rfc3339_nano(value: str) -> datetime:
    """Parse an RFC3339 timestamp that carries a fractional second."""
    return _parse_matched(_RFC3339_NANO_RE.fullmatch(value), value)


def parse_iso8601(value: str) -> datetime:
    """Parse ISO8601 with up to millisecond precision and a zone offset."""
    return _parse_matched(_ISO8601_RE.fullmatch(value), value)


def parse_iso8601_millis(value: str) -> datetime:
    """Parse ISO8601 with exactly three fractional digits."""
    return _parse_matched(_ISO8601_MILLIS_RE.fullmatch(value), value)


def parse_date(value: str) -> date:
    """Parse exactly ``YYYY-MM-DD`` into a real calendar date."""
    if not _DATE_RE.fullmatch(value):
        raise ValueError(f"cannot parse {value!r}")
    return date.fromisoformat(value)


def parse_time(value: str) -> time:
    if not _TIME_RE.fullmatch(value):
        raise ValueError(f"cannot parse {value!r}")
    return datetime.strptime(value, TIME_ONLY).time()


def parse_time_with_offset(value: str) -> time:
    match = _TIME_OFFSET_RE.fullmatch(value)
    if match is None:
        raise ValueError(f"cannot parse {value!r}")
    clock = datetime.strptime(match.group("time"), TIME_ONLY).time()
    return clock.replace(tzinfo=_parse_offset(match.group("offset")))


_NAMED_LAYOUTS: dict[str, Callable[[str], object]] = {
    RFC3339: parse_rfc3339,
    RFC3339_NANO: parse_rfc3339_nano,
    ISO8601: parse_iso8601,
}


def parse_layout(value: str, layout: str) -> object:
    """Parse ``value`` against a named layout or a ``strptime`` format.

    Raises:
        ValueError: if the value does not match the layout
    """
    parser = _NAMED_LAYOUTS.get(layout)
    if parser is not None:
        return parser(value)
    if layout == DATE_ONLY:
        return parse_date(value)
    return datetime.strptime(value, layout)
