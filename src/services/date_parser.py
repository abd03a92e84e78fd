"""Natural-language date parsing."""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta, weekday
from dateutil.relativedelta import MO, TU, WE, TH, FR, SA, SU

from src.utils.errors import DateParseError

WEEKDAYS: dict[str, weekday] = {
    "monday": MO,
    "tuesday": TU,
    "wednesday": WE,
    "thursday": TH,
    "friday": FR,
    "saturday": SA,
    "sunday": SU,
}

RELATIVE_DAYS = {"today": 0, "tomorrow": 1, "yesterday": -1}

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ](\d{2}):(\d{2})(?::\d{2}(?:\.\d+)?)?)?(?:Z|[+-]\d{2}:?\d{2})?$")
_IN_N = re.compile(r"^in\s+(\d+)\s+(day|days|week|weeks|month|months)$")
_WEEKDAY = re.compile(r"^(next\s+|this\s+)?(monday|tuesday|wednesday|thursday|friday|saturday|sunday)$")
_YEAR = re.compile(r"\b\d{4}\b")

PARSE_HINT = 'Try formats like "tomorrow", "next Monday", "in 3 days" or "2024-12-20".'


@dataclass(frozen=True)
class ParsedDate:
    """A parsed date; `time` is HH:MM when the text carried one."""

    date: date
    time: Optional[str] = None
    all_day: bool = True

    @property
    def date_string(self) -> str:
        return format_date_string(self.date)


def format_date_string(value: Union[date, datetime]) -> str:
    """Format as YYYY-MM-DD."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def format_display_date(value: Union[date, str]) -> str:
    """`Friday, December 20, 2024`; unparseable strings are returned as is."""
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def _reference_datetime(reference: Optional[Union[date, datetime]]) -> datetime:
    if reference is None:
        return datetime.now()
    if isinstance(reference, datetime):
        return reference
    return datetime(reference.year, reference.month, reference.day)


def _parse_keywords(text: str, ref: date) -> Optional[date]:
    if text in RELATIVE_DAYS:
        return add_days(ref, RELATIVE_DAYS[text])

    match = _IN_N.match(text)
    if match:
        amount, unit = int(match.group(1)), match.group(2)
        if unit.startswith("day"):
            return add_days(ref, amount)
        if unit.startswith("week"):
            return add_days(ref, amount * 7)
        return ref + relativedelta(months=amount)

    match = _WEEKDAY.match(text)
    if match:
        day = WEEKDAYS[match.group(2)]
        # "next <day>" never means today
        start = add_days(ref, 1) if match.group(1) and match.group(1).startswith("next") else ref
        return start + relativedelta(weekday=day(+1))

    return None


def parse_natural_date(text: str, reference: Optional[Union[date, datetime]] = None) -> ParsedDate:
    """
    Parse a natural-language or ISO date.

    Relative expressions are anchored on `reference` (default now) and
    free text without a year is forward-dated. Raises DateParseError when
    nothing date-like is found.
    """
    raw = (text or "").strip()
    if not raw:
        raise DateParseError(f"Could not parse date: empty input. {PARSE_HINT}")

    ref = _reference_datetime(reference)
    normalized = re.sub(r"\s+", " ", raw.lower())

    match = _ISO_DATE.match(raw)
    if match:
        year, month, day, hour, minute = match.groups()
        try:
            parsed = date(int(year), int(month), int(day))
        except ValueError:
            raise DateParseError(f'Could not parse date: "{raw}". {PARSE_HINT}')
        if hour is not None:
            return ParsedDate(parsed, f"{hour}:{minute}", all_day=False)
        return ParsedDate(parsed)

    keyword_date = _parse_keywords(normalized, ref.date())
    if keyword_date is not None:
        return ParsedDate(keyword_date)

    midnight = ref.replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        first = date_parser.parse(raw, default=midnight, fuzzy=True)
        # the hour only survives a different default when the text carried one
        second = date_parser.parse(raw, default=midnight.replace(hour=1, minute=1), fuzzy=True)
    except (ValueError, OverflowError):
        raise DateParseError(f'Could not parse date: "{raw}". {PARSE_HINT}')

    parsed_date = first.date()
    if parsed_date < ref.date() and not _YEAR.search(raw):
        parsed_date = parsed_date + relativedelta(years=1)

    if first.hour == second.hour:
        return ParsedDate(parsed_date, first.strftime("%H:%M"), all_day=False)
    return ParsedDate(parsed_date)


_CLOCK_TIME = re.compile(r"^\d{1,2}(?::\d{2})?\s*(?:am|pm)$|^\d{1,2}:\d{2}(?::\d{2})?$", re.IGNORECASE)
TIME_HINT = 'Try formats like "2pm", "9:30 am" or "14:00".'


def parse_time(text: str) -> str:
    """Parse a clock time such as `2pm` or `14:30` into `HH:MM`."""
    raw = (text or "").strip()
    if not _CLOCK_TIME.match(raw):
        raise DateParseError(f'Could not parse time: "{raw}". {TIME_HINT}')
    try:
        parsed = date_parser.parse(raw, default=datetime(2000, 1, 1))
    except (ValueError, OverflowError):
        raise DateParseError(f'Could not parse time: "{raw}". {TIME_HINT}')
    return parsed.strftime("%H:%M")


def parse_date_and_time(
    date_text: str,
    time_text: Optional[str] = None,
    reference: Optional[Union[date, datetime]] = None,
) -> ParsedDate:
    """Parse a date with an optional separate time; an explicit time wins."""
    parsed = parse_natural_date(date_text, reference)
    if time_text and time_text.strip():
        return ParsedDate(parsed.date, parse_time(time_text), all_day=False)
    return parsed


def _minutes(clock: str) -> int:
    hours, minutes = clock.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def calculate_end_time(start_time: str, duration_minutes: int) -> str:
    """`HH:MM` plus a duration, wrapping past midnight."""
    total = (_minutes(start_time) + duration_minutes) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"


def minutes_between(start_time: str, end_time: str) -> int:
    return _minutes(end_time) - _minutes(start_time)


def times_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    return _minutes(start_a) < _minutes(end_b) and _minutes(start_b) < _minutes(end_a)
