"""Tests for natural-language date parsing."""

import pytest
from datetime import date, datetime
from src.services.date_parser import (
    add_days,
    calculate_end_time,
    format_date_string,
    format_display_date,
    minutes_between,
    parse_date_and_time,
    parse_natural_date,
    parse_time,
    times_overlap,
)
from src.utils.errors import DateParseError

# Monday
REFERENCE = date(2024, 12, 9)


@pytest.mark.unit
@pytest.mark.parametrize("text,expected", [
    ("today", date(2024, 12, 9)),
    ("Tomorrow", date(2024, 12, 10)),
    ("yesterday", date(2024, 12, 8)),
    ("in 3 days", date(2024, 12, 12)),
    ("in 2 weeks", date(2024, 12, 23)),
    ("in 1 month", date(2025, 1, 9)),
    ("friday", date(2024, 12, 13)),
    ("this friday", date(2024, 12, 13)),
    ("monday", date(2024, 12, 9)),
    ("next monday", date(2024, 12, 16)),
    ("next  Wednesday", date(2024, 12, 11)),
])
def test_relative_expressions(text, expected):
    parsed = parse_natural_date(text, REFERENCE)

    assert parsed.date == expected
    assert parsed.all_day is True
    assert parsed.time is None


@pytest.mark.unit
def test_iso_date_and_datetime():
    """ISO inputs keep their date; a time component is reported."""
    assert parse_natural_date("2024-12-20", REFERENCE).date_string == "2024-12-20"

    parsed = parse_natural_date("2024-12-20T14:30:00Z", REFERENCE)
    assert parsed.date == date(2024, 12, 20)
    assert parsed.time == "14:30"
    assert parsed.all_day is False


@pytest.mark.unit
def test_free_text_with_time():
    parsed = parse_natural_date("December 20 at 3pm", REFERENCE)

    assert parsed.date == date(2024, 12, 20)
    assert parsed.time == "15:00"
    assert parsed.all_day is False


@pytest.mark.unit
def test_free_text_without_year_is_forward_dated():
    """A month/day already past this year means next year."""
    assert parse_natural_date("December 1", REFERENCE).date == date(2025, 12, 1)
    assert parse_natural_date("Dec 20", REFERENCE).date == date(2024, 12, 20)
    assert parse_natural_date("1 March 2023", REFERENCE).date == date(2023, 3, 1)


@pytest.mark.unit
def test_datetime_reference_is_accepted():
    parsed = parse_natural_date("tomorrow", datetime(2024, 12, 31, 18, 0))

    assert parsed.date == date(2025, 1, 1)


@pytest.mark.unit
@pytest.mark.parametrize("text", ["", "   ", "gibberish", "2024-02-30"])
def test_unparseable_input_raises(text):
    with pytest.raises(DateParseError) as exc_info:
        parse_natural_date(text, REFERENCE)

    assert exc_info.value.error_type == "date_parse_error"
    assert "next Monday" in exc_info.value.message


@pytest.mark.unit
def test_formatting_helpers():
    assert format_date_string(datetime(2024, 12, 20, 9, 30)) == "2024-12-20"
    assert add_days(date(2024, 12, 30), 3) == date(2025, 1, 2)
    assert format_display_date("2024-12-20") == "Friday, December 20, 2024"
    assert format_display_date(date(2024, 12, 9)) == "Monday, December 9, 2024"
    assert format_display_date("soon") == "soon"


@pytest.mark.unit
@pytest.mark.parametrize("text,expected", [
    ("2pm", "14:00"),
    ("9:30 am", "09:30"),
    ("12am", "00:00"),
    ("14:00", "14:00"),
    ("08:15:00", "08:15"),
])
def test_parse_time(text, expected):
    assert parse_time(text) == expected


@pytest.mark.unit
@pytest.mark.parametrize("text", ["", "14", "noon", "13pm", "25:00"])
def test_parse_time_rejects(text):
    with pytest.raises(DateParseError) as exc_info:
        parse_time(text)

    assert "2pm" in exc_info.value.message


@pytest.mark.unit
def test_parse_date_and_time():
    separate = parse_date_and_time("tomorrow", "2pm", REFERENCE)
    embedded = parse_date_and_time("December 20 at 3pm", None, REFERENCE)
    overridden = parse_date_and_time("December 20 at 3pm", "10:00", REFERENCE)
    date_only = parse_date_and_time("next friday", "  ", REFERENCE)

    assert (separate.date, separate.time, separate.all_day) == (date(2024, 12, 10), "14:00", False)
    assert embedded.time == "15:00"
    assert overridden.time == "10:00"
    assert date_only.all_day is True
    assert date_only.time is None


@pytest.mark.unit
def test_clock_arithmetic():
    assert calculate_end_time("14:30", 60) == "15:30"
    assert calculate_end_time("23:30", 45) == "00:15"
    assert minutes_between("14:00:00", "15:30") == 90
    assert times_overlap("14:00", "15:00", "14:30", "15:30")
    assert not times_overlap("14:00", "15:00", "15:00", "16:00")
