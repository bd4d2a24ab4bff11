"""
Tests for floating-time calendar timestamps.
"""

from datetime import date, datetime, time, timezone

import pendulum
import pytest

from laserdose.domain.calendar_encoder import parse_clock_time, parse_date, to_ical_datetime
from laserdose.domain.exceptions import CalendarEncodingError


class TestToIcalDatetime:
    """Tests for to_ical_datetime."""

    def test_floating_time_without_zone(self):
        """08:00 stays 08:00 and no 'Z' is appended."""
        result = to_ical_datetime("2025-12-25", "08:00")

        assert result == "20251225T080000"
        assert "Z" not in result

    def test_single_digits_are_zero_padded(self):
        assert to_ical_datetime("2025-01-09", "09:05") == "20250109T090500"

    def test_accepts_date_and_time_objects(self):
        assert to_ical_datetime(date(2025, 3, 30), time(2, 30)) == "20250330T023000"
        assert to_ical_datetime(pendulum.date(2025, 10, 26), time(2, 30, 15)) == "20251026T023015"

    def test_seconds_in_string_input(self):
        assert to_ical_datetime("2025-06-01", "23:59:59") == "20250601T235959"

    def test_fixed_width_for_small_years(self):
        result = to_ical_datetime(date(5, 1, 1), time(0, 0))

        assert result == "00050101T000000"
        assert len(result) == 15

    def test_distinct_inputs_give_distinct_outputs(self):
        stamps = {
            to_ical_datetime(day, at)
            for day in (date(2025, 1, 1), date(2025, 1, 10), date(2025, 10, 1))
            for at in (time(1, 10), time(11, 0), time(10, 1))
        }

        assert len(stamps) == 9

    @pytest.mark.parametrize(
        "day, at",
        [
            ("2025-02-30", "08:00"),
            ("2025-13-01", "08:00"),
            ("25-12-2025", "08:00"),
            ("2025-12-25", "25:00"),
            ("2025-12-25", "08:60"),
            ("2025-12-25", "8am"),
        ],
    )
    def test_malformed_input_fails_fast(self, day, at):
        with pytest.raises(CalendarEncodingError):
            to_ical_datetime(day, at)

    def test_zoned_time_rejected(self):
        with pytest.raises(CalendarEncodingError, match="timezone"):
            to_ical_datetime(date(2025, 12, 25), time(8, 0, tzinfo=timezone.utc))

    def test_datetime_as_date_rejected(self):
        with pytest.raises(CalendarEncodingError):
            to_ical_datetime(datetime(2025, 12, 25, 8, 0), time(8, 0))

    def test_encoding_error_is_value_error(self):
        with pytest.raises(ValueError):
            to_ical_datetime("not-a-date", "08:00")


class TestParsers:
    """Tests for the string parsers shared with config and CLI."""

    def test_parse_date(self):
        assert parse_date(" 2025-01-09 ") == pendulum.date(2025, 1, 9)

    def test_parse_clock_time_allows_single_digit_hour(self):
        assert parse_clock_time("9:05") == time(9, 5)
