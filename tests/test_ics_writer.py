"""
Tests for iCalendar rendering.
"""

from datetime import time

import pendulum
import pytest

from laserdose.adapters.ics_writer import escape_text, fold_line, render_calendar
from laserdose.domain.models import DoseSlot


def _slot(index, day, at=time(8, 0), label=None):
    return DoseSlot(index=index, date=day, time=at, label=label)


class TestRenderCalendar:
    """Tests for render_calendar."""

    def test_events_use_floating_timestamps(self):
        slots = [
            _slot(1, pendulum.date(2025, 12, 25), label="Dose 1 of 2"),
            _slot(2, pendulum.date(2026, 1, 1), label="Dose 2 of 2"),
        ]

        text = render_calendar(slots, clinic_name="Ein Tal", action_label="Laser session")
        lines = text.split("\r\n")

        assert lines[0] == "BEGIN:VCALENDAR"
        assert lines[-2] == "END:VCALENDAR"
        assert "DTSTART:20251225T080000" in lines
        assert "DTEND:20260101T080000" in lines
        assert "SUMMARY:Dose 1 of 2 - Ein Tal" in lines
        assert lines.count("BEGIN:VEVENT") == 2
        assert lines.count("TRIGGER:-PT5M") == 2
        assert not any(line.startswith("DTSTART") and line.endswith("Z") for line in lines)

    def test_slots_at_same_time_are_grouped(self):
        day = pendulum.date(2025, 1, 6)
        slots = [_slot(1, day, label="Left eye"), _slot(2, day, label="Right eye")]

        text = render_calendar(slots)

        assert text.count("BEGIN:VEVENT") == 1
        assert r"SUMMARY:Left eye\, Right eye" in text

    def test_unlabelled_slots_use_action_label(self):
        text = render_calendar([_slot(4, pendulum.date(2025, 1, 6))], action_label="Session")

        assert "SUMMARY:Session 4" in text

    def test_description_is_escaped(self):
        text = render_calendar([_slot(1, pendulum.date(2025, 1, 6))], description="Arrive early;\nno makeup")

        assert r"DESCRIPTION:Arrive early\;\nno makeup" in text

    def test_empty_schedule_rejected(self):
        with pytest.raises(ValueError, match="empty schedule"):
            render_calendar([])


def test_escape_text():
    assert escape_text(r"a\b,c;d") == r"a\\b\,c\;d"


class TestFoldLine:
    """Tests for content-line folding."""

    def test_short_line_unchanged(self):
        assert fold_line("SUMMARY:Dose 1 of 2") == "SUMMARY:Dose 1 of 2"

    def test_ascii_line_folded_at_75_octets(self):
        line = "DESCRIPTION:" + "x" * 100

        folded = fold_line(line)
        parts = folded.split("\r\n")

        assert len(parts[0]) == 75
        assert all(part.startswith(" ") for part in parts[1:])
        assert folded.replace("\r\n ", "") == line

    def test_multibyte_characters_are_not_split(self):
        line = "SUMMARY:" + "טיפול " * 20

        folded = fold_line(line)

        for part in folded.split("\r\n"):
            assert len(part.encode("utf-8")) <= 75
        assert folded.replace("\r\n ", "") == line


def test_long_hebrew_summary_is_folded():
    day = pendulum.date(2025, 1, 6)
    slots = [_slot(index, day, label=f"טיפול {index} מתוך 8") for index in range(1, 5)]

    text = render_calendar(slots, clinic_name="עין טל")

    for line in text.split("\r\n"):
        assert len(line.encode("utf-8")) <= 75
    unfolded = text.replace("\r\n ", "")
    assert r"SUMMARY:טיפול 1 מתוך 8\, טיפול 2 מתוך 8\, טיפול 3 מתוך 8\, טיפול 4 מתוך 8 - עין טל" in unfolded
