"""
iCalendar (.ics) rendering for generated schedules.

Event start/end fields use floating timestamps from the calendar encoder,
so appointments stay on the clinic's wall-clock time in every calendar app.
"""

from typing import Dict, List, Sequence, Tuple

from ..domain.calendar_encoder import to_ical_datetime
from ..domain.models import DoseSlot

CRLF = "\r\n"
PRODID = "-//laserdose//Dosing Schedule//EN"
ALARM_TRIGGER = "-PT5M"
MAX_LINE_OCTETS = 75


def escape_text(value: str) -> str:
    """Escape a TEXT property value (RFC 5545, section 3.3.11)."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def fold_line(line: str) -> str:
    """
    Fold a content line into chunks of at most 75 UTF-8 octets (RFC 5545, section 3.1).

    Continuation lines start with a single space. Multi-byte characters are
    never split.
    """
    chunks: List[str] = []
    current = ""
    size = 0
    for char in line:
        width = len(char.encode("utf-8"))
        if size + width > MAX_LINE_OCTETS:
            chunks.append(current)
            current, size = " ", 1
        current += char
        size += width
    chunks.append(current)
    return CRLF.join(chunks)


def _group_slots(slots: Sequence[DoseSlot]) -> List[Tuple[str, List[DoseSlot]]]:
    """Group slots sharing one start timestamp, preserving first-seen order."""
    groups: Dict[str, List[DoseSlot]] = {}
    for slot in slots:
        groups.setdefault(to_ical_datetime(slot.date, slot.time), []).append(slot)
    return list(groups.items())


def render_calendar(
    slots: Sequence[DoseSlot],
    clinic_name: str | None = None,
    action_label: str = "Dose",
    description: str | None = None,
) -> str:
    """
    Render slots as a VCALENDAR document.

    Slots sharing a date and time are merged into one event. Each event gets
    a display alarm five minutes before it starts.

    Args:
        slots: Dose slots, typically one generated schedule
        clinic_name: Appended to every event summary when given
        action_label: Word used in the reminder text (e.g. "Laser session")
        description: Optional free text attached to every event

    Returns:
        The calendar as a string with CRLF line endings, long lines folded

    Raises:
        ValueError: If there are no slots to export
    """
    if not slots:
        raise ValueError("Cannot export an empty schedule")

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
    ]

    for timestamp, group in _group_slots(slots):
        names = ", ".join(slot.label or f"{action_label} {slot.index}" for slot in group)
        summary = f"{names} - {clinic_name}" if clinic_name else names
        uid_suffix = "-".join(str(slot.index) for slot in group)

        lines.append("BEGIN:VEVENT")
        lines.append(f"UID:{timestamp}-{uid_suffix}@laserdose")
        lines.append(f"DTSTAMP:{timestamp}")
        lines.append(f"DTSTART:{timestamp}")
        lines.append(f"DTEND:{timestamp}")
        lines.append(f"SUMMARY:{escape_text(summary)}")
        if description:
            lines.append(f"DESCRIPTION:{escape_text(description)}")

        lines.append("BEGIN:VALARM")
        lines.append(f"TRIGGER:{ALARM_TRIGGER}")
        lines.append("ACTION:DISPLAY")
        lines.append(f"DESCRIPTION:{escape_text(f'{action_label} reminder: {names}')}")
        lines.append("END:VALARM")
        lines.append("END:VEVENT")

    lines.append("END:VCALENDAR")
    return CRLF.join(fold_line(line) for line in lines) + CRLF
