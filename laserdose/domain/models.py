"""
Domain models for prescriptions, clinic configuration and dose slots.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping

import pendulum
from pendulum import Date

from .exceptions import InvalidProtocolError
from .i18n import LocalizedText

WEEKDAY_NAMES = {
    "mon": 0, "monday": 0,
    "tue": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}

_SPACING_PATTERN = re.compile(
    r"^(?P<sign>[+-]?)\s*(?P<amount>\d+)\s*(?P<unit>d|days?|w|weeks?)$",
    re.IGNORECASE,
)


def as_pendulum_date(value: date) -> Date:
    """Convert any ``date`` (but not ``datetime``) into a pendulum Date."""
    if isinstance(value, datetime):
        raise TypeError("Expected a calendar date, got a datetime")
    return pendulum.date(value.year, value.month, value.day)


def as_plain_date(value: date) -> date:
    """Strip a pendulum Date down to ``datetime.date`` for set lookups."""
    return date(value.year, value.month, value.day)


@dataclass(frozen=True)
class OperatingHours:
    """
    Daily opening window of a clinic.

    Invariant: opens_at must be before closes_at.
    """
    opens_at: time
    closes_at: time

    def __post_init__(self):
        if self.opens_at >= self.closes_at:
            raise ValueError(f"Opening time {self.opens_at} must be before closing time {self.closes_at}")

    def contains(self, at: time) -> bool:
        """Check whether a time of day falls inside the opening window."""
        return self.opens_at <= at < self.closes_at

    def __str__(self) -> str:
        return f"{self.opens_at.strftime('%H:%M')} - {self.closes_at.strftime('%H:%M')}"


@dataclass(frozen=True)
class ClinicBranding:
    """Presentation data carried through the engine untouched."""
    logo_url: str = "/logo.png"
    primary_color: str = "#0F172A"
    secondary_color: str = "#F8FAFC"
    button_color: str = "#0EA5E9"
    text_color: str = "#0F172A"
    hero_title: LocalizedText | None = None
    hero_subtitle: LocalizedText | None = None
    action_label: LocalizedText | None = None


@dataclass(frozen=True)
class ClinicConfig:
    """
    Resolved operating parameters of one clinic.
    """
    slug: str
    name: str
    operating_hours: OperatingHours
    default_dose_time: time
    closed_weekdays: FrozenSet[int] = frozenset()  # 0=Monday, 6=Sunday
    closed_dates: FrozenSet[date] = frozenset()
    branding: ClinicBranding = field(default_factory=ClinicBranding)
    # Named protocols offered by the clinic, in display order
    protocols: Mapping[str, "ProtocolDefinition"] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        invalid_days = sorted(day for day in self.closed_weekdays if day not in range(7))
        if invalid_days:
            raise ValueError(f"closed_weekdays must be between 0 and 6, got {invalid_days}")
        object.__setattr__(self, "closed_dates", frozenset(as_plain_date(day) for day in self.closed_dates))
        empty_keys = [key for key in self.protocols if not key.strip()]
        if empty_keys:
            raise ValueError(f"Clinic '{self.slug}' has a protocol with an empty key")
        object.__setattr__(self, "protocols", MappingProxyType(dict(self.protocols)))

    def is_open(self, day: date) -> bool:
        """Check if the clinic operates on a given calendar day."""
        if day.weekday() in self.closed_weekdays:
            return False
        return as_plain_date(day) not in self.closed_dates

    def protocol(self, key: str) -> "ProtocolDefinition":
        """
        Look up one of the clinic's named protocols.

        The lookup is strict: there is no fallback to another clinic or to a
        default protocol.

        Raises:
            InvalidProtocolError: If the clinic does not offer ``key``
        """
        definition = self.protocols.get(key)
        if definition is None:
            available = ", ".join(self.protocols) or "none"
            raise InvalidProtocolError(
                f"Protocol '{key}' not found in clinic '{self.slug}'. Available: {available}"
            )
        return definition


@dataclass(frozen=True)
class IntervalRule:
    """
    Spacing between two consecutive doses.

    Either a fixed number of days (weeks are stored as multiples of seven)
    or a weekly pattern: the next dose lands on the first listed weekday
    strictly after the previous one.
    """
    days: int = 0
    weekdays: FrozenSet[int] = frozenset()

    @classmethod
    def every_days(cls, days: int) -> "IntervalRule":
        return cls(days=days)

    @classmethod
    def every_weeks(cls, weeks: int) -> "IntervalRule":
        return cls(days=weeks * 7)

    @classmethod
    def on_weekdays(cls, weekdays: Iterable[int]) -> "IntervalRule":
        return cls(weekdays=frozenset(weekdays))

    @classmethod
    def parse(cls, text: str) -> "IntervalRule":
        """
        Parse a human interval description.

        Accepted forms: "+3 days", "3d", "+1 week", "2w", "mon,thu".

        Raises:
            InvalidProtocolError: If the text is not a recognised interval
        """
        cleaned = text.strip()
        match = _SPACING_PATTERN.match(cleaned)
        if match:
            if match.group("sign") == "-":
                raise InvalidProtocolError(f"Interval must be non-negative, got '{text}'")
            amount = int(match.group("amount"))
            if match.group("unit").lower().startswith("w"):
                return cls.every_weeks(amount)
            return cls.every_days(amount)

        names = [part.strip().lower() for part in cleaned.split(",") if part.strip()]
        unknown = [name for name in names if name not in WEEKDAY_NAMES]
        if not names or unknown:
            raise InvalidProtocolError(
                f"Unrecognised interval '{text}'. "
                "Use e.g. '+2 days', '+1 week' or a weekday list like 'mon,thu'."
            )
        return cls.on_weekdays(WEEKDAY_NAMES[name] for name in names)

    @property
    def is_weekly_pattern(self) -> bool:
        return bool(self.weekdays)

    def validate(self, dose_count: int) -> None:
        """
        Reject negative or degenerate spacing.

        A zero-length spacing is only acceptable when there is a single dose,
        since a multi-dose schedule must move strictly forward in time.
        """
        if self.days < 0:
            raise InvalidProtocolError(f"Interval must be non-negative, got {self.days} days")
        invalid_days = sorted(day for day in self.weekdays if day not in range(7))
        if invalid_days:
            raise InvalidProtocolError(f"Weekday pattern must use values 0-6, got {invalid_days}")
        if self.days and self.weekdays:
            raise InvalidProtocolError("Interval cannot combine day spacing with a weekday pattern")
        if dose_count > 1 and not self.days and not self.weekdays:
            raise InvalidProtocolError("Interval must advance at least one day between doses")

    def next_candidate(self, previous: Date) -> Date:
        """Apply the rule to the previous dose date."""
        if self.weekdays:
            candidate = previous.add(days=1)
            while candidate.weekday() not in self.weekdays:
                candidate = candidate.add(days=1)
            return candidate
        return previous.add(days=self.days)

    def __str__(self) -> str:
        if self.weekdays:
            names = [pendulum.date(2024, 1, 1).add(days=day).format("ddd") for day in sorted(self.weekdays)]
            return "every " + ", ".join(names)
        if self.days and self.days % 7 == 0:
            weeks = self.days // 7
            return f"+{weeks} week" + ("s" if weeks != 1 else "")
        return f"+{self.days} day" + ("s" if self.days != 1 else "")


@dataclass(frozen=True)
class DosingProtocol:
    """How many doses a prescription requires and how they are spaced."""
    dose_count: int
    interval: IntervalRule = field(default_factory=IntervalRule)

    def validate(self) -> None:
        """
        Raises:
            InvalidProtocolError: If the dose count or interval is unusable
        """
        if isinstance(self.dose_count, bool) or not isinstance(self.dose_count, int):
            raise InvalidProtocolError(f"Dose count must be an integer, got {self.dose_count!r}")
        if self.dose_count <= 0:
            raise InvalidProtocolError(f"Dose count must be positive, got {self.dose_count}")
        self.interval.validate(self.dose_count)


@dataclass(frozen=True)
class ProtocolDefinition:
    """A dosing protocol a clinic offers under a name."""
    protocol: DosingProtocol
    label: LocalizedText | None = None
    description: LocalizedText | None = None


@dataclass(frozen=True)
class LaserPrescriptionInput:
    """
    Caller-supplied request for a dosing schedule.

    An unknown or missing clinic slug is allowed; it resolves to the
    default clinic.
    """
    clinic_slug: str | None
    start_date: date
    protocol: DosingProtocol
    preferred_time: time | None = None


@dataclass(frozen=True)
class DoseSlot:
    """
    One scheduled treatment appointment.
    """
    index: int  # 1-based
    date: Date
    time: time
    label: str | None = None

    def starts_at(self) -> datetime:
        """Naive wall-clock datetime of the appointment."""
        return datetime.combine(as_plain_date(self.date), self.time)

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: Label | Weekday, DD.MM.YYYY | HH:MM
        """
        weekday = self.date.format("dddd")
        date_str = self.date.format("DD.MM.YYYY")
        time_str = self.time.strftime("%H:%M")
        prefix = self.label or f"#{self.index}"
        return f"{prefix} | {weekday}, {date_str} | {time_str}"
