"""
Core business logic for generating dosing schedules.

Pure domain logic: no clock reads, no randomness, no I/O. Identical inputs
always yield identical schedules.
"""

import logging
from typing import List

from pendulum import Date

from .exceptions import SchedulingImpossibleError
from .i18n import DEFAULT_LOCALE, Bilingual, LocalizedText, resolve_localized
from .models import ClinicConfig, DoseSlot, LaserPrescriptionInput, as_pendulum_date

logger = logging.getLogger(__name__)

# Upper bound on forward day-by-day searches for an open clinic day.
DEFAULT_SEARCH_BOUND_DAYS = 366

DOSE_LABEL = Bilingual(he="טיפול {index} מתוך {total}", en="Dose {index} of {total}")


class ScheduleBuilder:
    """
    Builds the ordered sequence of dose slots for a prescription.

    Algorithm:
    1. Validate the protocol (no partial schedules on bad input)
    2. Move the start date forward to the first open clinic day
    3. For each further dose, apply the interval to the previous slot's date
       and move forward again past closed days
    4. Stamp every slot with one constant time of day
    """

    def __init__(
        self,
        search_bound_days: int = DEFAULT_SEARCH_BOUND_DAYS,
        label_template: LocalizedText | None = DOSE_LABEL,
    ):
        if search_bound_days < 0:
            raise ValueError(f"search_bound_days must be non-negative, got {search_bound_days}")
        self.search_bound_days = search_bound_days
        self.label_template = label_template

    def build(
        self,
        prescription: LaserPrescriptionInput,
        clinic: ClinicConfig,
        locale: str = DEFAULT_LOCALE,
    ) -> List[DoseSlot]:
        """
        Generate the schedule.

        Args:
            prescription: Start date, protocol and optional preferred time
            clinic: Resolved clinic configuration
            locale: Locale used for slot labels

        Returns:
            Exactly ``dose_count`` slots in strictly ascending date order

        Raises:
            InvalidProtocolError: If the dose count or interval is invalid
            SchedulingImpossibleError: If no open day exists within the search bound
        """
        protocol = prescription.protocol
        protocol.validate()

        dose_time = prescription.preferred_time if prescription.preferred_time is not None else clinic.default_dose_time
        if not clinic.operating_hours.contains(dose_time):
            logger.warning(
                "Dose time %s is outside operating hours %s of clinic '%s'",
                dose_time.strftime("%H:%M"), clinic.operating_hours, clinic.slug,
            )

        current = self._next_open_day(as_pendulum_date(prescription.start_date), clinic)
        dates: List[Date] = [current]

        for _ in range(1, protocol.dose_count):
            try:
                candidate = protocol.interval.next_candidate(current)
            except OverflowError:
                raise self._past_calendar_end(current, clinic) from None
            current = self._next_open_day(candidate, clinic)
            dates.append(current)

        total = protocol.dose_count
        return [
            DoseSlot(
                index=index,
                date=day,
                time=dose_time,
                label=self._label(index, total, locale),
            )
            for index, day in enumerate(dates, start=1)
        ]

    def _next_open_day(self, day: Date, clinic: ClinicConfig) -> Date:
        """
        Return ``day`` or the first open day after it.

        Only ever moves forward; gives up after ``search_bound_days``.
        """
        candidate = day
        for _ in range(self.search_bound_days + 1):
            if clinic.is_open(candidate):
                if candidate != day:
                    logger.debug(
                        "Clinic '%s' closed on %s, moved dose to %s",
                        clinic.slug, day.isoformat(), candidate.isoformat(),
                    )
                return candidate
            try:
                candidate = candidate.add(days=1)
            except OverflowError:
                raise self._past_calendar_end(candidate, clinic) from None

        logger.warning(
            "No open day for clinic '%s' within %d days of %s",
            clinic.slug, self.search_bound_days, day.isoformat(),
        )
        raise SchedulingImpossibleError(
            f"Clinic '{clinic.slug}' has no open day within {self.search_bound_days} days "
            f"after {day.isoformat()}. Check its closed days configuration."
        )

    def _past_calendar_end(self, day: Date, clinic: ClinicConfig) -> SchedulingImpossibleError:
        logger.warning(
            "Schedule for clinic '%s' runs past the last calendar date after %s",
            clinic.slug, day.isoformat(),
        )
        return SchedulingImpossibleError(
            f"Schedule for clinic '{clinic.slug}' runs past {Date.max.isoformat()} "
            f"after {day.isoformat()}. Use an earlier start date or a shorter interval."
        )

    def _label(self, index: int, total: int, locale: str) -> str | None:
        if self.label_template is None:
            return None
        template = resolve_localized(self.label_template, locale)
        return template.format(index=index, total=total) or None


def build_schedule(
    prescription: LaserPrescriptionInput,
    clinic: ClinicConfig,
    locale: str = DEFAULT_LOCALE,
) -> List[DoseSlot]:
    """Build a schedule with the default search bound."""
    return ScheduleBuilder().build(prescription, clinic, locale=locale)
