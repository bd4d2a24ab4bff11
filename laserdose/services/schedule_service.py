"""
Application service for generating and exporting dosing schedules.

The service resolves the clinic through a repository adapter and delegates
the actual scheduling to the domain-level ``ScheduleBuilder``. The clinic
dependency is a simple protocol so tests can pass a fabricated registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol

from ..adapters.ics_writer import render_calendar
from ..domain.i18n import DEFAULT_LOCALE, resolve_localized
from ..domain.models import ClinicConfig, DoseSlot, DosingProtocol, LaserPrescriptionInput
from ..domain.schedule_builder import ScheduleBuilder


class ClinicRepositoryProtocol(Protocol):
    """Protocol describing the clinic lookup needed by the service."""

    def resolve(self, slug: str | None = None) -> ClinicConfig:
        """Return the clinic for ``slug`` or the default clinic."""


@dataclass(frozen=True)
class GeneratedSchedule:
    """A schedule together with the clinic it was built for."""
    clinic: ClinicConfig
    slots: List[DoseSlot]
    locale: str = DEFAULT_LOCALE

    @property
    def action_label(self) -> str:
        return resolve_localized(self.clinic.branding.action_label, self.locale) or "Dose"


class ScheduleService:
    """
    Orchestrates clinic resolution, schedule generation and calendar export.
    """

    def __init__(
        self,
        clinic_repository: ClinicRepositoryProtocol,
        schedule_builder: ScheduleBuilder,
    ) -> None:
        self._clinic_repository = clinic_repository
        self._schedule_builder = schedule_builder

    def protocol_for(self, clinic_slug: str | None, key: str) -> DosingProtocol:
        """
        Look up a named protocol of the clinic that ``clinic_slug`` resolves to.

        Raises:
            InvalidProtocolError: If that clinic does not offer ``key``
        """
        clinic = self._clinic_repository.resolve(clinic_slug)
        return clinic.protocol(key).protocol

    def generate(
        self,
        prescription: LaserPrescriptionInput,
        locale: str = DEFAULT_LOCALE,
    ) -> GeneratedSchedule:
        """Resolve the prescription's clinic and build its schedule."""
        clinic = self._clinic_repository.resolve(prescription.clinic_slug)
        slots = self._schedule_builder.build(prescription, clinic, locale=locale)
        return GeneratedSchedule(clinic=clinic, slots=slots, locale=locale)

    def export_calendar(
        self,
        prescription: LaserPrescriptionInput,
        locale: str = DEFAULT_LOCALE,
    ) -> str:
        """Generate a schedule and render it as iCalendar text."""
        schedule = self.generate(prescription, locale=locale)
        return render_calendar(
            schedule.slots,
            clinic_name=schedule.clinic.name,
            action_label=schedule.action_label,
        )
