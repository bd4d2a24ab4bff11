"""
Shared fixtures.
"""

from datetime import date, time

import pytest

from laserdose.adapters.clinic_registry import ClinicRegistry
from laserdose.domain.models import ClinicConfig, OperatingHours


@pytest.fixture
def weekday_clinic() -> ClinicConfig:
    """Clinic open Monday to Friday, closed on Wednesday 2025-01-08."""
    return ClinicConfig(
        slug="test-clinic",
        name="Test Clinic",
        operating_hours=OperatingHours(opens_at=time(8, 0), closes_at=time(18, 0)),
        default_dose_time=time(9, 0),
        closed_weekdays=frozenset({5, 6}),  # Saturday, Sunday
        closed_dates=frozenset({date(2025, 1, 8)}),
    )


@pytest.fixture
def fallback_clinic() -> ClinicConfig:
    return ClinicConfig(
        slug="fallback",
        name="Fallback Clinic",
        operating_hours=OperatingHours(opens_at=time(7, 0), closes_at=time(15, 0)),
        default_dose_time=time(8, 0),
    )


@pytest.fixture
def registry(weekday_clinic, fallback_clinic) -> ClinicRegistry:
    return ClinicRegistry([weekday_clinic], default=fallback_clinic)
