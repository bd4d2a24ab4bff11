"""
Tests for clinic resolution.
"""

from datetime import time

import pytest

from laserdose.adapters.clinic_registry import (
    BUILTIN_REGISTRY,
    DEFAULT_CLINIC,
    ClinicRegistry,
    resolve_clinic,
)
from laserdose.domain.exceptions import ClinicConfigurationError, InvalidProtocolError
from laserdose.domain.models import ClinicConfig, OperatingHours


class TestClinicRegistry:
    """Tests for ClinicRegistry."""

    def test_resolve_known_slug(self, registry, weekday_clinic):
        assert registry.resolve("test-clinic") is weekday_clinic

    def test_resolve_is_case_insensitive(self, registry, weekday_clinic):
        assert registry.resolve("  Test-Clinic ") is weekday_clinic

    @pytest.mark.parametrize("slug", [None, "", "   ", "unknown-clinic"])
    def test_missing_or_unknown_slug_resolves_to_default(self, registry, fallback_clinic, slug):
        assert registry.resolve(slug) is fallback_clinic

    def test_unknown_equals_no_clinic(self, registry):
        """Unknown slug and an explicit 'no clinic' request agree."""
        assert registry.resolve("nope") == registry.resolve(None)

    def test_default_is_registered_under_its_slug(self, registry, fallback_clinic):
        assert registry["fallback"] is fallback_clinic
        assert set(registry) == {"test-clinic", "fallback"}
        assert len(registry) == 2

    def test_duplicate_slugs_rejected(self, weekday_clinic, fallback_clinic):
        with pytest.raises(ClinicConfigurationError, match="Duplicate clinic slug"):
            ClinicRegistry([weekday_clinic, weekday_clinic], default=fallback_clinic)

    def test_registry_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._clinics["new"] = registry.default  # type: ignore[index]

    def test_merged_with_replaces_and_adds(self, registry, fallback_clinic):
        replacement = ClinicConfig(
            slug="test-clinic",
            name="Renamed",
            operating_hours=OperatingHours(opens_at=time(10, 0), closes_at=time(12, 0)),
            default_dose_time=time(10, 30),
        )

        merged = registry.merged_with([replacement])

        assert merged.resolve("test-clinic").name == "Renamed"
        assert merged.default is fallback_clinic
        # source registry unchanged
        assert registry.resolve("test-clinic").name == "Test Clinic"

    def test_merged_with_can_replace_default(self, registry):
        new_default = ClinicConfig(
            slug="fallback",
            name="New Fallback",
            operating_hours=OperatingHours(opens_at=time(6, 0), closes_at=time(9, 0)),
            default_dose_time=time(7, 0),
        )

        merged = registry.merged_with([new_default])

        assert merged.resolve("missing") is new_default


class TestBuiltinClinics:
    """Tests for the built-in clinic table."""

    def test_builtin_slugs(self):
        assert set(BUILTIN_REGISTRY) == {"default", "ein-tal", "moser-clinic"}

    def test_resolve_clinic_falls_back(self):
        assert resolve_clinic(None) is DEFAULT_CLINIC
        assert resolve_clinic("not-registered") is DEFAULT_CLINIC
        assert resolve_clinic("ein-tal").name == "Ein Tal"

    def test_builtin_protocols(self):
        intensive = resolve_clinic("ein-tal").protocol("intensive").protocol

        assert intensive.dose_count == 8
        assert intensive.interval.weekdays == frozenset({0, 3})
        assert set(DEFAULT_CLINIC.protocols) == {"standard"}

    def test_protocols_are_per_clinic(self):
        with pytest.raises(InvalidProtocolError, match="Protocol 'intensive' not found in clinic 'moser-clinic'"):
            resolve_clinic("moser-clinic").protocol("intensive")
