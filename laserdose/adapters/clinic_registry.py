"""
Clinic registry: slug -> ClinicConfig lookup with a default fallback.
"""

from __future__ import annotations

import logging
from datetime import time
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from ..domain.exceptions import ClinicConfigurationError
from ..domain.i18n import Bilingual
from ..domain.models import (
    ClinicBranding,
    ClinicConfig,
    DosingProtocol,
    IntervalRule,
    OperatingHours,
    ProtocolDefinition,
)

logger = logging.getLogger(__name__)


def normalize_slug(slug: str | None) -> str:
    """Slugs compare case-insensitively and ignore surrounding whitespace."""
    return (slug or "").strip().lower()


class ClinicRegistry(Mapping[str, ClinicConfig]):
    """
    Read-only mapping of clinic slugs to configurations.

    Built once and never mutated, so it is safe to share between requests.
    ``resolve`` is total: a missing or unknown slug yields the default clinic.
    """

    def __init__(self, clinics: Iterable[ClinicConfig], default: ClinicConfig):
        table: dict[str, ClinicConfig] = {}
        for clinic in clinics:
            key = normalize_slug(clinic.slug)
            if not key:
                raise ClinicConfigurationError(f"Clinic '{clinic.name}' has an empty slug")
            if key in table:
                raise ClinicConfigurationError(f"Duplicate clinic slug detected: {clinic.slug}")
            table[key] = clinic

        table.setdefault(normalize_slug(default.slug), default)
        self._clinics = MappingProxyType(table)
        self._default = default

    @property
    def default(self) -> ClinicConfig:
        return self._default

    def resolve(self, slug: str | None = None) -> ClinicConfig:
        """
        Resolve a clinic by slug.

        Args:
            slug: Clinic identifier, possibly None, empty or unknown

        Returns:
            The matching clinic, or the default clinic
        """
        key = normalize_slug(slug)
        if not key:
            return self._default

        clinic = self._clinics.get(key)
        if clinic is None:
            logger.debug("Unknown clinic slug '%s', using default '%s'", slug, self._default.slug)
            return self._default
        return clinic

    def merged_with(self, clinics: Iterable[ClinicConfig]) -> "ClinicRegistry":
        """
        Return a new registry where ``clinics`` replace entries with the same slug.

        A replacement for the default slug also becomes the new default.
        """
        table = dict(self._clinics)
        default = self._default
        overrides: dict[str, ClinicConfig] = {}
        for clinic in clinics:
            key = normalize_slug(clinic.slug)
            if key in overrides:
                raise ClinicConfigurationError(f"Duplicate clinic slug detected: {clinic.slug}")
            overrides[key] = clinic
        table.update(overrides)
        default = overrides.get(normalize_slug(default.slug), default)
        return ClinicRegistry(table.values(), default=default)

    def __getitem__(self, slug: str) -> ClinicConfig:
        return self._clinics[normalize_slug(slug)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._clinics)

    def __len__(self) -> int:
        return len(self._clinics)


STANDARD_COURSE = ProtocolDefinition(
    protocol=DosingProtocol(dose_count=6, interval=IntervalRule.every_weeks(2)),
    label=Bilingual(he="סדרה רגילה", en="Standard course"),
    description=Bilingual(he="שישה טיפולים, אחת לשבועיים", en="Six sessions, one every two weeks"),
)

INTENSIVE_COURSE = ProtocolDefinition(
    protocol=DosingProtocol(dose_count=8, interval=IntervalRule.on_weekdays([0, 3])),
    label=Bilingual(he="סדרה מרוכזת", en="Intensive course"),
    description=Bilingual(he="שמונה טיפולים בימי שני וחמישי", en="Eight sessions on Mondays and Thursdays"),
)

MAINTENANCE_COURSE = ProtocolDefinition(
    protocol=DosingProtocol(dose_count=3, interval=IntervalRule.every_weeks(4)),
    label=Bilingual(he="טיפולי תחזוקה", en="Maintenance"),
)

DEFAULT_CLINIC = ClinicConfig(
    slug="default",
    name="ShaatHaTipa",
    operating_hours=OperatingHours(opens_at=time(8, 0), closes_at=time(18, 0)),
    default_dose_time=time(9, 0),
    closed_weekdays=frozenset({5}),  # Saturday
    branding=ClinicBranding(
        hero_title=Bilingual(he="הוראות החלמה אישיות", en="Recovery Schedule"),
        hero_subtitle=Bilingual(
            he="הזינו את פרטי הטיפול וקבלו לו\"ז מותאם אישית",
            en="Enter your treatment details to get a personalised schedule",
        ),
        action_label=Bilingual(he="טיפול", en="Treatment"),
    ),
    protocols={"standard": STANDARD_COURSE},
)

EIN_TAL_CLINIC = ClinicConfig(
    slug="ein-tal",
    name="Ein Tal",
    operating_hours=OperatingHours(opens_at=time(8, 0), closes_at=time(16, 0)),
    default_dose_time=time(10, 0),
    closed_weekdays=frozenset({4, 5}),  # Friday, Saturday
    branding=ClinicBranding(
        logo_url="/clinics/eintal-logo.png",
        primary_color="#0EA5E9",
        secondary_color="#E0F2FE",
        button_color="#0284C7",
        text_color="#0F172A",
        hero_title=Bilingual(he="לוח זמנים אישי לאחר הטיפול", en="Your post-treatment schedule"),
        hero_subtitle=Bilingual(
            he="הלוח מותאם לפרוטוקול של הקליניקה ולשעות הפעילות שלה",
            en="Based on your clinic's protocol and opening hours",
        ),
        action_label=Bilingual(he="טיפול לייזר", en="Laser session"),
    ),
    protocols={"standard": STANDARD_COURSE, "intensive": INTENSIVE_COURSE},
)

MOSER_CLINIC = ClinicConfig(
    slug="moser-clinic",
    name="Moser Clinic",
    operating_hours=OperatingHours(opens_at=time(9, 0), closes_at=time(19, 0)),
    default_dose_time=time(11, 30),
    closed_weekdays=frozenset({5, 6}),  # Saturday, Sunday
    branding=ClinicBranding(
        primary_color="#7C3AED",
        secondary_color="#F5F3FF",
        button_color="#6D28D9",
        action_label=Bilingual(he="טיפול", en="Session"),
    ),
    protocols={"standard": STANDARD_COURSE, "maintenance": MAINTENANCE_COURSE},
)

BUILTIN_REGISTRY = ClinicRegistry([EIN_TAL_CLINIC, MOSER_CLINIC], default=DEFAULT_CLINIC)


def resolve_clinic(slug: str | None = None) -> ClinicConfig:
    """Resolve a slug against the built-in clinics."""
    return BUILTIN_REGISTRY.resolve(slug)
