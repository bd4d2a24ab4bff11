"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date, time
from pathlib import Path
from typing import Dict, List, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .adapters.clinic_registry import BUILTIN_REGISTRY, ClinicRegistry
from .domain.calendar_encoder import parse_clock_time
from .domain.exceptions import ClinicConfigurationError
from .domain.i18n import SUPPORTED_LOCALES, localized
from .domain.models import (
    ClinicBranding,
    ClinicConfig,
    DosingProtocol,
    IntervalRule,
    OperatingHours,
    ProtocolDefinition,
)
from .domain.schedule_builder import DEFAULT_SEARCH_BOUND_DAYS

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LASERDOSE_CONFIG"

# Plain string or {"he": ..., "en": ...}
LocalizedValue = Union[str, Dict[str, str], None]


def _validate_clock(value: str) -> str:
    parse_clock_time(value)
    return value


class OperatingHoursSettings(BaseModel):
    """Daily opening window, as HH:MM strings."""
    opens_at: str = "08:00"
    closes_at: str = "18:00"

    @field_validator("opens_at", "closes_at")
    @classmethod
    def validate_clock(cls, v: str) -> str:
        """Validate HH:MM format and range."""
        return _validate_clock(v)

    @model_validator(mode="after")
    def validate_hours_order(self) -> "OperatingHoursSettings":
        """Ensure the configured window opens before it closes."""
        if parse_clock_time(self.closes_at) <= parse_clock_time(self.opens_at):
            raise ValueError("closes_at must be later than opens_at")
        return self

    def to_operating_hours(self) -> OperatingHours:
        return OperatingHours(
            opens_at=parse_clock_time(self.opens_at),
            closes_at=parse_clock_time(self.closes_at),
        )


class BrandingSettings(BaseModel):
    """Branding fields; passed through to the UI unchanged."""
    logo_url: str = "/logo.png"
    primary_color: str = "#0F172A"
    secondary_color: str = "#F8FAFC"
    button_color: str = "#0EA5E9"
    text_color: str = "#0F172A"
    hero_title: LocalizedValue = None
    hero_subtitle: LocalizedValue = None
    action_label: LocalizedValue = None

    @field_validator("hero_title", "hero_subtitle", "action_label")
    @classmethod
    def validate_localized(cls, v: LocalizedValue) -> LocalizedValue:
        """Only he/en keys are allowed in bilingual values."""
        localized(v)
        return v

    def to_branding(self) -> ClinicBranding:
        return ClinicBranding(
            logo_url=self.logo_url,
            primary_color=self.primary_color,
            secondary_color=self.secondary_color,
            button_color=self.button_color,
            text_color=self.text_color,
            hero_title=localized(self.hero_title),
            hero_subtitle=localized(self.hero_subtitle),
            action_label=localized(self.action_label),
        )


class ProtocolSettings(BaseModel):
    """A named protocol offered by a clinic."""
    doses: int
    interval: str = "+7 days"
    label: LocalizedValue = None
    description: LocalizedValue = None

    @field_validator("label", "description")
    @classmethod
    def validate_localized(cls, v: LocalizedValue) -> LocalizedValue:
        localized(v)
        return v

    @model_validator(mode="after")
    def validate_protocol(self) -> "ProtocolSettings":
        """Reject protocols the schedule builder would refuse."""
        self.to_dosing_protocol().validate()
        return self

    def to_dosing_protocol(self) -> DosingProtocol:
        return DosingProtocol(dose_count=self.doses, interval=IntervalRule.parse(self.interval))

    def to_protocol_definition(self) -> ProtocolDefinition:
        return ProtocolDefinition(
            protocol=self.to_dosing_protocol(),
            label=localized(self.label),
            description=localized(self.description),
        )


class ClinicSettings(BaseModel):
    """Clinic configuration as written in config.yaml."""
    slug: str
    name: str
    operating_hours: OperatingHoursSettings = Field(default_factory=OperatingHoursSettings)
    default_dose_time: str = "09:00"
    closed_weekdays: List[int] = Field(default_factory=list)  # 0=Monday, 6=Sunday
    closed_dates: List[date] = Field(default_factory=list)
    branding: BrandingSettings = Field(default_factory=BrandingSettings)
    protocols: Dict[str, ProtocolSettings] = Field(default_factory=dict)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, value: str) -> str:
        """Slugs are stored trimmed and lower-case."""
        cleaned = value.strip().lower()
        if not cleaned:
            raise ValueError("slug must not be empty")
        return cleaned

    @field_validator("default_dose_time")
    @classmethod
    def validate_dose_time(cls, v: str) -> str:
        return _validate_clock(v)

    @field_validator("closed_weekdays")
    @classmethod
    def validate_closed_weekdays(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"closed_weekdays must be between 0 and 6, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return deduped

    @field_validator("protocols")
    @classmethod
    def validate_protocol_keys(cls, value: Dict[str, ProtocolSettings]) -> Dict[str, ProtocolSettings]:
        """Protocol keys are stored trimmed and must not be empty."""
        cleaned: Dict[str, ProtocolSettings] = {}
        for key, protocol in value.items():
            name = key.strip()
            if not name:
                raise ValueError("protocol keys must not be empty")
            if name in cleaned:
                raise ValueError(f"Duplicate protocol key detected: {name}")
            cleaned[name] = protocol
        return cleaned

    def get_default_dose_time(self) -> time:
        return parse_clock_time(self.default_dose_time)

    def to_clinic_config(self) -> ClinicConfig:
        return ClinicConfig(
            slug=self.slug,
            name=self.name,
            operating_hours=self.operating_hours.to_operating_hours(),
            default_dose_time=self.get_default_dose_time(),
            closed_weekdays=frozenset(self.closed_weekdays),
            closed_dates=frozenset(self.closed_dates),
            branding=self.branding.to_branding(),
            protocols={key: protocol.to_protocol_definition() for key, protocol in self.protocols.items()},
        )


class AppConfig(BaseModel):
    """Application configuration."""
    default_locale: str = "he"
    default_clinic: str = "default"
    search_bound_days: int = DEFAULT_SEARCH_BOUND_DAYS
    log_level: str = "INFO"
    clinics: List[ClinicSettings] = Field(default_factory=list)

    @field_validator("default_locale")
    @classmethod
    def validate_locale(cls, value: str) -> str:
        if value not in SUPPORTED_LOCALES:
            raise ValueError(f"default_locale must be one of {SUPPORTED_LOCALES}, got '{value}'")
        return value

    @field_validator("search_bound_days")
    @classmethod
    def validate_search_bound(cls, value: int) -> int:
        """A schedule needs at least one week to find an open weekday."""
        if value < 7:
            raise ValueError("search_bound_days must be at least 7")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log_level '{value}'")
        return level

    @field_validator("clinics")
    @classmethod
    def validate_clinics(cls, value: List[ClinicSettings]) -> List[ClinicSettings]:
        """Ensure clinic slugs are unique."""
        seen_slugs: set[str] = set()
        for clinic in value:
            if clinic.slug in seen_slugs:
                raise ValueError(f"Duplicate clinic slug detected: {clinic.slug}")
            seen_slugs.add(clinic.slug)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        bad_keys = [key for key in data if not isinstance(key, str)]
        if bad_keys:
            raise ValueError(f"Config keys must be strings, got {bad_keys!r}")

        return cls.model_validate(data)

    def build_registry(self) -> ClinicRegistry:
        """
        Merge configured clinics over the built-in ones.

        Raises:
            ClinicConfigurationError: If ``default_clinic`` names no known clinic
        """
        registry = BUILTIN_REGISTRY.merged_with(
            clinic.to_clinic_config() for clinic in self.clinics
        )
        if self.default_clinic.strip().lower() == registry.default.slug:
            return registry

        try:
            default = registry[self.default_clinic]
        except KeyError:
            raise ClinicConfigurationError(
                f"default_clinic '{self.default_clinic}' is not a configured clinic"
            ) from None
        return ClinicRegistry(registry.values(), default=default)


@dataclass(frozen=True)
class InitSuccess:
    """Configuration loaded and clinic registry built."""
    config: AppConfig
    registry: ClinicRegistry

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class InitFailure:
    """Configuration could not be loaded; ``error`` is user-facing."""
    error: str

    @property
    def ok(self) -> bool:
        return False


InitResult = Union[InitSuccess, InitFailure]


def initialize(config_path: Path | None = None) -> InitResult:
    """
    Load and validate configuration once, up front.

    A missing config file is not an error: built-in defaults are used.
    Callers must check ``result.ok`` before using the result.
    """
    path = config_path or get_default_config_path()

    try:
        if path.exists():
            config = AppConfig.load_from_yaml(path)
            logger.debug("Loaded configuration from %s", path)
        else:
            logger.debug("No config file at %s, using built-in defaults", path)
            config = AppConfig()
        registry = config.build_registry()
    except ValidationError as exc:
        return InitFailure(error=f"Invalid configuration in {path}:\n{exc}")
    except (ValueError, OSError, ClinicConfigurationError) as exc:
        return InitFailure(error=str(exc))

    return InitSuccess(config=config, registry=registry)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
