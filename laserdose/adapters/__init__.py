"""
Adapters layer - clinic lookup and calendar file rendering.
"""

from .clinic_registry import BUILTIN_REGISTRY, DEFAULT_CLINIC, ClinicRegistry, resolve_clinic
from .ics_writer import render_calendar

__all__ = ["BUILTIN_REGISTRY", "DEFAULT_CLINIC", "ClinicRegistry", "resolve_clinic", "render_calendar"]
