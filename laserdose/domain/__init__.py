"""
Domain layer - Pure business logic without external dependencies.
"""

from .calendar_encoder import to_ical_datetime
from .models import (
    ClinicBranding,
    ClinicConfig,
    DoseSlot,
    DosingProtocol,
    IntervalRule,
    LaserPrescriptionInput,
    OperatingHours,
    ProtocolDefinition,
)
from .schedule_builder import ScheduleBuilder, build_schedule

__all__ = [
    "ClinicBranding",
    "ClinicConfig",
    "DoseSlot",
    "DosingProtocol",
    "IntervalRule",
    "LaserPrescriptionInput",
    "OperatingHours",
    "ProtocolDefinition",
    "ScheduleBuilder",
    "build_schedule",
    "to_ical_datetime",
]
