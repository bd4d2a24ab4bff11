"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .schedule_service import ClinicRepositoryProtocol, GeneratedSchedule, ScheduleService

__all__ = ["ClinicRepositoryProtocol", "GeneratedSchedule", "ScheduleService"]
