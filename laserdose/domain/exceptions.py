"""
Domain-specific exception hierarchy for the dosing schedule engine.
"""


class LaserDoseError(Exception):
    """Base class for all application-level errors."""


class InvalidProtocolError(LaserDoseError, ValueError):
    """Raised when a dosing protocol cannot produce a schedule (bad dose count or interval)."""


class SchedulingImpossibleError(LaserDoseError):
    """Raised when no open clinic day can be found within the search window."""


class CalendarEncodingError(LaserDoseError, ValueError):
    """Raised when a date/time pair cannot be encoded as a calendar timestamp."""


class ClinicConfigurationError(LaserDoseError):
    """Raised when the clinic registry is built from inconsistent data."""
