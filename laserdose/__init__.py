"""
laserdose - personalised laser-therapy dosing schedules with calendar export.
"""

__version__ = "0.1.0"
