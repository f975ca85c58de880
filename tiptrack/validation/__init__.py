"""Validation package."""

from tiptrack.validation.validator import ShiftValidator

__all__ = ["ShiftValidator"]
