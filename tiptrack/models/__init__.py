"""
Data Models Package

This package contains all Pydantic models used in TipTrack.
All data flowing through the system must conform to these schemas.
"""

from tiptrack.models.shift import (
    ExportBundle,
    Role,
    Shift,
    Theme,
    TipOutRecipient,
    TipOutTemplate,
    UserSettings,
    WeekStart,
    default_templates,
)
from tiptrack.models.results import (
    DayBucket,
    DayStats,
    PaycheckAverages,
    PaycheckBreakdown,
    PaycheckPreview,
    PaycheckSummary,
    ShiftEarnings,
    SplitAllocation,
    SplitResult,
    TaxBreakdown,
    TrendChanges,
    Trends,
    WeeklySummary,
    WeekStats,
)
from tiptrack.models.validation import ValidationIssue, ValidationResult
from tiptrack.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivitySeverity,
    ActivityType,
)

__all__ = [
    # Stored records
    "ExportBundle",
    "Role",
    "Shift",
    "Theme",
    "TipOutRecipient",
    "TipOutTemplate",
    "UserSettings",
    "WeekStart",
    "default_templates",
    # Engine results
    "DayBucket",
    "DayStats",
    "PaycheckAverages",
    "PaycheckBreakdown",
    "PaycheckPreview",
    "PaycheckSummary",
    "ShiftEarnings",
    "SplitAllocation",
    "SplitResult",
    "TaxBreakdown",
    "TrendChanges",
    "Trends",
    "WeeklySummary",
    "WeekStats",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Activity
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivitySeverity",
    "ActivityType",
]
