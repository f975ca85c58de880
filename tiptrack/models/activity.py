"""
Activity Models for TipTrack

Every change to the store is recorded as an activity event.
This gives:
1. A history the user can look back through
2. Debugging information when a save goes wrong
3. A trail that survives edits and deletes of the shifts themselves

DESIGN DECISION: The activity log is append-only. Only a full data
reset clears it.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from tiptrack.models.shift import utc_now


class ActivityType(str, Enum):
    """Types of events we record."""
    # Shifts
    SHIFT_SAVED = "shift_saved"
    SHIFT_UPDATED = "shift_updated"
    SHIFT_DELETED = "shift_deleted"
    SHIFT_REJECTED = "shift_rejected"

    # Settings
    SETTINGS_SAVED = "settings_saved"
    ONBOARDING_COMPLETED = "onboarding_completed"

    # Tip-out templates
    TEMPLATE_SAVED = "template_saved"
    TEMPLATE_DELETED = "template_deleted"

    # Data management
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    DATA_CLEARED = "data_cleared"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: ActivityType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'shift', 'template', 'settings')"
    )
    entity_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.shift_saved(shift_id, shift_date, net_tips)
        event = ActivityEventBuilder.storage_error("save_shift", message)
    """

    @staticmethod
    def shift_saved(
        shift_id: UUID,
        shift_date: str,
        net_tips: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.SHIFT_SAVED,
            entity_type="shift",
            entity_id=shift_id,
            description=f"Shift logged for {shift_date}: ${net_tips} net tips",
            details={
                "shift_date": shift_date,
                "net_tips": net_tips,
            },
            is_user_action=True,
        )

    @staticmethod
    def shift_updated(
        shift_id: UUID,
        changed_fields: list[str],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.SHIFT_UPDATED,
            entity_type="shift",
            entity_id=shift_id,
            description=f"Shift edited ({len(changed_fields)} fields)",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def shift_deleted(shift_id: UUID) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.SHIFT_DELETED,
            entity_type="shift",
            entity_id=shift_id,
            description="Shift deleted",
            is_user_action=True,
        )

    @staticmethod
    def shift_rejected(issues: list[dict]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.SHIFT_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type="shift",
            description=f"Shift not saved: {len(issues)} validation issues",
            details={"issues": issues},
        )

    @staticmethod
    def settings_saved(changed_fields: list[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.SETTINGS_SAVED,
            entity_type="settings",
            description="Settings saved",
            details={"changed_fields": changed_fields},
            is_user_action=True,
        )

    @staticmethod
    def onboarding_completed(role: str, hourly_wage: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.ONBOARDING_COMPLETED,
            entity_type="settings",
            description=f"Onboarding completed as {role}",
            details={"role": role, "hourly_wage": hourly_wage},
            is_user_action=True,
        )

    @staticmethod
    def template_saved(template_id: UUID, name: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.TEMPLATE_SAVED,
            entity_type="template",
            entity_id=template_id,
            description=f"Tip-out template saved: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def template_deleted(template_id: UUID) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.TEMPLATE_DELETED,
            entity_type="template",
            entity_id=template_id,
            description="Tip-out template deleted",
            is_user_action=True,
        )

    @staticmethod
    def data_exported(shift_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.DATA_EXPORTED,
            description=f"Data exported ({shift_count} shifts)",
            details={"shift_count": shift_count},
            is_user_action=True,
        )

    @staticmethod
    def data_imported(sections: list[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.DATA_IMPORTED,
            severity=ActivitySeverity.WARNING,
            description=f"Data imported: {', '.join(sections) or 'nothing'}",
            details={"sections": sections},
            is_user_action=True,
        )

    @staticmethod
    def data_cleared() -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.DATA_CLEARED,
            severity=ActivitySeverity.WARNING,
            description="All data cleared",
            is_user_action=True,
        )

    @staticmethod
    def storage_error(operation: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.STORAGE_ERROR,
            severity=ActivitySeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityType.SYSTEM_ERROR,
            severity=ActivitySeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
