"""
Activity Logger

DESIGN DECISION: Every change to the store is logged.
This provides:
1. A history of shifts added, edited and deleted
2. Debugging capability when a save fails
3. A record of data resets and imports

The activity logger:
- Always logs locally through structlog
- Persists events to the store when one is attached
- Never raises if persisting fails; the failure is logged instead
"""

import logging
import sys
from typing import Optional
from uuid import UUID

import structlog

from tiptrack.models.activity import ActivityEvent, ActivityEventBuilder
from tiptrack.services.storage import TrackerStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog's JSON lines to stderr at the given level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class ActivityLogger:
    """
    Central activity logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The store's activity collection (for the user's history)
    """

    def __init__(
        self,
        storage: Optional[TrackerStorageInterface] = None,
    ):
        """
        Initialize activity logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("tiptrack.activity")

    async def log(self, event: ActivityEvent) -> bool:
        """
        Log an activity event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("activity_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("activity_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("activity_event", **log_dict)
        else:
            self._logger.info("activity_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_activity(event)
            except Exception as e:
                self._logger.error(
                    "activity_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_shift_saved(
        self,
        shift_id: UUID,
        shift_date: str,
        net_tips: str,
    ) -> None:
        await self.log(ActivityEventBuilder.shift_saved(
            shift_id=shift_id,
            shift_date=shift_date,
            net_tips=net_tips,
        ))

    async def log_shift_updated(
        self,
        shift_id: UUID,
        changed_fields: list[str],
    ) -> None:
        await self.log(ActivityEventBuilder.shift_updated(
            shift_id=shift_id,
            changed_fields=changed_fields,
        ))

    async def log_shift_deleted(self, shift_id: UUID) -> None:
        await self.log(ActivityEventBuilder.shift_deleted(shift_id))

    async def log_shift_rejected(self, issues: list[dict]) -> None:
        """Log a shift that failed validation and was not saved."""
        await self.log(ActivityEventBuilder.shift_rejected(issues))

    async def log_settings_saved(self, changed_fields: list[str]) -> None:
        await self.log(ActivityEventBuilder.settings_saved(changed_fields))

    async def log_onboarding_completed(self, role: str, hourly_wage: str) -> None:
        await self.log(ActivityEventBuilder.onboarding_completed(
            role=role,
            hourly_wage=hourly_wage,
        ))

    async def log_template_saved(self, template_id: UUID, name: str) -> None:
        await self.log(ActivityEventBuilder.template_saved(template_id, name))

    async def log_template_deleted(self, template_id: UUID) -> None:
        await self.log(ActivityEventBuilder.template_deleted(template_id))

    async def log_data_exported(self, shift_count: int) -> None:
        await self.log(ActivityEventBuilder.data_exported(shift_count))

    async def log_data_imported(self, sections: list[str]) -> None:
        await self.log(ActivityEventBuilder.data_imported(sections))

    async def log_data_cleared(self) -> None:
        await self.log(ActivityEventBuilder.data_cleared())

    async def log_storage_error(self, operation: str, error_message: str) -> None:
        """Log a failed store operation."""
        await self.log(ActivityEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        await self.log(ActivityEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
