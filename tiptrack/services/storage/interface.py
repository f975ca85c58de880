"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the local JSON file as the default backend
2. Use in-memory storage for testing
3. Swap in another key-value backend without touching flows or the UI

The interface is intentionally simple - a handful of collections
(shifts, settings, templates, activity) read and written whole.
There are no transactions; the last write wins.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional, Union
from uuid import UUID

from tiptrack.models.activity import ActivityEvent
from tiptrack.models.shift import (
    ExportBundle,
    Shift,
    TipOutTemplate,
    UserSettings,
)


class TrackerStorageInterface(ABC):
    """
    Abstract interface for everything TipTrack persists.

    Any storage implementation must implement these methods.
    """

    # ------------------------------------------------------------------
    # Shifts
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_shifts(self) -> list[Shift]:
        """
        All shifts, newest saved first.

        Returns an empty list when nothing has been saved yet.
        """
        pass

    @abstractmethod
    async def get_shift(self, shift_id: UUID) -> Optional[Shift]:
        """
        Retrieve a shift by its ID.

        Returns:
            The shift if found, None otherwise
        """
        pass

    @abstractmethod
    async def save_shift(self, shift: Shift) -> Shift:
        """
        Save a new shift.

        Args:
            shift: The shift to save

        Returns:
            The saved shift

        Raises:
            DuplicateError: If a shift with the same ID exists
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def update_shift(self, shift_id: UUID, updates: dict[str, Any]) -> Shift:
        """
        Merge updates into an existing shift.

        The ID and creation time are kept; updated_at is refreshed.

        Raises:
            NotFoundError: If the shift doesn't exist
            StorageError: If update fails
        """
        pass

    @abstractmethod
    async def delete_shift(self, shift_id: UUID) -> bool:
        """
        Delete a shift by ID.

        Returns:
            True if a shift was removed, False if none matched
        """
        pass

    @abstractmethod
    async def get_shifts_by_date_range(
        self,
        start: date,
        end: date,
    ) -> list[Shift]:
        """Shifts dated between start and end, both inclusive."""
        pass

    @abstractmethod
    async def get_shifts_for_week(
        self,
        reference: Optional[date] = None,
        offset: int = 0,
    ) -> list[Shift]:
        """
        Shifts in the week containing `reference`.

        The first day of the week comes from the stored settings.
        """
        pass

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_settings(self) -> UserSettings:
        """The settings record, or defaults when none has been saved."""
        pass

    @abstractmethod
    async def save_settings(self, settings: UserSettings) -> UserSettings:
        """Overwrite the settings record wholesale."""
        pass

    @abstractmethod
    async def update_settings(self, updates: dict[str, Any]) -> UserSettings:
        """Merge updates into the current settings record and save it."""
        pass

    # ------------------------------------------------------------------
    # Tip-out templates
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_templates(self) -> list[TipOutTemplate]:
        """Saved templates, or the default templates if none were ever saved."""
        pass

    @abstractmethod
    async def save_template(self, template: TipOutTemplate) -> TipOutTemplate:
        """Append a template."""
        pass

    @abstractmethod
    async def delete_template(self, template_id: UUID) -> bool:
        """Delete a template. Returns False if none matched."""
        pass

    # ------------------------------------------------------------------
    # Activity log
    # ------------------------------------------------------------------

    @abstractmethod
    async def append_activity(self, event: ActivityEvent) -> bool:
        """Append an activity event to the log."""
        pass

    @abstractmethod
    async def get_recent_activity(self, limit: int = 50) -> list[ActivityEvent]:
        """Most recent activity events, newest first."""
        pass

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    @abstractmethod
    async def clear_all_data(self) -> bool:
        """Remove every stored collection, settings included."""
        pass

    @abstractmethod
    async def export_data(self) -> ExportBundle:
        """Snapshot of shifts, settings and templates."""
        pass

    @abstractmethod
    async def import_data(
        self,
        data: Union[ExportBundle, dict[str, Any]],
    ) -> list[str]:
        """
        Overwrite stored collections from an export.

        Only the sections present in `data` are replaced.

        Returns:
            Names of the sections that were imported
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not read or write the storage backend."""
    pass


class SerializationError(StorageError):
    """Stored data could not be decoded into valid records."""
    pass
