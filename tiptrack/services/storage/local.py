"""
Local Storage Implementation

Shifts, settings, templates and the activity log are kept as JSON
values under fixed keys of a BlobClient:

    shifts    -> list of shift objects, newest saved first
    settings  -> one settings object
    templates -> list of tip-out templates
    activity  -> list of activity events, oldest first

TRADEOFFS:
- Every operation reads (and, for writes, rewrites) a whole collection
- No transactions; concurrent writers are not arbitrated
- Filtering happens in Python, which is fine at personal-use volumes
"""

from datetime import date
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ValidationError

from tiptrack.config import get_settings
from tiptrack.engine.weeks import filter_shifts_in_range, week_bounds
from tiptrack.models.activity import ActivityEvent
from tiptrack.models.shift import (
    ExportBundle,
    Shift,
    TipOutTemplate,
    UserSettings,
    default_templates,
    utc_now,
)
from tiptrack.services.storage.blob import BlobClient, JsonFileClient
from tiptrack.services.storage.interface import (
    DuplicateError,
    NotFoundError,
    SerializationError,
    StorageError,
    TrackerStorageInterface,
)

SHIFTS_KEY = "shifts"
SETTINGS_KEY = "settings"
TEMPLATES_KEY = "templates"
ACTIVITY_KEY = "activity"

ALL_KEYS = (SHIFTS_KEY, SETTINGS_KEY, TEMPLATES_KEY, ACTIVITY_KEY)


def canonical_keys(model: type[BaseModel], updates: dict[str, Any]) -> dict[str, Any]:
    """Rename alias keys (e.g. 'hoursWorked', 'date') to field names."""
    names = {}
    for name, field in model.model_fields.items():
        names[name] = name
        if isinstance(field.validation_alias, AliasChoices):
            for choice in field.validation_alias.choices:
                if isinstance(choice, str):
                    names[choice] = name
    return {names.get(key, key): value for key, value in updates.items()}


# Shift fields an update may not change
PROTECTED_SHIFT_FIELDS = {"id", "created_at", "updated_at"}


class LocalTrackerStorage(TrackerStorageInterface):
    """
    Tracker storage on top of a key-value blob client.

    Defaults to the JSON file configured in StorageSettings.
    """

    def __init__(
        self,
        client: Optional[BlobClient] = None,
        activity_limit: Optional[int] = None,
    ):
        self._client = client or JsonFileClient()
        if activity_limit is None:
            activity_limit = get_settings().storage.activity_limit
        self._activity_limit = activity_limit

    # ------------------------------------------------------------------
    # Serialization helpers
    # ------------------------------------------------------------------

    def _read_list(self, key: str) -> Optional[list]:
        raw = self._client.get_item(key)
        if raw is None:
            return None
        if not isinstance(raw, list):
            raise SerializationError(
                f"Expected a list under '{key}', found {type(raw).__name__}"
            )
        return raw

    def _load_shifts(self) -> list[Shift]:
        raw = self._read_list(SHIFTS_KEY) or []
        try:
            return [Shift.model_validate(item) for item in raw]
        except ValidationError as e:
            raise SerializationError(f"Stored shift is invalid: {e}") from e

    def _store_shifts(self, shifts: list[Shift]) -> None:
        self._client.set_item(
            SHIFTS_KEY,
            [shift.model_dump(mode="json") for shift in shifts],
        )

    def _load_templates(self) -> Optional[list[TipOutTemplate]]:
        raw = self._read_list(TEMPLATES_KEY)
        if raw is None:
            return None
        try:
            return [TipOutTemplate.model_validate(item) for item in raw]
        except ValidationError as e:
            raise SerializationError(f"Stored template is invalid: {e}") from e

    def _store_templates(self, templates: list[TipOutTemplate]) -> None:
        self._client.set_item(
            TEMPLATES_KEY,
            [template.model_dump(mode="json") for template in templates],
        )

    # ------------------------------------------------------------------
    # Shifts
    # ------------------------------------------------------------------

    async def get_shifts(self) -> list[Shift]:
        return self._load_shifts()

    async def get_shift(self, shift_id: UUID) -> Optional[Shift]:
        for shift in self._load_shifts():
            if shift.id == shift_id:
                return shift
        return None

    async def save_shift(self, shift: Shift) -> Shift:
        shifts = self._load_shifts()
        if any(existing.id == shift.id for existing in shifts):
            raise DuplicateError(f"Shift {shift.id} already exists")

        shifts.insert(0, shift)
        self._store_shifts(shifts)
        return shift

    async def update_shift(self, shift_id: UUID, updates: dict[str, Any]) -> Shift:
        shifts = self._load_shifts()

        for index, existing in enumerate(shifts):
            if existing.id != shift_id:
                continue

            changes = {
                key: value
                for key, value in canonical_keys(Shift, updates).items()
                if key not in PROTECTED_SHIFT_FIELDS
            }
            merged = existing.model_dump()
            merged.update(changes)
            merged["updated_at"] = utc_now()
            try:
                updated = Shift.model_validate(merged)
            except ValidationError as e:
                raise StorageError(f"Update would make shift invalid: {e}") from e

            shifts[index] = updated
            self._store_shifts(shifts)
            return updated

        raise NotFoundError(f"Shift {shift_id} not found")

    async def delete_shift(self, shift_id: UUID) -> bool:
        shifts = self._load_shifts()
        remaining = [shift for shift in shifts if shift.id != shift_id]
        if len(remaining) == len(shifts):
            return False
        self._store_shifts(remaining)
        return True

    async def get_shifts_by_date_range(
        self,
        start: date,
        end: date,
    ) -> list[Shift]:
        return filter_shifts_in_range(self._load_shifts(), start, end)

    async def get_shifts_for_week(
        self,
        reference: Optional[date] = None,
        offset: int = 0,
    ) -> list[Shift]:
        settings = await self.get_settings()
        start, end = week_bounds(reference, settings.week_starts_on, offset)
        return await self.get_shifts_by_date_range(start, end)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_settings(self) -> UserSettings:
        raw = self._client.get_item(SETTINGS_KEY)
        if raw is None:
            return UserSettings()
        try:
            return UserSettings.model_validate(raw)
        except ValidationError as e:
            raise SerializationError(f"Stored settings are invalid: {e}") from e

    async def save_settings(self, settings: UserSettings) -> UserSettings:
        self._client.set_item(SETTINGS_KEY, settings.model_dump(mode="json"))
        return settings

    async def update_settings(self, updates: dict[str, Any]) -> UserSettings:
        current = await self.get_settings()
        merged = current.model_dump()
        merged.update(canonical_keys(UserSettings, updates))
        try:
            settings = UserSettings.model_validate(merged)
        except ValidationError as e:
            raise StorageError(f"Invalid settings update: {e}") from e
        return await self.save_settings(settings)

    # ------------------------------------------------------------------
    # Tip-out templates
    # ------------------------------------------------------------------

    async def get_templates(self) -> list[TipOutTemplate]:
        templates = self._load_templates()
        if templates is None:
            return default_templates()
        return templates

    async def save_template(self, template: TipOutTemplate) -> TipOutTemplate:
        templates = await self.get_templates()
        if any(existing.id == template.id for existing in templates):
            raise DuplicateError(f"Template {template.id} already exists")
        templates.append(template)
        self._store_templates(templates)
        return template

    async def delete_template(self, template_id: UUID) -> bool:
        templates = await self.get_templates()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            return False
        self._store_templates(remaining)
        return True

    # ------------------------------------------------------------------
    # Activity log
    # ------------------------------------------------------------------

    async def append_activity(self, event: ActivityEvent) -> bool:
        events = self._read_list(ACTIVITY_KEY) or []
        events.append(event.model_dump(mode="json"))
        if self._activity_limit and len(events) > self._activity_limit:
            events = events[-self._activity_limit:]
        self._client.set_item(ACTIVITY_KEY, events)
        return True

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityEvent]:
        raw = self._read_list(ACTIVITY_KEY) or []
        try:
            events = [ActivityEvent.model_validate(item) for item in raw]
        except ValidationError as e:
            raise SerializationError(f"Stored activity event is invalid: {e}") from e
        return list(reversed(events))[:limit]

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    async def clear_all_data(self) -> bool:
        self._client.remove_items(ALL_KEYS)
        return True

    async def export_data(self) -> ExportBundle:
        return ExportBundle(
            shifts=await self.get_shifts(),
            settings=await self.get_settings(),
            templates=await self.get_templates(),
        )

    async def import_data(
        self,
        data: Union[ExportBundle, dict[str, Any]],
    ) -> list[str]:
        if isinstance(data, ExportBundle):
            data = data.model_dump(mode="json")

        if not isinstance(data, dict):
            raise SerializationError("Import data must be a JSON object")

        # Older exports call templates "tipOutPresets"
        if "templates" not in data and "tipOutPresets" in data:
            data = {**data, "templates": data["tipOutPresets"]}

        # Validate everything before writing anything
        try:
            shifts = (
                [Shift.model_validate(item) for item in data["shifts"]]
                if data.get("shifts") is not None else None
            )
            settings = (
                UserSettings.model_validate(data["settings"])
                if data.get("settings") is not None else None
            )
            templates = (
                [TipOutTemplate.model_validate(item) for item in data["templates"]]
                if data.get("templates") is not None else None
            )
        except ValidationError as e:
            raise SerializationError(f"Import data is invalid: {e}") from e

        imported = []
        if shifts is not None:
            self._store_shifts(shifts)
            imported.append(SHIFTS_KEY)
        if settings is not None:
            await self.save_settings(settings)
            imported.append(SETTINGS_KEY)
        if templates is not None:
            self._store_templates(templates)
            imported.append(TEMPLATES_KEY)
        return imported
