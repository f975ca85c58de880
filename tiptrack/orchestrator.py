"""
Main Orchestrator for TipTrack

This module ties together storage, validation, the calculation engine
and activity logging, and defines the flows the UI calls:
1. Shift logging (input → validate → save → log)
2. Dashboard and week views (load → filter by week → calculate)
3. Tip-out templates
4. Onboarding, settings and data management

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is saved that has validation errors
- The engine only ever sees data already loaded from the store
- Every store mutation is logged
- Storage failures are logged and re-raised for the UI to report
"""

from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError

from tiptrack.activity import ActivityLogger, configure_logging
from tiptrack.calculator import TipOutCalculator
from tiptrack.config import get_settings
from tiptrack.engine import (
    calculate_paycheck_preview,
    calculate_trends,
    calculate_week_stats,
    calculate_weekly_summary,
    filter_shifts_in_range,
    week_bounds,
)
from tiptrack.models.activity import ActivityEvent
from tiptrack.models.results import PaycheckPreview, Trends, WeeklySummary, WeekStats
from tiptrack.models.shift import (
    ExportBundle,
    Role,
    Shift,
    TipOutTemplate,
    UserSettings,
)
from tiptrack.models.validation import ValidationIssue, ValidationResult
from tiptrack.services.storage import (
    InMemoryClient,
    JsonFileClient,
    LocalTrackerStorage,
    NotFoundError,
    StorageError,
    TrackerStorageInterface,
)
from tiptrack.services.storage.local import PROTECTED_SHIFT_FIELDS, canonical_keys
from tiptrack.validation import ShiftValidator


# =============================================================================
# VIEW MODELS
# =============================================================================

class DashboardView(BaseModel):
    """Everything the dashboard screen renders."""
    model_config = ConfigDict(frozen=True)

    settings: UserSettings
    today_shift: Optional[Shift]
    recent_shifts: list[Shift]
    week_start: date
    week_end: date
    week_stats: WeekStats
    preview: PaycheckPreview
    trends: Trends


class WeekView(BaseModel):
    """One week of shifts with its summary."""
    model_config = ConfigDict(frozen=True)

    settings: UserSettings
    offset: int
    week_start: date
    week_end: date
    shifts: list[Shift]
    summary: WeeklySummary
    stats: WeekStats

    @property
    def label(self) -> str:
        if self.offset == 0:
            return "This Week"
        if self.offset == -1:
            return "Last Week"
        return f"{self.week_start:%b %d} - {self.week_end:%b %d}"


def _newest_first(shifts: list[Shift]) -> list[Shift]:
    return sorted(shifts, key=lambda s: (s.shift_date, s.created_at), reverse=True)


def invalid_input_result(error: ValidationError) -> ValidationResult:
    """Report pydantic field errors as error-level validation issues."""
    issues = [
        ValidationIssue(
            field=".".join(str(part) for part in err["loc"]) or "shift",
            issue_type="invalid_value",
            message=err["msg"],
            severity="error",
        )
        for err in error.errors()
    ]
    return ValidationResult(is_valid=False, issues=issues)


# =============================================================================
# SHIFTS
# =============================================================================

class ShiftFlow:
    """
    Orchestrates logging, editing and deleting shifts.

    Flow:
    1. Build → Shift from the editor's input
    2. Validate → errors block, warnings are returned with the result
    3. Save → Persist to storage
    4. Log → Activity event
    """

    def __init__(
        self,
        storage: TrackerStorageInterface,
        validator: Optional[ShiftValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._storage = storage
        self._validator = validator or ShiftValidator(storage)
        self._activity_logger = activity_logger or ActivityLogger()

    async def _storage_failed(self, operation: str, error: StorageError) -> None:
        await self._activity_logger.log_storage_error(operation, str(error))

    async def _rejected(self, validation: ValidationResult) -> None:
        await self._activity_logger.log_shift_rejected([
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in validation.issues
            if i.severity == "error"
        ])

    async def log_shift(
        self,
        shift: Shift,
        today: Optional[date] = None,
    ) -> tuple[Optional[Shift], ValidationResult]:
        """
        Validate and save a new shift.

        Returns:
            (saved_shift, validation). saved_shift is None when
            validation found errors.
        """
        validation = await self._validator.validate(shift, today=today)
        if not validation.is_valid:
            await self._rejected(validation)
            return None, validation

        try:
            saved = await self._storage.save_shift(shift)
        except StorageError as e:
            await self._storage_failed("save_shift", e)
            raise

        await self._activity_logger.log_shift_saved(
            shift_id=saved.id,
            shift_date=saved.shift_date.isoformat(),
            net_tips=f"{saved.net_tips:.2f}",
        )
        return saved, validation

    async def edit_shift(
        self,
        shift_id: UUID,
        updates: dict[str, Any],
        today: Optional[date] = None,
    ) -> tuple[Optional[Shift], ValidationResult]:
        """
        Validate and apply edits to an existing shift.

        The shift keeps its ID; updated_at is refreshed by the store.

        Raises:
            NotFoundError: If the shift doesn't exist
        """
        try:
            existing = await self._storage.get_shift(shift_id)
        except StorageError as e:
            await self._storage_failed("get_shift", e)
            raise
        if existing is None:
            raise NotFoundError(f"Shift {shift_id} not found")

        merged = existing.model_dump()
        merged.update({
            key: value
            for key, value in canonical_keys(Shift, updates).items()
            if key not in PROTECTED_SHIFT_FIELDS
        })
        try:
            candidate = Shift.model_validate(merged)
        except ValidationError as e:
            validation = invalid_input_result(e)
            await self._rejected(validation)
            return None, validation

        validation = await self._validator.validate(candidate, today=today)
        if not validation.is_valid:
            await self._rejected(validation)
            return None, validation

        try:
            updated = await self._storage.update_shift(shift_id, updates)
        except StorageError as e:
            await self._storage_failed("update_shift", e)
            raise

        changed = [
            name for name in Shift.model_fields
            if name not in ("updated_at",)
            and getattr(existing, name) != getattr(updated, name)
        ]
        await self._activity_logger.log_shift_updated(shift_id, changed)
        return updated, validation

    async def delete_shift(self, shift_id: UUID) -> bool:
        try:
            deleted = await self._storage.delete_shift(shift_id)
        except StorageError as e:
            await self._storage_failed("delete_shift", e)
            raise

        if deleted:
            await self._activity_logger.log_shift_deleted(shift_id)
        return deleted


# =============================================================================
# DASHBOARD / WEEK SUMMARY
# =============================================================================

class SummaryFlow:
    """
    Builds the read-only views.

    Loads shifts and settings, filters them into week buckets and
    hands them to the engine. Nothing here writes to the store.
    """

    def __init__(
        self,
        storage: TrackerStorageInterface,
        recent_limit: Optional[int] = None,
    ):
        self._storage = storage
        self._recent_limit = recent_limit or get_settings().app.recent_shifts_limit

    async def load_dashboard(self, today: Optional[date] = None) -> DashboardView:
        today = today or date.today()
        shifts = await self._storage.get_shifts()
        settings = await self._storage.get_settings()

        start, end = week_bounds(today, settings.week_starts_on)
        this_week = filter_shifts_in_range(shifts, start, end)
        last_week = filter_shifts_in_range(
            shifts, start - timedelta(weeks=1), end - timedelta(weeks=1)
        )
        today_shift = next((s for s in shifts if s.shift_date == today), None)

        return DashboardView(
            settings=settings,
            today_shift=today_shift,
            recent_shifts=_newest_first(shifts)[:self._recent_limit],
            week_start=start,
            week_end=end,
            week_stats=calculate_week_stats(this_week, settings),
            preview=calculate_paycheck_preview(this_week, settings),
            trends=calculate_trends(this_week, last_week, settings),
        )

    async def load_week(
        self,
        offset: int = 0,
        today: Optional[date] = None,
    ) -> WeekView:
        """
        One week of shifts.

        Args:
            offset: 0 for this week, -1 for last week, and so on
        """
        shifts = await self._storage.get_shifts()
        settings = await self._storage.get_settings()

        start, end = week_bounds(today, settings.week_starts_on, offset)
        week_shifts = filter_shifts_in_range(shifts, start, end)

        return WeekView(
            settings=settings,
            offset=offset,
            week_start=start,
            week_end=end,
            shifts=_newest_first(week_shifts),
            summary=calculate_weekly_summary(week_shifts, settings),
            stats=calculate_week_stats(week_shifts, settings),
        )

    async def paycheck_preview(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> PaycheckPreview:
        """Preview for an arbitrary date range (all shifts by default)."""
        settings = await self._storage.get_settings()
        if start is None and end is None:
            shifts = await self._storage.get_shifts()
        else:
            shifts = await self._storage.get_shifts_by_date_range(
                start or date.min, end or date.max
            )
        return calculate_paycheck_preview(shifts, settings)

    async def recent_activity(self, limit: int = 20) -> list[ActivityEvent]:
        return await self._storage.get_recent_activity(limit)


# =============================================================================
# TIP-OUT TEMPLATES
# =============================================================================

class TemplateFlow:
    """Saving, loading and deleting tip-out templates."""

    def __init__(
        self,
        storage: TrackerStorageInterface,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._storage = storage
        self._activity_logger = activity_logger or ActivityLogger()

    async def list_templates(self) -> list[TipOutTemplate]:
        return await self._storage.get_templates()

    async def save_from_calculator(
        self,
        calculator: TipOutCalculator,
        name: str,
    ) -> TipOutTemplate:
        template = calculator.to_template(name)
        try:
            await self._storage.save_template(template)
        except StorageError as e:
            await self._activity_logger.log_storage_error("save_template", str(e))
            raise
        await self._activity_logger.log_template_saved(template.id, template.name)
        return template

    async def load_into_calculator(
        self,
        calculator: TipOutCalculator,
        template_id: UUID,
    ) -> Optional[TipOutTemplate]:
        """Replace the calculator's recipients with a saved template's."""
        for template in await self._storage.get_templates():
            if template.id == template_id:
                calculator.load_template(template)
                return template
        return None

    async def delete_template(self, template_id: UUID) -> bool:
        try:
            deleted = await self._storage.delete_template(template_id)
        except StorageError as e:
            await self._activity_logger.log_storage_error("delete_template", str(e))
            raise
        if deleted:
            await self._activity_logger.log_template_deleted(template_id)
        return deleted


# =============================================================================
# SETTINGS / ONBOARDING / DATA
# =============================================================================

class SettingsFlow:
    """Onboarding, settings edits and whole-store data management."""

    def __init__(
        self,
        storage: TrackerStorageInterface,
        validator: Optional[ShiftValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._storage = storage
        self._validator = validator or ShiftValidator(storage)
        self._activity_logger = activity_logger or ActivityLogger()

    async def get_settings(self) -> UserSettings:
        return await self._storage.get_settings()

    async def complete_onboarding(
        self,
        role: Role,
        hourly_wage: Optional[Decimal] = None,
        federal_tax_rate: Optional[Decimal] = None,
        state_tax_rate: Optional[Decimal] = None,
    ) -> UserSettings:
        """
        Save the first settings record.

        The wage defaults to the role's usual base wage; tax rates
        default to the standard 12% federal and 5% state.
        """
        defaults = UserSettings()
        settings = UserSettings(
            onboarding_complete=True,
            role=role,
            hourly_wage=hourly_wage if hourly_wage is not None else role.default_wage,
            federal_tax_rate=(
                federal_tax_rate if federal_tax_rate is not None
                else defaults.federal_tax_rate
            ),
            state_tax_rate=(
                state_tax_rate if state_tax_rate is not None
                else defaults.state_tax_rate
            ),
        )
        try:
            await self._storage.save_settings(settings)
        except StorageError as e:
            await self._activity_logger.log_storage_error("save_settings", str(e))
            raise
        await self._activity_logger.log_onboarding_completed(
            role=role.value,
            hourly_wage=str(settings.hourly_wage),
        )
        return settings

    async def update_settings(
        self,
        updates: dict[str, Any],
    ) -> tuple[UserSettings, ValidationResult]:
        """Merge and save settings. Warnings are returned, never blocking."""
        try:
            settings = await self._storage.update_settings(updates)
        except StorageError as e:
            await self._activity_logger.log_storage_error("update_settings", str(e))
            raise
        await self._activity_logger.log_settings_saved(sorted(updates))
        return settings, self._validator.validate_settings(settings)

    async def export_data(self) -> ExportBundle:
        bundle = await self._storage.export_data()
        await self._activity_logger.log_data_exported(len(bundle.shifts))
        return bundle

    async def import_data(
        self,
        data: Union[ExportBundle, dict[str, Any]],
    ) -> list[str]:
        try:
            sections = await self._storage.import_data(data)
        except StorageError as e:
            await self._activity_logger.log_storage_error("import_data", str(e))
            raise
        await self._activity_logger.log_data_imported(sections)
        return sections

    async def clear_all_data(self) -> bool:
        try:
            cleared = await self._storage.clear_all_data()
        except StorageError as e:
            await self._activity_logger.log_storage_error("clear_all_data", str(e))
            raise
        await self._activity_logger.log_data_cleared()
        return cleared


# =============================================================================
# FACTORY
# =============================================================================

def create_app_components(
    use_storage: bool = True,
    data_path: Optional[Path] = None,
) -> tuple[ShiftFlow, SummaryFlow, TemplateFlow, SettingsFlow]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to the JSON data file.
                    Set to False for an in-memory session.
        data_path: Override for the data file location.

    Returns:
        (shift_flow, summary_flow, template_flow, settings_flow)
    """
    configure_logging(get_settings().app.log_level)

    if use_storage:
        client = JsonFileClient(path=data_path)
    else:
        client = InMemoryClient()

    storage = LocalTrackerStorage(client)
    activity_logger = ActivityLogger(storage)
    validator = ShiftValidator(storage)

    shift_flow = ShiftFlow(storage, validator, activity_logger)
    summary_flow = SummaryFlow(storage)
    template_flow = TemplateFlow(storage, activity_logger)
    settings_flow = SettingsFlow(storage, validator, activity_logger)

    return shift_flow, summary_flow, template_flow, settings_flow
