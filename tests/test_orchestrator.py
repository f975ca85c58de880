"""
Integration tests for the orchestrator flows.

Every flow runs against the in-memory store, so nothing touches disk.
"""

import asyncio
import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from tiptrack.activity import ActivityLogger
from tiptrack.calculator import TipOutCalculator
from tiptrack.models.activity import ActivityType
from tiptrack.models.shift import Role, Shift, UserSettings, WeekStart
from tiptrack.orchestrator import (
    SettingsFlow,
    ShiftFlow,
    SummaryFlow,
    TemplateFlow,
    create_app_components,
)
from tiptrack.services.storage import (
    InMemoryClient,
    LocalTrackerStorage,
    NotFoundError,
    StorageError,
)
from tiptrack.validation import ShiftValidator

# Wednesday; its Sunday-first week runs 2024-03-10 .. 2024-03-16
TODAY = date(2024, 3, 13)


def run(coro):
    return asyncio.run(coro)


def make_shift(day=TODAY, hours="8", cash="50", credit="100", tip_out="20"):
    return Shift(
        shift_date=day,
        hours_worked=Decimal(hours),
        cash_tips=Decimal(cash),
        credit_tips=Decimal(credit),
        tip_out=Decimal(tip_out),
    )


def activity_types(storage):
    return [e.event_type for e in run(storage.get_recent_activity())]


class BrokenStorage(LocalTrackerStorage):
    """Store that fails every shift write."""

    async def save_shift(self, shift):
        raise StorageError("disk full")


@pytest.fixture
def storage():
    return LocalTrackerStorage(InMemoryClient())


@pytest.fixture
def shift_flow(storage):
    return ShiftFlow(storage, ShiftValidator(storage), ActivityLogger(storage))


@pytest.fixture
def summary_flow(storage):
    return SummaryFlow(storage, recent_limit=3)


@pytest.fixture
def settings_flow(storage):
    return SettingsFlow(storage, ShiftValidator(storage), ActivityLogger(storage))


@pytest.fixture
def template_flow(storage):
    return TemplateFlow(storage, ActivityLogger(storage))


class TestShiftFlow:
    """Tests for logging, editing and deleting shifts."""

    def test_log_shift(self, shift_flow, storage):
        saved, validation = run(shift_flow.log_shift(make_shift(), today=TODAY))
        assert validation.is_valid is True
        assert run(storage.get_shift(saved.id)) == saved
        assert activity_types(storage) == [ActivityType.SHIFT_SAVED]

    def test_invalid_shift_is_not_saved(self, shift_flow, storage):
        """Zero hours is rejected and logged, nothing is stored."""
        saved, validation = run(shift_flow.log_shift(make_shift(hours="0"), today=TODAY))
        assert saved is None
        assert validation.has_errors is True
        assert run(storage.get_shifts()) == []
        assert activity_types(storage) == [ActivityType.SHIFT_REJECTED]

    def test_warnings_do_not_block(self, shift_flow):
        saved, validation = run(shift_flow.log_shift(
            make_shift(cash="0", credit="10", tip_out="30"), today=TODAY
        ))
        assert saved is not None
        assert validation.warnings

    def test_edit_shift(self, shift_flow, storage):
        saved, _ = run(shift_flow.log_shift(make_shift(), today=TODAY))
        updated, validation = run(shift_flow.edit_shift(
            saved.id, {"cash_tips": Decimal("80"), "notes": "Big table"}, today=TODAY
        ))
        assert validation.is_valid is True
        assert updated.id == saved.id
        assert updated.cash_tips == Decimal("80")

        event = run(storage.get_recent_activity())[0]
        assert event.event_type == ActivityType.SHIFT_UPDATED
        assert sorted(event.details["changed_fields"]) == ["cash_tips", "notes"]

    def test_edit_to_invalid_is_refused(self, shift_flow, storage):
        saved, _ = run(shift_flow.log_shift(make_shift(), today=TODAY))
        updated, validation = run(shift_flow.edit_shift(
            saved.id, {"hours_worked": Decimal("0")}, today=TODAY
        ))
        assert updated is None
        assert validation.is_valid is False
        assert run(storage.get_shift(saved.id)).hours_worked == Decimal("8")

    def test_edit_with_out_of_range_value(self, shift_flow, storage):
        """Negative hours fail field validation and come back as an error."""
        saved, _ = run(shift_flow.log_shift(make_shift(), today=TODAY))
        updated, validation = run(shift_flow.edit_shift(
            saved.id, {"hours_worked": -1}, today=TODAY
        ))
        assert updated is None
        assert validation.is_valid is False
        assert validation.issues[0].field == "hours_worked"
        assert validation.issues[0].severity == "error"
        assert run(storage.get_shift(saved.id)).hours_worked == Decimal("8")
        assert activity_types(storage)[0] == ActivityType.SHIFT_REJECTED

    def test_edit_unknown_shift(self, shift_flow):
        with pytest.raises(NotFoundError):
            run(shift_flow.edit_shift(uuid4(), {"notes": "x"}))

    def test_delete_shift(self, shift_flow, storage):
        saved, _ = run(shift_flow.log_shift(make_shift(), today=TODAY))
        assert run(shift_flow.delete_shift(saved.id)) is True
        assert run(shift_flow.delete_shift(saved.id)) is False
        assert activity_types(storage)[0] == ActivityType.SHIFT_DELETED

    def test_storage_failure_is_logged_and_raised(self):
        storage = BrokenStorage(InMemoryClient())
        flow = ShiftFlow(storage, ShiftValidator(storage), ActivityLogger(storage))
        with pytest.raises(StorageError):
            run(flow.log_shift(make_shift(), today=TODAY))
        assert activity_types(storage) == [ActivityType.STORAGE_ERROR]


class TestSummaryFlow:
    """Tests for the dashboard and week views."""

    def test_dashboard(self, storage, summary_flow):
        run(storage.save_shift(make_shift(day=TODAY)))
        run(storage.save_shift(make_shift(day=date(2024, 3, 11), cash="0", credit="50", tip_out="0")))
        run(storage.save_shift(make_shift(day=date(2024, 3, 5))))

        view = run(summary_flow.load_dashboard(today=TODAY))
        assert view.today_shift.shift_date == TODAY
        assert (view.week_start, view.week_end) == (date(2024, 3, 10), date(2024, 3, 16))
        assert view.week_stats.shift_count == 2
        assert view.week_stats.total_tips == Decimal("200")
        assert view.preview.summary.net_tips == Decimal("180")
        assert view.trends.previous.summary.net_tips == Decimal("130")
        assert [s.shift_date.day for s in view.recent_shifts] == [13, 11, 5]

    def test_dashboard_recent_limit(self, storage, summary_flow):
        for day in (1, 2, 3, 4, 5):
            run(storage.save_shift(make_shift(day=date(2024, 3, day))))
        view = run(summary_flow.load_dashboard(today=TODAY))
        assert [s.shift_date.day for s in view.recent_shifts] == [5, 4, 3]
        assert view.today_shift is None

    def test_empty_dashboard(self, summary_flow):
        view = run(summary_flow.load_dashboard(today=TODAY))
        assert view.week_stats.shift_count == 0
        assert view.trends.changes.total_tips == Decimal("0")
        assert view.recent_shifts == []

    def test_week_navigation(self, storage, summary_flow):
        run(storage.save_shift(make_shift(day=date(2024, 3, 5))))
        run(storage.save_shift(make_shift(day=date(2024, 3, 7), cash="150")))

        this_week = run(summary_flow.load_week(today=TODAY))
        assert this_week.label == "This Week"
        assert this_week.shifts == []

        last_week = run(summary_flow.load_week(offset=-1, today=TODAY))
        assert last_week.label == "Last Week"
        assert [s.shift_date.day for s in last_week.shifts] == [7, 5]
        assert last_week.summary.best_day.day == "Thu"
        assert last_week.stats.shift_count == 2

        older = run(summary_flow.load_week(offset=-2, today=TODAY))
        assert older.label == "Feb 25 - Mar 02"

    def test_week_respects_week_start(self, storage, summary_flow):
        run(storage.save_settings(UserSettings(week_starts_on=WeekStart.MONDAY)))
        view = run(summary_flow.load_week(today=TODAY))
        assert view.week_start == date(2024, 3, 11)
        assert list(view.stats.daily_tips)[0] == "Mon"

    def test_paycheck_preview_for_range(self, storage, summary_flow):
        run(storage.save_shift(make_shift(day=date(2024, 3, 1))))
        run(storage.save_shift(make_shift(day=date(2024, 3, 12))))
        preview = run(summary_flow.paycheck_preview(date(2024, 3, 10), date(2024, 3, 16)))
        assert preview.summary.total_shifts == 1
        assert run(summary_flow.paycheck_preview()).summary.total_shifts == 2

    def test_recent_activity(self, shift_flow, summary_flow):
        """Events come back newest first, capped at the limit."""
        first, _ = run(shift_flow.log_shift(make_shift(day=date(2024, 3, 11)), today=TODAY))
        run(shift_flow.log_shift(make_shift(day=date(2024, 3, 12)), today=TODAY))
        run(shift_flow.delete_shift(first.id))

        events = run(summary_flow.recent_activity())
        assert [e.event_type for e in events] == [
            ActivityType.SHIFT_DELETED,
            ActivityType.SHIFT_SAVED,
            ActivityType.SHIFT_SAVED,
        ]
        assert events[0].entity_id == first.id

        latest = run(summary_flow.recent_activity(limit=2))
        assert [e.event_id for e in latest] == [e.event_id for e in events[:2]]

    def test_recent_activity_empty(self, summary_flow):
        assert run(summary_flow.recent_activity()) == []


class TestTemplateFlow:
    """Tests for tip-out templates."""

    def test_save_and_load(self, template_flow, storage):
        calculator = TipOutCalculator(total_tips=Decimal("100"))
        calculator.add_recipient("Barback", Decimal("7"))
        template = run(template_flow.save_from_calculator(calculator, "Bar night"))

        fresh = TipOutCalculator()
        loaded = run(template_flow.load_into_calculator(fresh, template.id))
        assert loaded.name == "Bar night"
        assert [r.role for r in fresh.recipients][-1] == "Barback"
        assert activity_types(storage) == [ActivityType.TEMPLATE_SAVED]

    def test_load_unknown_template(self, template_flow):
        calculator = TipOutCalculator()
        assert run(template_flow.load_into_calculator(calculator, uuid4())) is None
        assert len(calculator.recipients) == 3

    def test_delete(self, template_flow, storage):
        standard = run(template_flow.list_templates())[0]
        assert run(template_flow.delete_template(standard.id)) is True
        assert activity_types(storage) == [ActivityType.TEMPLATE_DELETED]


class TestSettingsFlow:
    """Tests for onboarding, settings and data management."""

    def test_onboarding_uses_role_wage(self, settings_flow):
        settings = run(settings_flow.complete_onboarding(Role.BUSSER))
        assert settings.onboarding_complete is True
        assert settings.hourly_wage == Decimal("7.25")
        assert settings.federal_tax_rate == Decimal("12")
        assert run(settings_flow.get_settings()).role == Role.BUSSER

    def test_onboarding_with_values(self, settings_flow, storage):
        settings = run(settings_flow.complete_onboarding(
            Role.SERVER,
            hourly_wage=Decimal("3.00"),
            federal_tax_rate=Decimal("10"),
            state_tax_rate=Decimal("0"),
        ))
        assert settings.hourly_wage == Decimal("3.00")
        assert settings.state_tax_rate == Decimal("0")
        assert activity_types(storage) == [ActivityType.ONBOARDING_COMPLETED]

    def test_update_settings_returns_warnings(self, settings_flow):
        settings, validation = run(settings_flow.update_settings(
            {"federal_tax_rate": Decimal("150")}
        ))
        assert settings.federal_tax_rate == Decimal("150")
        assert validation.warnings

    def test_export_import_and_clear(self, settings_flow, storage):
        run(storage.save_shift(make_shift()))
        bundle = run(settings_flow.export_data())
        assert len(bundle.shifts) == 1

        assert run(settings_flow.clear_all_data()) is True
        assert run(storage.get_shifts()) == []

        sections = run(settings_flow.import_data(bundle))
        assert "shifts" in sections
        assert len(run(storage.get_shifts())) == 1
        assert activity_types(storage) == [
            ActivityType.DATA_IMPORTED,
            ActivityType.DATA_CLEARED,
        ]


class TestFactory:
    """Tests for create_app_components."""

    def test_in_memory_components(self):
        shift_flow, summary_flow, template_flow, settings_flow = create_app_components(
            use_storage=False
        )
        saved, _ = run(shift_flow.log_shift(make_shift(), today=TODAY))
        view = run(summary_flow.load_week(today=TODAY))
        assert [s.id for s in view.shifts] == [saved.id]
        assert len(run(template_flow.list_templates())) == 2
        assert run(settings_flow.get_settings()).onboarding_complete is False

    def test_file_components(self, tmp_path):
        path = tmp_path / "tiptrack.json"
        shift_flow, _, _, _ = create_app_components(data_path=path)
        run(shift_flow.log_shift(make_shift(), today=TODAY))
        assert path.exists()
