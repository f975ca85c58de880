"""
Tests for the storage layer.

Async store calls are driven with asyncio.run; the JSON file client
only ever touches pytest's tmp_path.
"""

import asyncio
import json
import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from tiptrack.models.activity import ActivityEventBuilder
from tiptrack.models.shift import (
    ExportBundle,
    Shift,
    TipOutRecipient,
    TipOutTemplate,
    UserSettings,
    WeekStart,
)
from tiptrack.services.storage import (
    DuplicateError,
    InMemoryClient,
    JsonFileClient,
    LocalTrackerStorage,
    NotFoundError,
    SerializationError,
    StorageError,
)


def run(coro):
    return asyncio.run(coro)


def make_shift(day=date(2024, 3, 15), cash="100", notes=None):
    return Shift(
        shift_date=day,
        hours_worked=Decimal("6"),
        cash_tips=Decimal(cash),
        credit_tips=Decimal("50"),
        tip_out=Decimal("10"),
        notes=notes,
    )


@pytest.fixture
def storage():
    return LocalTrackerStorage(InMemoryClient(), activity_limit=5)


class TestBlobClients:
    """Tests for the key-value clients."""

    def test_in_memory_copies_values(self):
        client = InMemoryClient()
        value = {"a": [1, 2]}
        client.set_item("k", value)
        value["a"].append(3)
        assert client.get_item("k") == {"a": [1, 2]}

    def test_in_memory_remove(self):
        client = InMemoryClient({"a": 1, "b": 2})
        client.remove_items(["a", "missing"])
        assert client.has_item("a") is False
        assert client.get_item("b") == 2

    def test_json_file_round_trip(self, tmp_path):
        path = tmp_path / "data" / "tiptrack.json"
        client = JsonFileClient(path=path)
        client.set_item("settings", {"currency": "USD"})
        assert json.loads(path.read_text())["settings"] == {"currency": "USD"}
        assert JsonFileClient(path=path).get_item("settings") == {"currency": "USD"}

    def test_json_file_missing_file_is_empty(self, tmp_path):
        client = JsonFileClient(path=tmp_path / "nothing.json")
        assert client.get_item("shifts") is None

    def test_json_file_leaves_no_temp_files(self, tmp_path):
        path = tmp_path / "tiptrack.json"
        client = JsonFileClient(path=path)
        client.set_item("a", 1)
        client.set_item("b", 2)
        assert [p.name for p in tmp_path.iterdir()] == ["tiptrack.json"]

    def test_json_file_invalid_json(self, tmp_path):
        path = tmp_path / "tiptrack.json"
        path.write_text("{not json")
        with pytest.raises(SerializationError):
            JsonFileClient(path=path).get_item("shifts")

    def test_json_file_non_object(self, tmp_path):
        path = tmp_path / "tiptrack.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(SerializationError):
            JsonFileClient(path=path).get_item("shifts")

    def test_json_file_read_failure_is_connection_error(self, tmp_path):
        """A directory where the file should be fails every retry."""
        path = tmp_path / "tiptrack.json"
        path.mkdir()
        client = JsonFileClient(path=path, retries=2)
        with pytest.raises(StorageError):
            client.get_item("shifts")


class TestShiftStorage:
    """Tests for shift CRUD."""

    def test_save_and_get(self, storage):
        shift = run(storage.save_shift(make_shift()))
        loaded = run(storage.get_shift(shift.id))
        assert loaded == shift

    def test_new_shifts_are_prepended(self, storage):
        first = run(storage.save_shift(make_shift(day=date(2024, 3, 14))))
        second = run(storage.save_shift(make_shift(day=date(2024, 3, 15))))
        assert [s.id for s in run(storage.get_shifts())] == [second.id, first.id]

    def test_duplicate_id_rejected(self, storage):
        shift = run(storage.save_shift(make_shift()))
        with pytest.raises(DuplicateError):
            run(storage.save_shift(shift))

    def test_get_unknown_shift(self, storage):
        assert run(storage.get_shift(uuid4())) is None

    def test_update_merges_and_refreshes_updated_at(self, storage):
        shift = run(storage.save_shift(make_shift()))
        updated = run(storage.update_shift(shift.id, {"cashTips": "120", "notes": "Patio"}))
        assert updated.id == shift.id
        assert updated.cash_tips == Decimal("120")
        assert updated.credit_tips == Decimal("50")
        assert updated.notes == "Patio"
        assert updated.created_at == shift.created_at
        assert updated.updated_at >= shift.updated_at
        assert run(storage.get_shift(shift.id)).cash_tips == Decimal("120")

    def test_update_accepts_date_alias(self, storage):
        shift = run(storage.save_shift(make_shift()))
        updated = run(storage.update_shift(shift.id, {"date": "2024-03-16"}))
        assert updated.shift_date == date(2024, 3, 16)

    def test_update_cannot_change_id(self, storage):
        shift = run(storage.save_shift(make_shift()))
        updated = run(storage.update_shift(shift.id, {"id": str(uuid4())}))
        assert updated.id == shift.id

    def test_update_unknown_shift(self, storage):
        with pytest.raises(NotFoundError):
            run(storage.update_shift(uuid4(), {"notes": "x"}))

    def test_update_with_invalid_value(self, storage):
        shift = run(storage.save_shift(make_shift()))
        with pytest.raises(StorageError):
            run(storage.update_shift(shift.id, {"cash_tips": "-5"}))

    def test_delete(self, storage):
        shift = run(storage.save_shift(make_shift()))
        assert run(storage.delete_shift(shift.id)) is True
        assert run(storage.delete_shift(shift.id)) is False
        assert run(storage.get_shifts()) == []

    def test_date_range(self, storage):
        for day in (9, 10, 16, 17):
            run(storage.save_shift(make_shift(day=date(2024, 3, day))))
        shifts = run(storage.get_shifts_by_date_range(date(2024, 3, 10), date(2024, 3, 16)))
        assert sorted(s.shift_date.day for s in shifts) == [10, 16]

    def test_shifts_for_week_uses_week_start(self, storage):
        run(storage.save_settings(UserSettings(week_starts_on=WeekStart.MONDAY)))
        for day in (10, 11, 17):
            run(storage.save_shift(make_shift(day=date(2024, 3, day))))
        shifts = run(storage.get_shifts_for_week(date(2024, 3, 13)))
        assert sorted(s.shift_date.day for s in shifts) == [11, 17]

    def test_persists_to_json_file(self, tmp_path):
        path = tmp_path / "tiptrack.json"
        shift = run(LocalTrackerStorage(JsonFileClient(path=path)).save_shift(make_shift()))
        reopened = LocalTrackerStorage(JsonFileClient(path=path))
        assert run(reopened.get_shift(shift.id)) == shift

    def test_corrupt_shift_record(self):
        storage = LocalTrackerStorage(InMemoryClient({"shifts": [{"hoursWorked": 3}]}))
        with pytest.raises(SerializationError):
            run(storage.get_shifts())


class TestSettingsStorage:
    """Tests for the settings record."""

    def test_defaults_when_nothing_stored(self, storage):
        assert run(storage.get_settings()) == UserSettings()

    def test_save_and_load(self, storage):
        run(storage.save_settings(UserSettings(hourly_wage=Decimal("7.25"), currency="eur")))
        settings = run(storage.get_settings())
        assert settings.hourly_wage == Decimal("7.25")
        assert settings.currency == "EUR"

    def test_update_merges(self, storage):
        run(storage.save_settings(UserSettings(state_tax_rate=Decimal("3"))))
        settings = run(storage.update_settings({"federalTaxRate": "10"}))
        assert settings.federal_tax_rate == Decimal("10")
        assert settings.state_tax_rate == Decimal("3")

    def test_invalid_update(self, storage):
        with pytest.raises(StorageError):
            run(storage.update_settings({"hourly_wage": "-1"}))


class TestTemplateStorage:
    """Tests for tip-out templates."""

    def test_defaults_before_any_saved(self, storage):
        names = [t.name for t in run(storage.get_templates())]
        assert names == ["Standard", "Fine Dining"]

    def test_save_appends(self, storage):
        template = TipOutTemplate(
            name="Patio",
            recipients=[TipOutRecipient(role="Busser", percentage=Decimal("12"))],
        )
        run(storage.save_template(template))
        names = [t.name for t in run(storage.get_templates())]
        assert names == ["Standard", "Fine Dining", "Patio"]

    def test_delete(self, storage):
        standard = run(storage.get_templates())[0]
        assert run(storage.delete_template(standard.id)) is True
        assert run(storage.delete_template(standard.id)) is False
        assert [t.name for t in run(storage.get_templates())] == ["Fine Dining"]

    def test_deleting_every_template_leaves_none(self, storage):
        for template in run(storage.get_templates()):
            run(storage.delete_template(template.id))
        assert run(storage.get_templates()) == []


class TestActivityStorage:
    """Tests for the activity log."""

    def test_newest_first(self, storage):
        run(storage.append_activity(ActivityEventBuilder.data_exported(1)))
        run(storage.append_activity(ActivityEventBuilder.data_cleared()))
        events = run(storage.get_recent_activity())
        assert events[0].event_type.value == "data_cleared"
        assert events[1].event_type.value == "data_exported"

    def test_trimmed_to_limit(self, storage):
        for count in range(8):
            run(storage.append_activity(ActivityEventBuilder.data_exported(count)))
        events = run(storage.get_recent_activity())
        assert len(events) == 5
        assert events[0].details["shift_count"] == 7

    def test_recent_limit(self, storage):
        for count in range(4):
            run(storage.append_activity(ActivityEventBuilder.data_exported(count)))
        assert len(run(storage.get_recent_activity(limit=2))) == 2


class TestDataManagement:
    """Tests for export, import and reset."""

    def test_clear_all_data(self, storage):
        run(storage.save_shift(make_shift()))
        run(storage.save_settings(UserSettings(onboarding_complete=True)))
        assert run(storage.clear_all_data()) is True
        assert run(storage.get_shifts()) == []
        assert run(storage.get_settings()).onboarding_complete is False
        assert len(run(storage.get_templates())) == 2

    def test_export_then_import(self, storage):
        shift = run(storage.save_shift(make_shift(notes="Doubles")))
        run(storage.save_settings(UserSettings(hourly_wage=Decimal("5"))))
        bundle = run(storage.export_data())

        other = LocalTrackerStorage(InMemoryClient())
        sections = run(other.import_data(json.loads(bundle.model_dump_json())))
        assert sections == ["shifts", "settings", "templates"]
        assert run(other.get_shift(shift.id)).notes == "Doubles"
        assert run(other.get_settings()).hourly_wage == Decimal("5")

    def test_import_bundle_object(self, storage):
        bundle = ExportBundle(shifts=[make_shift()])
        run(storage.import_data(bundle))
        assert len(run(storage.get_shifts())) == 1

    def test_import_tip_out_presets(self, storage):
        sections = run(storage.import_data({
            "tipOutPresets": [{"name": "Bar", "roles": [{"name": "Barback", "percentage": 10}]}],
        }))
        assert sections == ["templates"]
        assert [t.name for t in run(storage.get_templates())] == ["Bar"]

    def test_invalid_import_writes_nothing(self, storage):
        run(storage.save_shift(make_shift()))
        with pytest.raises(SerializationError):
            run(storage.import_data({
                "shifts": [],
                "settings": {"hourlyWage": "-3"},
            }))
        assert len(run(storage.get_shifts())) == 1

    def test_import_rejects_non_object(self, storage):
        with pytest.raises(SerializationError):
            run(storage.import_data([1, 2]))
