"""Tests for the activity logger."""

import asyncio
import pytest
from uuid import uuid4

from tiptrack.activity import ActivityLogger
from tiptrack.models.activity import ActivityEventBuilder, ActivityType
from tiptrack.services.storage import (
    InMemoryClient,
    LocalTrackerStorage,
    StorageError,
)


def run(coro):
    return asyncio.run(coro)


class FailingStorage(LocalTrackerStorage):
    """Store whose activity log cannot be written."""

    async def append_activity(self, event):
        raise StorageError("disk full")


@pytest.fixture
def storage():
    return LocalTrackerStorage(InMemoryClient())


class TestActivityLogger:
    """Tests for logging and persisting activity events."""

    def test_local_only_logging(self):
        """Without storage the event is only logged locally."""
        logger = ActivityLogger()
        assert run(logger.log_data_cleared()) is None

    def test_events_are_persisted(self, storage):
        logger = ActivityLogger(storage)
        shift_id = uuid4()
        run(logger.log_shift_saved(shift_id, "2024-03-15", "130.00"))
        run(logger.log_shift_deleted(shift_id))

        events = run(storage.get_recent_activity())
        assert [e.event_type for e in events] == [
            ActivityType.SHIFT_DELETED,
            ActivityType.SHIFT_SAVED,
        ]
        assert events[1].entity_id == shift_id

    def test_storage_failure_is_swallowed(self):
        """A failed write returns False instead of raising."""
        logger = ActivityLogger(FailingStorage(InMemoryClient()))
        event = ActivityEventBuilder.storage_error("save_shift", "boom")
        assert run(logger.log(event)) is False

    def test_successful_write_returns_true(self, storage):
        logger = ActivityLogger(storage)
        assert run(logger.log(ActivityEventBuilder.data_exported(2))) is True

    def test_storage_error_event(self, storage):
        logger = ActivityLogger(storage)
        run(logger.log_storage_error("save_shift", "permission denied"))
        event = run(storage.get_recent_activity())[0]
        assert event.event_type == ActivityType.STORAGE_ERROR
        assert event.error_message == "permission denied"

    def test_log_error_with_details(self, storage):
        logger = ActivityLogger(storage)
        run(logger.log_error("ImportError", "bad file", {"line": 3}))
        event = run(storage.get_recent_activity())[0]
        assert event.event_type == ActivityType.SYSTEM_ERROR
        assert event.details == {"line": 3}
