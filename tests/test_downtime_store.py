"""Tests for DowntimeStore transactions, pagination and flag updates."""

from datetime import datetime, timedelta, timezone

import pytest

from downtime_api.errors import InternalError, NotFoundError, ValidationError
from downtime_api.models import DowntimeWindow
from downtime_api.repositories.downtime_store import NO_VALID_FIELDS
from downtime_api.schemas.downtime import DowntimeChanges

FROM = datetime(2024, 1, 1, 0, 0)
TO = datetime(2024, 1, 1, 2, 0)


def schedule(store, system_id=5, reason="Patch night", actor="alice", from_time=FROM, to_time=TO):
    return store.create(system_id, from_time, to_time, reason, actor)


class TestCreate:

    def test_create_stores_scheduled_window(self, store, fetch_window, clock):
        window_id = schedule(store)

        window = fetch_window(window_id)
        assert window.system_id == 5
        assert window.from_time == FROM
        assert window.to_time == TO
        assert window.reason == "Patch night"
        assert window.finished == 0
        assert window.archived == 0
        assert window.created_by == window.updated_by == "alice"
        assert window.created_at == window.updated_at == clock.now

    def test_create_with_unknown_system_writes_nothing(self, store, count_rows):
        schedule(store)
        before = count_rows(DowntimeWindow)

        with pytest.raises(NotFoundError, match="Invalid System Selected"):
            schedule(store, system_id=999)

        assert count_rows(DowntimeWindow) == before

    def test_create_defaults_reason_to_empty(self, store, fetch_window):
        window_id = schedule(store, reason=None)
        assert fetch_window(window_id).reason == ""

    def test_create_converts_aware_times_to_utc(self, store, fetch_window):
        ist = timezone(timedelta(hours=5, minutes=30))
        window_id = schedule(
            store,
            from_time=datetime(2024, 1, 1, 5, 30, tzinfo=ist),
            to_time=datetime(2024, 1, 1, 7, 30, tzinfo=ist),
        )

        window = fetch_window(window_id)
        assert window.from_time == FROM
        assert window.to_time == TO

    def test_create_does_not_enforce_time_ordering(self, store, fetch_window):
        window_id = schedule(store, from_time=TO, to_time=FROM)
        assert fetch_window(window_id).from_time > fetch_window(window_id).to_time

    def test_storage_failure_rolls_back_and_hides_details(self, store, count_rows):
        # created_by is NOT NULL
        with pytest.raises(InternalError) as exc_info:
            schedule(store, actor=None)

        assert exc_info.value.message == "Failed to create downtime"
        assert exc_info.value.status_code == 500
        assert count_rows(DowntimeWindow) == 0


class TestList:

    @pytest.mark.parametrize("page,page_size", [(0, 10), (-1, 10), (1, 0), (1, 101)])
    def test_rejects_out_of_range_paging(self, store, page, page_size):
        with pytest.raises(ValidationError):
            store.list(page, page_size)

    def test_accepts_page_size_bounds(self, store):
        schedule(store)
        assert len(store.list(1, 1).rows) == 1
        assert len(store.list(1, 100).rows) == 1

    def test_most_recent_first_with_total(self, store):
        ids = [schedule(store, system_id=5 if i % 2 else 7) for i in range(5)]

        first = store.list(1, 2)
        second = store.list(2, 2)
        last = store.list(3, 2)

        assert [row.id for row in first.rows] == [ids[4], ids[3]]
        assert [row.id for row in second.rows] == [ids[2], ids[1]]
        assert [row.id for row in last.rows] == [ids[0]]
        assert first.total_count == second.total_count == last.total_count == 5

    def test_rows_carry_system_name(self, store):
        schedule(store, system_id=7)

        row = store.list().rows[0]
        assert row.system_name == "Warehouse"
        assert row.system_url is None

    def test_empty_table(self, store):
        page = store.list()
        assert page.rows == []
        assert page.total_count == 0


class TestGetById:

    def test_includes_system_name_and_url(self, store):
        window_id = schedule(store)

        window = store.get_by_id(window_id)
        assert window.id == window_id
        assert window.system_name == "Payroll"
        assert window.system_url == "https://payroll.local"

    def test_missing_window(self, store):
        with pytest.raises(NotFoundError, match="Downtime log not found"):
            store.get_by_id(12345)


class TestUpdate:

    def test_finish_window(self, store, fetch_window, clock):
        window_id = schedule(store)
        clock.now = clock.now + timedelta(hours=1)

        diff = store.update(window_id, DowntimeChanges(finished=True), "bob")

        assert diff == {"finished": (0, 1)}
        window = fetch_window(window_id)
        assert window.finished == 1
        assert window.archived == 0
        assert window.updated_by == "bob"
        assert window.updated_at == clock.now
        assert window.created_by == "alice"

    def test_both_flags(self, store, fetch_window):
        window_id = schedule(store)

        diff = store.update(window_id, DowntimeChanges(finished=True, archived=True), "bob")

        assert set(diff) == {"finished", "archived"}
        window = fetch_window(window_id)
        assert (window.finished, window.archived) == (1, 1)

    def test_invalid_value_leaves_row_unchanged(self, store, fetch_window):
        window_id = schedule(store)
        before = fetch_window(window_id)

        with pytest.raises(ValidationError) as exc_info:
            store.update(window_id, DowntimeChanges.from_payload({"finished": 2}), "bob")

        assert exc_info.value.message == NO_VALID_FIELDS
        after = fetch_window(window_id)
        assert after.finished == before.finished
        assert after.updated_by == before.updated_by
        assert after.updated_at == before.updated_at

    def test_missing_window(self, store):
        with pytest.raises(NotFoundError):
            store.update(999, DowntimeChanges(finished=True), "bob")

    def test_archive_while_scheduled_and_unfinish_are_allowed(self, store, fetch_window):
        window_id = schedule(store)

        store.update(window_id, DowntimeChanges(archived=True), "bob")
        assert (fetch_window(window_id).finished, fetch_window(window_id).archived) == (0, 1)

        store.update(window_id, DowntimeChanges(finished=True, archived=False), "bob")
        store.update(window_id, DowntimeChanges(finished=False), "bob")
        assert (fetch_window(window_id).finished, fetch_window(window_id).archived) == (0, 0)
