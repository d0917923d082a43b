from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from src.attendance_ledger.attendance_ledger.core.exceptions import LedgerQueryFailed, RecordFieldError
from src.attendance_ledger.attendance_ledger.ledger.index import LedgerIndexBuilder
from src.attendance_ledger.attendance_ledger.ledger.memory_ledger_repository import InMemoryLedgerStore

IST = ZoneInfo("Asia/Kolkata")


def day(y, m, d):
    return datetime(y, m, d, tzinfo=IST)


class FailingQueryStore(InMemoryLedgerStore):
    def query_range(self, start, end, *, tenant_id=None):
        raise TimeoutError("deadline exceeded")


def test_lookup_uses_full_composite_key():
    store = InMemoryLedgerStore(
        [
            {"id": "a1", "username": "alice", "tenantId": "T2", "date": day(2025, 2, 2), "status": "present"},
        ],
        tz=IST,
    )

    index = LedgerIndexBuilder(store, tz=IST).build(date(2025, 2, 2), date(2025, 2, 2))

    assert index.lookup("alice", "T1", date(2025, 2, 2)) is None
    assert index.lookup("alice", "T2", date(2025, 2, 2)).record_id == "a1"


def test_one_range_query_per_build_and_window_is_inclusive_of_end_day():
    store = InMemoryLedgerStore(
        [
            {"id": "in-first", "username": "bob", "tenantId": "T1", "date": day(2025, 1, 1), "status": "present"},
            {"id": "in-last", "username": "bob", "tenantId": "T1", "date": datetime(2025, 1, 31, 23, 59, tzinfo=IST)},
            {"id": "after", "username": "bob", "tenantId": "T1", "date": day(2025, 2, 1)},
            {"id": "before", "username": "bob", "tenantId": "T1", "date": datetime(2024, 12, 31, 23, 59, tzinfo=IST)},
        ],
        tz=IST,
    )

    index = LedgerIndexBuilder(store, tz=IST).build(date(2025, 1, 1), date(2025, 1, 31))

    assert store.queries == 1
    assert sorted(e.record_id for e in index) == ["in-first", "in-last"]
    assert index.days_for("bob", "T1") == {date(2025, 1, 1), date(2025, 1, 31)}


def test_utc_timestamps_are_indexed_under_local_day():
    store = InMemoryLedgerStore(
        [{"id": "u1", "username": "carol", "tenantId": "T2", "date": datetime(2025, 1, 25, 18, 30, tzinfo=timezone.utc)}],
        tz=IST,
    )

    index = LedgerIndexBuilder(store, tz=IST).build(date(2025, 1, 26), date(2025, 1, 26))

    assert index.lookup("carol", "T2", date(2025, 1, 26)).record_id == "u1"


def test_tenant_filter_limits_the_query():
    store = InMemoryLedgerStore(
        [
            {"id": "t1", "username": "alice", "tenantId": "T1", "date": day(2025, 2, 2)},
            {"id": "t2", "username": "carol", "tenantId": "T2", "date": day(2025, 2, 2)},
        ],
        tz=IST,
    )

    index = LedgerIndexBuilder(store, tz=IST).build(date(2025, 2, 2), date(2025, 2, 2), tenant_id="T1")

    assert [e.record_id for e in index] == ["t1"]


def test_duplicates_are_reported_and_first_one_wins():
    store = InMemoryLedgerStore(
        [
            {"id": "first", "username": "alice", "tenantId": "T1", "date": day(2025, 2, 2), "status": "absent"},
            {"id": "second", "username": "alice", "tenantId": "T1", "date": day(2025, 2, 2), "status": "present"},
        ],
        tz=IST,
    )

    index = LedgerIndexBuilder(store, tz=IST).build(date(2025, 2, 2), date(2025, 2, 2))

    assert index.lookup("alice", "T1", date(2025, 2, 2)).record_id == "first"
    [(key, dup_day, entries)] = index.duplicates()
    assert key == ("alice", "T1")
    assert dup_day == date(2025, 2, 2)
    assert [e.record_id for e in entries] == ["first", "second"]


def test_records_without_identity_are_rejected_not_indexed():
    store = InMemoryLedgerStore(
        [
            {"id": "ok", "username": "alice", "tenantId": "T1", "date": day(2025, 2, 2)},
            {"id": "anon", "tenantId": "T1", "date": day(2025, 2, 2)},
        ],
        tz=IST,
    )

    index = LedgerIndexBuilder(store, tz=IST).build(date(2025, 2, 2), date(2025, 2, 2))

    assert len(index) == 1
    assert [rid for rid, _ in index.rejected] == ["anon"]


def test_lookup_outside_window_is_a_record_error():
    store = InMemoryLedgerStore(tz=IST)
    index = LedgerIndexBuilder(store, tz=IST).build(date(2025, 2, 2), date(2025, 2, 2))

    with pytest.raises(RecordFieldError):
        index.lookup("alice", "T1", date(2025, 2, 9))


def test_query_failure_raises_ledger_query_failed():
    with pytest.raises(LedgerQueryFailed):
        LedgerIndexBuilder(FailingQueryStore(tz=IST), tz=IST).build(date(2025, 2, 2), date(2025, 2, 2))
