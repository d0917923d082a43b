from collections import Counter
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from src.attendance_ledger.attendance_ledger.common.datetime_utils import to_local_date
from src.attendance_ledger.attendance_ledger.core.exceptions import (
    BatchCommitFailed,
    DirectoryUnavailable,
    LedgerQueryFailed,
    ValidationError,
)
from src.attendance_ledger.attendance_ledger.directory.loader import DirectorySnapshotLoader
from src.attendance_ledger.attendance_ledger.directory.memory_directory_repository import InMemoryDirectoryRepository
from src.attendance_ledger.attendance_ledger.ledger.memory_ledger_repository import InMemoryLedgerStore
from src.attendance_ledger.attendance_ledger.policy.model import Holiday
from src.attendance_ledger.attendance_ledger.reconciliation.service import ReconciliationService

IST = ZoneInfo("Asia/Kolkata")
HOLIDAYS = [Holiday(date(2025, 1, 26), "Republic Day")]


class FailingCommitStore(InMemoryLedgerStore):
    def __init__(self, *args, fail_on_call, **kwargs):
        super().__init__(*args, **kwargs)
        self._fail_on_call = fail_on_call
        self.commit_calls = 0

    def commit(self, ops):
        self.commit_calls += 1
        if self.commit_calls == self._fail_on_call:
            raise RuntimeError("ABORTED: too much contention")
        return super().commit(ops)


class BrokenDirectory:
    def list_users(self):
        raise ConnectionError("directory offline")


class BrokenQueryStore(InMemoryLedgerStore):
    def query_range(self, start, end, *, tenant_id=None):
        raise TimeoutError("deadline exceeded")


def directory(*pairs):
    return InMemoryDirectoryRepository([{"username": u, "tenantId": t} for u, t in pairs])


def service(store, repo, **kwargs):
    kwargs.setdefault("holidays", HOLIDAYS)
    return ReconciliationService(store, DirectorySnapshotLoader(repo), tz=IST, **kwargs)


def keys(store):
    return Counter((e.username, e.tenant_id, to_local_date(e.stored_date, IST)) for e in store.iter_all())


def test_run_fixes_window_and_counts_only_committed_work():
    store = InMemoryLedgerStore(
        [
            {"username": "carol", "tenantId": "T2", "date": datetime(2025, 2, 2, tzinfo=IST), "status": "absent"},
            {"username": "alice", "tenantId": "T1", "date": datetime(2025, 2, 2, tzinfo=IST), "status": "leave"},
        ],
        tz=IST,
    )
    repo = directory(("alice", "T1"), ("bob", "T1"), ("carol", "T2"))

    report = service(store, repo).run(start=date(2025, 1, 26), end=date(2025, 2, 2))

    # Republic Day: 3 creates. Sunday 2 Feb: bob create, carol correction, alice on leave.
    assert report.dates_checked == 2
    assert report.users_checked == 3
    assert report.issues_found == 5
    assert report.issues_fixed == 5
    assert [d.issues_fixed for d in report.dates] == [3, 2]
    assert report.submissions == [5]
    assert len(store) == 6


def test_second_run_is_a_no_op():
    store = InMemoryLedgerStore(tz=IST)
    repo = directory(("alice", "T1"), ("bob", "T1"))
    svc = service(store, repo)

    svc.run(start=date(2025, 1, 20), end=date(2025, 2, 10))
    submissions_after_first = list(store.submissions)
    second = svc.run(start=date(2025, 1, 20), end=date(2025, 2, 10))

    assert second.issues_found == 0
    assert second.issues_fixed == 0
    assert store.submissions == submissions_after_first


def test_every_touched_key_has_exactly_one_record():
    store = InMemoryLedgerStore(
        [{"username": "alice", "tenantId": "T2", "date": datetime(2025, 2, 2, tzinfo=IST), "status": "present"}],
        tz=IST,
    )
    repo = directory(("alice", "T1"), ("bob", "T1"), ("carol", "T2"))
    svc = service(store, repo)

    svc.run(start=date(2025, 1, 26), end=date(2025, 2, 9))
    svc.run(start=date(2025, 1, 26), end=date(2025, 2, 9))

    assert set(keys(store).values()) == {1}
    # (alice, T2) belongs to no directory user but still was not duplicated or moved.
    assert keys(store)[("alice", "T2", date(2025, 2, 2))] == 1


def test_leave_status_is_never_changed():
    store = InMemoryLedgerStore(
        [{"id": "lv", "username": "bob", "tenantId": "T1", "date": datetime(2025, 1, 26, tzinfo=IST), "status": "leave"}],
        tz=IST,
    )

    service(store, directory(("bob", "T1"))).run(start=date(2025, 1, 26), end=date(2025, 1, 26))

    assert store.get("lv").status == "leave"
    assert store.submissions == []


def test_large_runs_are_split_into_bounded_groups():
    store = InMemoryLedgerStore(tz=IST)
    repo = directory(*[(f"user{i:03d}", "T1") for i in range(230)])

    # Two rest dates x 230 users = 460 creates.
    report = service(store, repo, batch_capacity=450).run(start=date(2025, 1, 26), end=date(2025, 2, 2))

    assert report.submissions == [450, 10]
    assert report.issues_fixed == 460
    assert len(store) == 460


def test_commit_failure_aborts_and_keeps_earlier_groups():
    store = FailingCommitStore(tz=IST, fail_on_call=2)
    repo = directory(("alice", "T1"), ("bob", "T1"), ("carol", "T1"))

    with pytest.raises(BatchCommitFailed) as info:
        service(store, repo, batch_capacity=2).run(start=date(2025, 1, 26), end=date(2025, 1, 26))

    assert info.value.committed == 2
    assert store.commit_calls == 2
    assert len(store) == 2


def test_tenant_scoped_run_leaves_other_tenants_alone():
    store = InMemoryLedgerStore(tz=IST)
    repo = directory(("alice", "T1"), ("carol", "T2"))

    report = service(store, repo).run(start=date(2025, 1, 26), end=date(2025, 1, 26), tenant_id="T1")

    assert report.users_checked == 1
    assert {e.tenant_id for e in store.iter_all()} == {"T1"}
    assert report.to_dict()["summary"]["tenantId"] == "T1"


def test_dry_run_plans_without_writing():
    store = InMemoryLedgerStore(tz=IST)

    report = service(store, directory(("alice", "T1"))).run(start=date(2025, 1, 26), end=date(2025, 1, 26), dry_run=True)

    assert report.issues_found == 1
    assert report.issues_fixed == 0
    assert len(store) == 0


def test_default_window_looks_back_six_months():
    svc = service(InMemoryLedgerStore(tz=IST), directory(), today=lambda: date(2025, 3, 15))

    assert svc.default_window() == (date(2024, 9, 15), date(2025, 3, 15))

    report = svc.run()
    assert report.start == date(2024, 9, 15)
    assert report.end == date(2025, 3, 15)


def test_report_dict_matches_admin_api_shape():
    store = InMemoryLedgerStore(tz=IST)

    report = service(store, directory(("alice", "T1"))).run(start=date(2025, 1, 26), end=date(2025, 2, 2))
    data = report.to_dict()

    assert data["datesChecked"] == 2
    assert data["issuesFound"] == 2
    assert data["issuesFixed"] == 2
    assert data["holidayDates"][0] == {
        "date": "2025-01-26",
        "name": "Republic Day",
        "type": "holiday",
        "issuesFound": 1,
        "issuesFixed": 1,
    }
    assert data["summary"]["dateRange"] == {"from": "2025-01-26", "to": "2025-02-02"}
    assert data["summary"]["weeklyRestDays"] == 1


def test_half_given_window_is_rejected():
    with pytest.raises(ValidationError):
        service(InMemoryLedgerStore(tz=IST), directory()).run(start=date(2025, 1, 1))


def test_directory_failure_aborts_before_any_query():
    store = InMemoryLedgerStore(tz=IST)

    with pytest.raises(DirectoryUnavailable):
        service(store, BrokenDirectory()).run(start=date(2025, 1, 26), end=date(2025, 1, 26))
    assert store.queries == 0


def test_ledger_query_failure_aborts_the_run():
    with pytest.raises(LedgerQueryFailed):
        service(BrokenQueryStore(tz=IST), directory(("alice", "T1"))).run(start=date(2025, 1, 26), end=date(2025, 1, 26))


@pytest.mark.parametrize("capacity", [0, 500])
def test_bad_batch_capacity_fails_before_any_run(capacity):
    store = InMemoryLedgerStore(tz=IST)

    with pytest.raises(ValidationError):
        service(store, directory(("alice", "T1")), batch_capacity=capacity)
    assert store.queries == 0
