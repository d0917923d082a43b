import pytest

from src.attendance_ledger.attendance_ledger.core.exceptions import DirectoryUnavailable
from src.attendance_ledger.attendance_ledger.directory.loader import DirectorySnapshotLoader
from src.attendance_ledger.attendance_ledger.directory.memory_directory_repository import InMemoryDirectoryRepository


class BrokenDirectory:
    def list_users(self):
        raise ConnectionError("directory offline")


def test_builds_tenant_index_and_tenant_set():
    repo = InMemoryDirectoryRepository(
        [
            {"username": "alice", "tenantId": "T1", "displayName": "Alice", "role": "admin"},
            {"username": "bob", "tenantId": "T1"},
            {"username": "carol", "tenantId": "T2", "displayName": "Carol"},
        ]
    )

    snapshot = DirectorySnapshotLoader(repo).load()

    assert [u.username for u in snapshot.users] == ["alice", "bob", "carol"]
    assert snapshot.tenant_index == {"alice": "T1", "bob": "T1", "carol": "T2"}
    assert snapshot.tenants == frozenset({"T1", "T2"})
    assert snapshot.users[1].display_name == "bob"
    assert snapshot.users[1].role == "user"
    assert [u.username for u in snapshot.users_in("T1")] == ["alice", "bob"]


def test_entries_without_username_or_tenant_are_skipped():
    repo = InMemoryDirectoryRepository(
        [
            {"username": "alice", "tenantId": "T1"},
            {"username": "", "tenantId": "T1"},
            {"username": "ghost"},
        ]
    )

    snapshot = DirectorySnapshotLoader(repo).load()

    assert [u.username for u in snapshot.users] == ["alice"]
    assert snapshot.skipped == 2


def test_username_under_two_tenants_keeps_first_and_reports_conflict():
    repo = InMemoryDirectoryRepository(
        [
            {"username": "dave", "tenantId": "T1"},
            {"username": "dave", "tenantId": "T2"},
        ]
    )

    snapshot = DirectorySnapshotLoader(repo).load()

    assert snapshot.tenant_of("dave") == "T1"
    assert snapshot.conflicts == (("dave", "T1", "T2"),)


def test_read_failure_aborts_with_directory_unavailable():
    with pytest.raises(DirectoryUnavailable):
        DirectorySnapshotLoader(BrokenDirectory()).load()


def test_each_load_reads_the_directory_again():
    repo = InMemoryDirectoryRepository([{"username": "alice", "tenantId": "T1"}])
    loader = DirectorySnapshotLoader(repo)

    first = loader.load()
    repo.add("bob", "T1")
    second = loader.load()

    assert len(first.users) == 1
    assert len(second.users) == 2
