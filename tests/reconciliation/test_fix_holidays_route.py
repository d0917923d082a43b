from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.attendance_ledger.attendance_ledger.container import build_container
from src.attendance_ledger.attendance_ledger.directory.memory_directory_repository import InMemoryDirectoryRepository
from src.attendance_ledger.attendance_ledger.ledger.memory_ledger_repository import InMemoryLedgerStore
from src.attendance_ledger.attendance_ledger.main import create_app

IST = ZoneInfo("Asia/Kolkata")
URL = "/api/attendance/fix-past-holidays"


@pytest.fixture
def store():
    return InMemoryLedgerStore(
        [{"username": "carol", "tenantId": "T2", "date": datetime(2025, 1, 26, tzinfo=IST), "status": "absent"}],
        tz=IST,
    )


@pytest.fixture
def client(monkeypatch, store):
    monkeypatch.setenv("APP_ENV", "testing")
    directory = InMemoryDirectoryRepository()
    directory.add("alice", "T1", role="admin")
    directory.add("bob", "T1")
    directory.add("carol", "T2")
    container = build_container(ledger_store=store, directory_repo=directory, timezone="Asia/Kolkata")

    app = create_app(container)
    app.config["TESTING"] = True
    return app.test_client()


def login(client, *, username="alice", role="admin", tenant_id="T1"):
    with client.session_transaction() as sess:
        sess["username"] = username
        sess["role"] = role
        if tenant_id is not None:
            sess["tenant_id"] = tenant_id


def test_only_post_is_allowed(client):
    assert client.get(URL).status_code == 405


def test_requires_a_session(client):
    resp = client.post(URL, json={})
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_requires_admin_role(client):
    login(client, username="bob", role="user")
    assert client.post(URL, json={}).status_code == 403


def test_requires_a_tenant(client):
    login(client, tenant_id=None)
    assert client.post(URL, json={}).status_code == 403


def test_admin_fixes_own_tenant_only(client, store):
    login(client)

    resp = client.post(URL, json={"startDate": "2025-01-26", "endDate": "2025-01-26"})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["issuesFound"] == 2
    assert body["data"]["issuesFixed"] == 2
    assert body["data"]["summary"]["tenantId"] == "T1"
    assert body["data"]["holidayDates"][0]["name"] == "Republic Day"
    # carol's absent record belongs to T2 and stays untouched.
    carol = [e for e in store.iter_all() if e.username == "carol"]
    assert [e.status for e in carol] == ["absent"]


def test_dry_run_reports_without_writing(client, store):
    login(client)

    resp = client.post(URL, json={"startDate": "2025-01-26", "endDate": "2025-01-26", "dryRun": True})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["summary"]["dryRun"] is True
    assert len(store) == 1


@pytest.mark.parametrize(
    "payload",
    [
        {"startDate": "26/01/2025", "endDate": "2025-01-26"},
        {"startDate": "2025-02-01", "endDate": "2025-01-01"},
        {"startDate": "2025-01-01"},
    ],
)
def test_bad_windows_are_rejected(client, payload):
    login(client)
    resp = client.post(URL, json=payload)
    assert resp.status_code == 400
