from datetime import date

from src.attendance_ledger.attendance_ledger.core.enums import PolicyKind
from src.attendance_ledger.attendance_ledger.policy.model import PolicyDate
from src.attendance_ledger.attendance_ledger.reconciliation.model import DateReport, ReconciliationReport
from src.attendance_ledger.attendance_ledger.reconciliation.summary import format_report


def report(**kwargs):
    day = DateReport(
        policy_date=PolicyDate(day=date(2025, 1, 26), reason="Republic Day", kind=PolicyKind.NAMED_HOLIDAY),
        users_checked=3,
        issues_found=2,
        issues_fixed=2,
        created=2,
        already_present=1,
    )
    return ReconciliationReport(start=date(2025, 1, 1), end=date(2025, 1, 31), dates=[day], users_checked=3, **kwargs)


def test_summary_lists_totals_and_dates():
    text = format_report(report(submissions=[2]))

    assert "Total users checked: 3" in text
    assert "Total attendance issues found: 2" in text
    assert "Batches committed: 1 (2)" in text
    assert "2025-01-26  Republic Day" in text
    assert text.endswith("Holiday attendance records have been fixed.")


def test_dry_run_summary_says_nothing_was_written():
    text = format_report(report(dry_run=True, tenant_id="T1"))

    assert "dry run, nothing written" in text
    assert "tenant=T1" in text
    assert text.endswith("2 records would be fixed.")
