from __future__ import annotations

from .model import ReconciliationReport

RULE = "=" * 80


def format_report(report: ReconciliationReport) -> str:
    lines = [
        "",
        RULE,
        "FINAL SUMMARY" + (" (dry run, nothing written)" if report.dry_run else ""),
        RULE,
        f"Window: {report.start.isoformat()} .. {report.end.isoformat()}"
        + (f"  tenant={report.tenant_id}" if report.tenant_id else ""),
        f"Total users checked: {report.users_checked}",
        f"Total holiday/rest dates checked: {report.dates_checked}",
        f"Total attendance issues found: {report.issues_found}",
        f"Total issues fixed: {report.issues_fixed}",
    ]
    if report.errors:
        lines.append(f"Records skipped after evaluation errors: {report.errors}")
    if report.duplicates:
        lines.append(f"Duplicate (username, tenant, date) keys in ledger: {report.duplicates}")
    if report.rejected_records:
        lines.append(f"Unreadable ledger records ignored: {report.rejected_records}")
    if report.submissions:
        lines.append(f"Batches committed: {len(report.submissions)} ({', '.join(map(str, report.submissions))})")

    lines.append("-" * 80)
    for d in report.dates:
        lines.append(
            f"{d.policy_date.iso}  {d.policy_date.reason:<20} "
            f"found={d.issues_found:<4} fixed={d.issues_fixed:<4} "
            f"created={d.created:<4} corrected={d.corrected:<4} "
            f"present={d.already_present:<4} left={d.left_as_is:<4} errors={d.errors}"
        )
    lines.append(RULE)

    if report.issues_found == 0:
        lines.append("No issues found! All holiday attendance records are correct.")
    elif report.dry_run:
        lines.append(f"{report.issues_found} records would be fixed.")
    else:
        lines.append("Holiday attendance records have been fixed.")
    return "\n".join(lines)
