from __future__ import annotations

from typing import Mapping, Optional

from .model import AuditReport

RULE = "=" * 80


def format_audit(report: AuditReport, *, tenant_names: Optional[Mapping[str, str]] = None) -> str:
    names = tenant_names or {}

    def label(tenant_id: Optional[str]) -> str:
        if tenant_id is None:
            return "<none>"
        return names.get(tenant_id, tenant_id)

    lines = [RULE, "TENANT CONSISTENCY AUDIT", RULE, f"Records scanned: {report.records_scanned}", ""]

    if not report.mismatched_records:
        lines.append("No mismatched records found.")
    else:
        lines.append(f"Found {len(report.mismatched_records)} records with wrong tenantId:")
        for m in report.mismatched_records:
            lines.extend(
                [
                    f"  {m.username}",
                    f"     Record ID: {m.record_id}",
                    f"     Date: {m.date.isoformat() if m.date else '<unreadable>'}",
                    f"     Current TenantId: {label(m.stored_tenant_id)}",
                    f"     Should be: {label(m.canonical_tenant_id)}",
                ]
            )
        lines.append("These records need a reviewed fix; nothing was changed.")

    lines.append("")
    if report.orphaned_usernames:
        lines.append(f"Found {len(report.orphaned_usernames)} users with attendance but no user account:")
        lines.extend(f"  - {name}" for name in report.orphaned_usernames)
    else:
        lines.append("No orphaned attendance records.")

    if report.records_without_username:
        lines.append(f"Records without a username: {report.records_without_username}")
    lines.append(RULE)
    return "\n".join(lines)
