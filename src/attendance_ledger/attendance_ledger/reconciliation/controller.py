from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def _error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def register(app: Flask, container: Container) -> None:
    def admin_required(view):
        """Session keys are written by the external auth layer."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            if "username" not in session:
                return _error("Authentication required", 401)
            if session.get("role") != Role.ADMIN.value:
                return _error("Admin access required", 403)
            return view(*args, **kwargs)

        return wrapper

    @app.route("/api/attendance/fix-past-holidays", methods=["POST"])
    @admin_required
    def fix_past_holidays():
        username = session.get("username")
        tenant_id = session.get("tenant_id")
        payload = request.get_json(silent=True) or {}

        try:
            if not tenant_id:
                raise AuthorizationError("Tenant ID is required")
            start = payload.get("startDate")
            end = payload.get("endDate")
            try:
                start = parse_iso_date(start) if start else None
                end = parse_iso_date(end) if end else None
            except ValueError as exc:
                raise ValidationError(f"Dates must be YYYY-MM-DD: {exc}") from exc

            logger.info("Admin %s initiated past holiday attendance fix for %s", username, tenant_id)
            report = container.reconciliation_service.run(
                start=start,
                end=end,
                tenant_id=tenant_id,
                dry_run=bool(payload.get("dryRun", False)),
            )
        except ValidationError as e:
            return _error(str(e), 400)
        except AuthorizationError as e:
            return _error(str(e), 403)
        except DomainError as e:
            logger.error("Fix past holidays failed: %s", e)
            return _error(str(e) or "Failed to fix past holiday attendance", 500)

        logger.info(
            "Past holiday fix completed by %s: %d dates checked, %d issues found, %d fixed",
            username,
            report.dates_checked,
            report.issues_found,
            report.issues_fixed,
        )
        return jsonify(
            {
                "success": True,
                "message": (
                    f"Holiday attendance fix completed: {report.issues_fixed} records fixed "
                    f"across {report.dates_checked} dates"
                ),
                "data": report.to_dict(),
            }
        )
