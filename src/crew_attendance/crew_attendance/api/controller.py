from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any

from flask import Flask, jsonify, request, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    DuplicateAttendanceError,
    InviteCodeExhaustedError,
    StoreError,
    ValidationError,
)
from ..container import Container
from ..crews.service import CrewAccessService

logger = logging.getLogger(__name__)

# Most specific first.
_ERRORS: list[tuple[type[Exception], int, str]] = [
    (DuplicateAttendanceError, 409, "duplicate_attendance"),
    (InviteCodeExhaustedError, 409, "invite_code_exhausted"),
    (ConflictError, 409, "conflict"),
    (ValidationError, 400, "invalid_data"),
    (AuthenticationError, 401, "unauthorized"),
    (AuthorizationError, 403, "forbidden"),
]


def to_json(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return to_json(asdict(value))
    if isinstance(value, dict):
        return {(k.isoformat() if isinstance(k, date) else k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def error_response(exc: Exception):
    for exc_type, status, code in _ERRORS:
        if isinstance(exc, exc_type):
            return jsonify({"success": False, "error": code, "message": str(exc)}), status

    logger.error("unmapped domain error: %r", exc)
    return jsonify({"success": False, "error": "internal_error", "message": "Server error"}), 500


def register(app: Flask, container: Container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return error_response(AuthenticationError("Authentication required"))
            return view(*args, **kwargs)

        return wrapper

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return error_response(e)

    @app.errorhandler(StoreError)
    def handle_store_error(e: StoreError):
        logger.exception("store failure on %s %s", request.method, request.path)
        return jsonify({"success": False, "error": "database_error", "message": "Store failure"}), 500

    @app.errorhandler(500)
    def handle_unexpected(e):
        original = getattr(e, "original_exception", None) or e
        logger.error("unhandled error on %s %s", request.method, request.path, exc_info=original)
        return jsonify({"success": False, "error": "internal_error", "message": "Server error"}), 500

    access = CrewAccessService(container.crews_repo)

    def current_user_id() -> str:
        return str(session["user_id"])

    def require_crew_admin(crew_id: str) -> None:
        crew = access.require_crew(crew_id)
        access.require_admin(crew_id=crew.crew_id, user_id=current_user_id())

    def json_body() -> dict:
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return body

    @app.route("/api/ranking", methods=["GET"], endpoint="api_ranking")
    @login_required
    def ranking():
        args = request.args
        crew = access.require_crew(args.get("crewId", ""))
        access.require_member(crew_id=crew.crew_id, user_id=current_user_id())
        metric = args.get("metric")
        if metric:
            entries = container.ranking_service.compute_ranking(
                crew_id=args.get("crewId", ""),
                year=args.get("year"),
                month=args.get("month"),
                metric=metric,
                requesting_user_id=current_user_id(),
            )
            return jsonify({"success": True, "data": to_json(entries)})

        board = container.ranking_service.compute_rankings(
            crew_id=args.get("crewId", ""),
            year=args.get("year"),
            month=args.get("month"),
            requesting_user_id=current_user_id(),
        )
        return jsonify({"success": True, "data": to_json(board)})

    @app.route("/api/admin/attendance", methods=["GET"], endpoint="api_admin_attendance_month")
    @login_required
    def attendance_month():
        args = request.args
        require_crew_admin(args.get("crewId", ""))
        summary = container.calendar_service.aggregate_month(
            crew_id=args.get("crewId", ""),
            year=args.get("year"),
            month=args.get("month"),
        )
        return jsonify({"success": True, "data": to_json(summary)})

    @app.route("/api/admin/stats", methods=["GET"], endpoint="api_admin_stats")
    @login_required
    def admin_stats():
        args = request.args
        require_crew_admin(args.get("crewId", ""))
        stats = container.stats_service.compute_admin_stats(
            crew_id=args.get("crewId", ""),
            year=args.get("year"),
            month=args.get("month"),
            mode=args.get("mode"),
        )
        data = to_json(stats)
        data["attendance_rate"] = stats.attendance_rate
        data["ghost_rate"] = stats.ghost_rate
        return jsonify({"success": True, "data": data})

    @app.route("/api/admin/attendance/bulk", methods=["POST"], endpoint="api_admin_attendance_bulk")
    @login_required
    def attendance_bulk():
        body = json_body()
        result = container.attendance_service.record_bulk_attendance(
            crew_id=body.get("crewId", ""),
            user_ids=body.get("userIds"),
            occurred_at=body.get("attendanceTimestamp"),
            location_id=body.get("locationId"),
            acting_admin_id=current_user_id(),
        )
        return jsonify(
            {
                "success": True,
                "message": f"Recorded attendance for {result.created_count} members",
                "data": to_json(result),
            }
        )

    @app.route("/api/admin/attendance/<int:event_id>", methods=["DELETE"], endpoint="api_admin_attendance_delete")
    @login_required
    def attendance_delete(event_id: int):
        container.attendance_service.delete_event(event_id=event_id, acting_admin_id=current_user_id())
        return jsonify({"success": True})

    @app.route(
        "/api/admin/attendance/<int:event_id>/restore",
        methods=["POST"],
        endpoint="api_admin_attendance_restore",
    )
    @login_required
    def attendance_restore(event_id: int):
        container.attendance_service.restore_event(event_id=event_id, acting_admin_id=current_user_id())
        return jsonify({"success": True})

    @app.route("/api/admin/invite-codes", methods=["GET"], endpoint="api_admin_invite_codes")
    @login_required
    def invite_codes():
        codes = container.invite_code_service.list_invite_codes(
            crew_id=request.args.get("crewId", ""),
            acting_user_id=current_user_id(),
        )
        return jsonify({"success": True, "data": to_json(list(codes))})

    @app.route("/api/admin/invite-codes", methods=["POST"], endpoint="api_admin_invite_codes_issue")
    @login_required
    def invite_codes_issue():
        body = json_body()
        code = container.invite_code_service.issue_invite_code(
            crew_id=body.get("crewId", ""),
            issuer_id=current_user_id(),
            description=body.get("description"),
        )
        return jsonify({"success": True, "data": to_json(code)}), 201

    @app.route(
        "/api/admin/invite-codes/<int:code_id>/deactivate",
        methods=["POST"],
        endpoint="api_admin_invite_codes_deactivate",
    )
    @login_required
    def invite_codes_deactivate(code_id: int):
        code = container.invite_code_service.deactivate_invite_code(code_id=code_id, acting_user_id=current_user_id())
        return jsonify({"success": True, "data": to_json(code)})
