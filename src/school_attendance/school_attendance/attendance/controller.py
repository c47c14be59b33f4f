from __future__ import annotations

import logging
from datetime import date
from functools import wraps

from flask import Flask, jsonify, request

from ..common.datetime_utils import date_key, parse_iso_date
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import (
    AlreadyMarked,
    DomainError,
    NetworkError,
    NoOpChange,
    NoRecordToday,
    StudentNotFound,
    SyncConflict,
    ValidationError,
)
from ..container import Container

logger = logging.getLogger(__name__)

_HTTP_STATUS = {
    StudentNotFound: 404,
    NoRecordToday: 404,
    AlreadyMarked: 409,
    NoOpChange: 409,
    SyncConflict: 409,
}


def error_response(e: Exception):
    if isinstance(e, (ValidationError, SyncConflict)):
        status = next((code for cls, code in _HTTP_STATUS.items() if isinstance(e, cls)), 400)
        return jsonify({"success": False, "error": e.code, "message": str(e)}), status
    if isinstance(e, NetworkError):
        return (
            jsonify(
                {
                    "success": False,
                    "error": e.code,
                    "message": "Currently offline; changes are kept on this device and will sync when online",
                }
            ),
            503,
        )
    code = e.code if isinstance(e, DomainError) else "internal_error"
    return jsonify({"success": False, "error": code, "message": "Internal error while processing attendance"}), 500


def register(app: Flask, container: Container) -> None:
    def json_api(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except (ValidationError, NetworkError) as e:
                return error_response(e)
            except SyncConflict as e:
                logger.info("Concurrent change rejected on %s: %s", request.path, e)
                return error_response(e)
            except Exception as e:
                logger.exception("Unhandled error in %s", request.path)
                return error_response(e)

        return wrapper

    def _teacher_id():
        return (request.headers.get("X-Teacher-Id") or "").strip() or None

    def _payload() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    def _parse_date(value: str, field_name: str) -> date:
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")

    def _period() -> tuple[date, date]:
        today = container.attendance_service.today()
        start_s = request.args.get("start") or date_key(today.replace(day=1))
        end_s = request.args.get("end") or date_key(today)
        return _parse_date(start_s, "start"), _parse_date(end_s, "end")

    def _mutation_response(result, status: int = 200):
        return (
            jsonify(
                {
                    "success": True,
                    "message": result.message,
                    "student_id": result.event.student_id,
                    "date": date_key(result.event.event_date),
                    "previous_status": result.previous_status.value,
                    "status": result.status.value,
                }
            ),
            status,
        )

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="api_attendance_scan")
    @json_api
    def api_attendance_scan():
        data = _payload()
        result = container.attendance_service.record_scan(
            data.get("student_id"),
            data.get("kind"),
            data.get("outcome"),
            teacher_id=_teacher_id(),
        )
        return _mutation_response(result, 201 if result.created else 200)

    @app.route("/api/attendance/edit", methods=["POST"], endpoint="api_attendance_edit")
    @json_api
    def api_attendance_edit():
        data = _payload()
        result = container.attendance_service.edit_today(
            data.get("student_id"),
            data.get("new_outcome"),
            teacher_id=_teacher_id(),
        )
        return _mutation_response(result)

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @json_api
    def api_attendance_today():
        rows = container.attendance_service.today_rows(teacher_id=_teacher_id())
        return jsonify(
            {
                "success": True,
                "date": date_key(container.attendance_service.today()),
                "rows": [r.as_dict() for r in rows],
            }
        )

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="api_attendance_stats")
    @json_api
    def api_attendance_stats():
        stats = container.attendance_service.today_stats(teacher_id=_teacher_id())
        return jsonify({"success": True, **stats.as_dict()})

    @app.route("/api/students/<student_id>/history", methods=["GET"], endpoint="api_student_history")
    @json_api
    def api_student_history(student_id: str):
        try:
            limit = int(request.args.get("limit", DEFAULT_HISTORY_LIMIT))
        except ValueError:
            raise ValidationError("limit must be an integer")
        rows = container.report_service.student_history(student_id, limit=limit, teacher_id=_teacher_id())
        return jsonify({"success": True, "student_id": student_id, "rows": rows})

    @app.route("/api/reports/summary", methods=["GET"], endpoint="api_reports_summary")
    @json_api
    def api_reports_summary():
        start, end = _period()
        summary = container.report_service.period_summary(start=start, end=end, teacher_id=_teacher_id())
        return jsonify({"success": True, "start": date_key(start), "end": date_key(end), **summary.as_dict()})

    @app.route("/api/reports/low-attendance", methods=["GET"], endpoint="api_reports_low_attendance")
    @json_api
    def api_reports_low_attendance():
        start, end = _period()
        threshold = int(app.config.get("LOW_ATTENDANCE_THRESHOLD", 75))
        rows = container.report_service.low_attendance(
            start=start,
            end=end,
            teacher_id=_teacher_id(),
            threshold=threshold,
        )
        return jsonify({"success": True, "threshold": threshold, "rows": rows})

    @app.route("/api/reports/meals", methods=["GET"], endpoint="api_reports_meals")
    @json_api
    def api_reports_meals():
        start, end = _period()
        counts = container.report_service.meal_counts(start=start, end=end, teacher_id=_teacher_id())
        return jsonify({"success": True, "counts": counts, "total": sum(counts.values())})

    @app.route("/api/sync", methods=["POST"], endpoint="api_sync")
    @json_api
    def api_sync():
        result = container.sync_coordinator.sync_now()
        return jsonify({"success": result.ok, **result.as_dict()})

    @app.route("/api/sync/status", methods=["GET"], endpoint="api_sync_status")
    @json_api
    def api_sync_status():
        return jsonify({"success": True, **container.sync_coordinator.status().as_dict()})
