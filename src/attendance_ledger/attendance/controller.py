from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from ..common.datetime_utils import parse_iso_date
from .model import Holiday


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Expected a JSON object body")
        return data

    def _list(data: dict, key: str) -> list:
        value = data.get(key)
        if not isinstance(value, list):
            raise ValidationError(f"{key} must be a list", field=key)
        return value

    @app.route("/api/attendance/<user_id>/<month_year>", methods=["GET"], endpoint="attendance_month")
    def attendance_month(user_id: str, month_year: str):
        attendance = container.attendance_service.get_month(user_id, month_year)
        return jsonify({"success": True, "attendance": attendance.to_dict()})

    @app.route("/api/attendance/<user_id>/<month_year>/audit", methods=["GET"], endpoint="attendance_audit")
    def attendance_audit(user_id: str, month_year: str):
        container.attendance_service.audit_month(user_id, month_year)
        return jsonify({"success": True})

    @app.route("/api/attendance/update-status", methods=["POST"], endpoint="attendance_update_status")
    def attendance_update_status():
        data = _body()
        updated = container.attendance_service.bulk_update_status(_list(data, "updates"), data.get("new_status"))
        return jsonify({"success": True, "updated": updated})

    @app.route("/api/attendance/punches", methods=["POST"], endpoint="attendance_punches")
    def attendance_punches():
        data = _body()
        result = container.attendance_service.ingest_punches(_list(data, "rows"))
        return jsonify({"success": True, **result.to_dict()})

    @app.route("/api/attendance/holidays", methods=["POST"], endpoint="attendance_holidays")
    def attendance_holidays():
        data = _body()
        holidays = [Holiday(date=parse_iso_date(h.get("date")), name=h.get("name") or "Holiday") for h in _list(data, "holidays")]
        added = container.attendance_service.apply_holidays(
            str(data.get("user_id") or ""), data.get("month_year") or "", holidays
        )
        return jsonify({"success": True, "added": added})
