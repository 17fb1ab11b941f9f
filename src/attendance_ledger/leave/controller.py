from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Expected a JSON object body")
        return data

    @app.route("/api/leave/balances/<user_id>", methods=["GET"], endpoint="leave_balance")
    def leave_balance(user_id: str):
        balance = container.leave_ledger.get_balance(user_id)
        return jsonify({"success": True, "balance": balance.to_dict()})

    @app.route("/api/leave/increment-monthly", methods=["POST"], endpoint="increment_monthly")
    def increment_monthly():
        data = _body()
        month_year = data.get("month_year") or ""
        user_id = data.get("user_id")
        if user_id:
            accrued = 1 if container.leave_ledger.accrue_monthly(str(user_id), month_year) else 0
        else:
            accrued = container.leave_ledger.accrue_monthly_for_all(month_year)
        return jsonify({"success": True, "month_year": month_year, "accrued": accrued})

    @app.route("/api/leave/preview", methods=["POST"], endpoint="leave_preview")
    def leave_preview():
        data = _body()
        usages = container.leave_ledger.calculate_leave_usage_for_range(
            str(data.get("user_id") or ""),
            data.get("start_date"),
            data.get("end_date"),
            data.get("requested_status") or "",
        )
        return jsonify(
            {
                "success": True,
                "days": [
                    {"date": u.date.isoformat(), "is_paid_leave": u.is_paid_leave, "value": u.value} for u in usages
                ],
                "paid_dates": container.leave_ledger.paid_dates(usages),
            }
        )

    @app.route("/api/leave/summary/<user_id>/<month_year>", methods=["GET"], endpoint="leave_summary")
    def leave_summary(user_id: str, month_year: str):
        summary = container.request_service.monthly_leave_summary(user_id, month_year)
        return jsonify(
            {
                "success": True,
                "earned": summary.earned,
                "used": summary.used,
                "remaining": summary.remaining,
                "leave_requests": summary.leave_requests,
            }
        )
