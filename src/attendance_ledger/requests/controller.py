from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.enums import BulkAction
from ..core.exceptions import ValidationError
from .bulk import ItemDecision, PerItemMode, UniformMode


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Expected a JSON object body")
        return data

    @app.route("/api/employee/request-correction", methods=["POST"], endpoint="request_correction")
    def request_correction():
        data = _body()
        req = container.request_service.submit_correction(
            user_id=str(data.get("user_id") or ""),
            date=data.get("date"),
            requested_status=data.get("requested_status"),
            reason=data.get("reason"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            partner_name=data.get("partner_name"),
        )
        return jsonify({"success": True, "request": req.to_dict()}), 201

    @app.route("/api/employee/request-future-leave", methods=["POST"], endpoint="request_future_leave")
    def request_future_leave():
        data = _body()
        created = container.request_service.submit_future_leave(
            user_id=str(data.get("user_id") or ""),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            request_type=data.get("request_type"),
            reason=data.get("reason"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
        )
        return jsonify({"success": True, "count": len(created), "requests": [r.to_dict() for r in created]}), 201

    @app.route("/api/employee/requests", methods=["GET"], endpoint="list_requests")
    def list_requests():
        rows = container.request_service.list_requests(
            user_id=request.args.get("user_id") or None,
            status=request.args.get("status") or None,
            partner_name=request.args.get("partner_name") or None,
        )
        return jsonify({"success": True, "requests": [r.to_dict() for r in rows]})

    @app.route("/api/employee/approve", methods=["POST"], endpoint="decide_request")
    def decide_request():
        data = _body()
        action = (data.get("action") or BulkAction.APPROVE.value).lower()
        role = data.get("role") or "Partner"
        request_id = str(data.get("request_id") or "")
        if action == BulkAction.APPROVE.value:
            outcome = container.request_service.approve(request_id, role, data.get("remarks"), data.get("value"))
            return jsonify(
                {
                    "success": True,
                    "request": outcome.request.to_dict(),
                    "record": outcome.record.to_dict(),
                    "summary": outcome.attendance.summary.to_dict(),
                    "leave_debited": outcome.leave_debited,
                }
            )
        if action == BulkAction.REJECT.value:
            rejected = container.request_service.reject(request_id, role, data.get("remarks"))
            return jsonify({"success": True, "request": rejected.to_dict()})
        raise ValidationError(f"Unknown action {action!r}", field="action")

    @app.route("/api/partner/bulk-action", methods=["POST"], endpoint="bulk_action")
    def bulk_action():
        data = _body()
        ids = data.get("request_ids") or []
        if not isinstance(ids, list) or not ids:
            raise ValidationError("request_ids must be a non-empty list", field="request_ids")

        if (data.get("mode") or "uniform") == "per_item":
            items = data.get("items") or {}
            if not isinstance(items, dict) or not all(isinstance(v, dict) for v in items.values()):
                raise ValidationError("items must map request ids to {value, remark} objects", field="items")
            mode = PerItemMode(
                items={str(k): ItemDecision(value=v.get("value"), remark=v.get("remark")) for k, v in items.items()}
            )
        else:
            mode = UniformMode(value=data.get("value"), remark=data.get("remark"))

        result = container.bulk_coordinator.bulk_apply(
            data.get("action"), ids, mode, approver_role=data.get("role") or "Partner"
        )
        return jsonify({"success": True, **result.to_dict()})

    @app.route("/api/partner/pending-requests", methods=["GET"], endpoint="pending_requests")
    def pending_requests():
        partner_name = request.args.get("partner_name") or None
        digest = container.request_service.pending_digest(partner_name)
        return jsonify(
            {
                "success": True,
                "groups": [
                    {
                        "user_name": row.user_name,
                        "requested_status": row.requested_status,
                        "dates": row.dates,
                        "time_range": row.time_range,
                        "reason": row.reason,
                        "request_ids": list(row.request_ids),
                    }
                    for row in digest
                ],
            }
        )
