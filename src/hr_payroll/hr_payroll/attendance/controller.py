from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.http import api_view, date_field, json_body, jsonable, require_field, roles_required
from ..common.validators import require_positive_id
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..container import Container

_ANY_ROLE = (Role.ADMIN.value, Role.HR.value, Role.STAFF.value)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _target_staff_id(data: dict) -> int:
        """Staff users clock themselves; HR and admin may clock anyone."""
        if session.get("role") == Role.STAFF.value:
            own = session.get("staff_id")
            if own is None:
                raise AuthorizationError("Account is not linked to a staff member")
            requested = data.get("staff_id")
            if requested is not None and int(requested) != int(own):
                raise AuthorizationError("Cannot record attendance for another staff member")
            return int(own)
        return require_positive_id(require_field(data, "staff_id"), "Staff id")

    @app.route("/api/attendance/login", methods=["POST"], endpoint="attendance_login")
    @roles_required(*_ANY_ROLE)
    @api_view
    def attendance_login():
        data = json_body()
        record = service.record_login(
            _target_staff_id(data),
            remote=bool(data.get("remote", False)),
            note=data.get("note"),
        )
        return jsonify({"success": True, "attendance": jsonable(record)}), 201

    @app.route("/api/attendance/logout", methods=["POST"], endpoint="attendance_logout")
    @roles_required(*_ANY_ROLE)
    @api_view
    def attendance_logout():
        data = json_body()
        record = service.record_logout(_target_staff_id(data), note=data.get("note"))
        return jsonify({"success": True, "attendance": jsonable(record)})

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_manual")
    @roles_required()
    @api_view
    def attendance_manual():
        data = json_body()
        record = service.record_manual(
            staff_id=require_positive_id(require_field(data, "staff_id"), "Staff id"),
            work_date=date_field(data, "work_date"),
            status=str(require_field(data, "status")),
            total_hours=data.get("total_hours", 0),
            overtime_hours=data.get("overtime_hours", 0),
            note=data.get("note"),
        )
        return jsonify({"success": True, "attendance": jsonable(record)}), 201

    @app.route("/api/attendance/summary/<int:staff_id>", methods=["GET"], endpoint="attendance_summary")
    @roles_required()
    @api_view
    def attendance_summary(staff_id: int):
        args = request.args.to_dict()
        summary = service.summary(staff_id, start=date_field(args, "start"), end=date_field(args, "end"))
        body = jsonable(summary)
        body["paid_days"] = jsonable(summary.paid_days)
        return jsonify({"success": True, "summary": body})
