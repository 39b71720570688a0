from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import api_view, date_field, json_body, jsonable, require_field, roles_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.staff_service

    @app.route("/api/staff", methods=["POST"], endpoint="hire_staff")
    @roles_required()
    @api_view
    def hire_staff():
        data = json_body()
        member = service.hire(
            full_name=str(require_field(data, "full_name")),
            join_date=date_field(data, "join_date"),
            department=data.get("department"),
            position=data.get("position"),
            employment_type=data.get("employment_type") or "full_time",
            bank_account=data.get("bank_account"),
            ifsc_code=data.get("ifsc_code"),
            pan=data.get("pan"),
        )
        return jsonify({"success": True, "staff": jsonable(member)}), 201

    @app.route("/api/staff", methods=["GET"], endpoint="list_staff")
    @roles_required()
    @api_view
    def list_staff():
        active_only = request.args.get("active") in {"1", "true", "yes"}
        members = service.list_staff(active_only=active_only)
        return jsonify({"success": True, "staff": jsonable(list(members))})

    @app.route("/api/staff/<int:staff_id>", methods=["GET"], endpoint="get_staff")
    @roles_required()
    @api_view
    def get_staff(staff_id: int):
        return jsonify({"success": True, "staff": jsonable(service.get(staff_id))})

    @app.route("/api/staff/<int:staff_id>/deactivate", methods=["POST"], endpoint="deactivate_staff")
    @roles_required()
    @api_view
    def deactivate_staff(staff_id: int):
        data = json_body()
        member = service.deactivate(staff_id, leave_date=date_field(data, "leave_date", required=False))
        return jsonify({"success": True, "staff": jsonable(member)})
