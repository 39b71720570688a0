from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import acting_user_id, api_view, date_field, json_body, jsonable, require_field, roles_required
from ..common.validators import require_positive_id
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.salary_service

    @app.route("/api/payroll/salary-structures", methods=["POST"], endpoint="create_salary_structure")
    @roles_required()
    @api_view
    def create_salary_structure():
        data = json_body()
        structure = service.create_structure(
            staff_id=require_field(data, "staff_id"),
            basic_salary=require_field(data, "basic_salary"),
            effective_from=date_field(data, "effective_from"),
            effective_to=date_field(data, "effective_to", required=False),
            allowances=data.get("allowances") or {},
            tax_regime=data.get("tax_regime") or "new",
            voluntary_pf=data.get("voluntary_pf", 0),
            group_health_insurance=data.get("group_health_insurance", 0),
            term_insurance=data.get("term_insurance", 0),
            created_by=acting_user_id(),
            supersede=bool(data.get("supersede", True)),
        )
        return jsonify({"success": True, "structure": jsonable(structure)}), 201

    @app.route("/api/payroll/salary-structures", methods=["GET"], endpoint="list_salary_structures")
    @roles_required()
    @api_view
    def list_salary_structures():
        structures = service.list_structures(request.args.get("staff_id"))
        return jsonify({"success": True, "structures": jsonable(list(structures))})

    @app.route("/api/payroll/advances", methods=["POST"], endpoint="request_advance")
    @roles_required()
    @api_view
    def request_advance():
        data = json_body()
        advance = service.request_advance(
            staff_id=require_field(data, "staff_id"),
            amount=require_field(data, "amount"),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "advance": jsonable(advance)}), 201

    @app.route("/api/payroll/advances", methods=["GET"], endpoint="list_advances")
    @roles_required()
    @api_view
    def list_advances():
        advances = service.list_advances(status=request.args.get("status"), staff_id=request.args.get("staff_id"))
        return jsonify({"success": True, "advances": jsonable(list(advances))})

    @app.route("/api/payroll/advances/<int:advance_id>/approve", methods=["POST"], endpoint="approve_advance")
    @roles_required()
    @api_view
    def approve_advance(advance_id: int):
        data = json_body()
        advance = service.approve_advance(
            advance_id=advance_id,
            approved_by=acting_user_id(),
            approved_amount=require_field(data, "approved_amount"),
            repayment_months=require_positive_id(require_field(data, "repayment_months"), "Repayment months"),
        )
        return jsonify({"success": True, "advance": jsonable(advance)})

    @app.route("/api/payroll/advances/<int:advance_id>/reject", methods=["POST"], endpoint="reject_advance")
    @roles_required()
    @api_view
    def reject_advance(advance_id: int):
        advance = service.reject_advance(advance_id=advance_id, rejected_by=acting_user_id())
        return jsonify({"success": True, "advance": jsonable(advance)})
