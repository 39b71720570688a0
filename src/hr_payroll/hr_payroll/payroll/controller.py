from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import acting_user_id, api_view, date_field, json_body, jsonable, require_field, roles_required
from ..common.validators import require_non_negative, require_positive_id
from ..core.exceptions import ValidationError
from ..container import Container
from .model import PayAdjustment


def _adjustments(raw) -> dict[int, PayAdjustment]:
    """{"<staff_id>": {"bonus": .., "arrears": .., "other_deductions": ..}}"""
    if not raw:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError("adjustments must be an object keyed by staff id")
    out = {}
    for key, values in raw.items():
        staff_id = require_positive_id(key, "Staff id")
        values = values or {}
        if not isinstance(values, dict):
            raise ValidationError(f"adjustments for staff {staff_id} must be an object")
        out[staff_id] = PayAdjustment(
            bonus=require_non_negative(values.get("bonus"), "bonus"),
            arrears=require_non_negative(values.get("arrears"), "arrears"),
            other_deductions=require_non_negative(values.get("other_deductions"), "other_deductions"),
        )
    return out


def _staff_ids(raw):
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ValidationError("staff_ids must be a list")
    return [require_positive_id(s, "Staff id") for s in raw]


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service
    exports = container.export_service

    @app.route("/api/payroll/periods", methods=["POST"], endpoint="create_period")
    @roles_required()
    @api_view
    def create_period():
        data = json_body()
        period = service.create_period(
            name=str(require_field(data, "name")),
            start_date=date_field(data, "start_date"),
            end_date=date_field(data, "end_date"),
            created_by=acting_user_id(),
        )
        return jsonify({"success": True, "period": jsonable(period)}), 201

    @app.route("/api/payroll/periods", methods=["GET"], endpoint="list_periods")
    @roles_required()
    @api_view
    def list_periods():
        periods = service.list_periods()
        return jsonify({"success": True, "periods": jsonable(list(periods))})

    @app.route("/api/payroll/periods/<int:period_id>", methods=["GET"], endpoint="period_detail")
    @roles_required()
    @api_view
    def period_detail(period_id: int):
        detail = service.get_period_detail(period_id)
        return jsonify({"success": True, "period": jsonable(detail.period), "records": jsonable(list(detail.records))})

    @app.route("/api/payroll/periods/<int:period_id>/process", methods=["POST"], endpoint="process_period")
    @roles_required()
    @api_view
    def process_period(period_id: int):
        data = json_body()
        result = service.process_period(
            period_id,
            acting_user_id=acting_user_id(),
            staff_ids=_staff_ids(data.get("staff_ids")),
            adjustments=_adjustments(data.get("adjustments")),
        )
        return jsonify(result.to_dict())

    @app.route("/api/payroll/periods/<int:period_id>/recalculate", methods=["POST"], endpoint="recalculate_period")
    @roles_required()
    @api_view
    def recalculate_period(period_id: int):
        data = json_body()
        result = service.recalculate(
            period_id,
            acting_user_id=acting_user_id(),
            staff_ids=_staff_ids(data.get("staff_ids")),
            adjustments=_adjustments(data.get("adjustments")),
        )
        return jsonify(result.to_dict())

    @app.route("/api/payroll/periods/<int:period_id>/approve", methods=["POST"], endpoint="approve_period")
    @roles_required()
    @api_view
    def approve_period(period_id: int):
        period = service.approve_period(period_id, acting_user_id=acting_user_id())
        return jsonify({"success": True, "period": jsonable(period)})

    @app.route("/api/payroll/periods/<int:period_id>/pay", methods=["POST"], endpoint="pay_period")
    @roles_required()
    @api_view
    def pay_period(period_id: int):
        data = json_body()
        period = service.mark_paid(
            period_id,
            acting_user_id=acting_user_id(),
            payment_mode=data.get("payment_mode") or "bank_transfer",
            payment_reference=data.get("payment_reference"),
        )
        return jsonify({"success": True, "period": jsonable(period)})

    @app.route("/api/payroll/periods/<int:period_id>/lock", methods=["POST"], endpoint="lock_period")
    @roles_required()
    @api_view
    def lock_period(period_id: int):
        period = service.lock_period(period_id, acting_user_id=acting_user_id())
        return jsonify({"success": True, "period": jsonable(period)})

    @app.route("/api/payroll/periods/<int:period_id>/bank-file", methods=["GET"], endpoint="bank_file")
    @roles_required()
    @api_view
    def bank_file(period_id: int):
        filename, payload = exports.bank_file(period_id)
        return app.response_class(
            payload,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/payroll/periods/<int:period_id>/register.xlsx", methods=["GET"], endpoint="payroll_register")
    @roles_required()
    @api_view
    def payroll_register(period_id: int):
        filename, payload = exports.register_xlsx(period_id)
        return app.response_class(
            payload,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/payroll/records/<int:record_id>/payslip", methods=["GET"], endpoint="payslip")
    @roles_required()
    @api_view
    def payslip(record_id: int):
        record, member, summary = exports.payslip(record_id)
        return jsonify(
            {
                "success": True,
                "staff": jsonable(member),
                "record": jsonable(record),
                "summary": jsonable(summary),
            }
        )

    @app.route("/api/payroll/records/<int:record_id>/approve", methods=["POST"], endpoint="approve_record")
    @roles_required()
    @api_view
    def approve_record(record_id: int):
        record = service.approve_record(record_id, acting_user_id=acting_user_id())
        return jsonify({"success": True, "record": jsonable(record)})

    @app.route("/api/payroll/records/<int:record_id>/pay", methods=["POST"], endpoint="pay_record")
    @roles_required()
    @api_view
    def pay_record(record_id: int):
        data = json_body()
        record = service.mark_record_paid(
            record_id,
            acting_user_id=acting_user_id(),
            payment_mode=data.get("payment_mode") or "bank_transfer",
            payment_reference=data.get("payment_reference"),
        )
        return jsonify({"success": True, "record": jsonable(record)})

    @app.route("/api/payroll/records/<int:record_id>", methods=["GET"], endpoint="record_detail")
    @roles_required()
    @api_view
    def record_detail(record_id: int):
        return jsonify({"success": True, "record": jsonable(service.get_record(record_id))})
