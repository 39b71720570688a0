from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import assessment_year_for, now_local
from ..common.http import api_view, date_field, json_body, jsonable, require_field, roles_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.statutory_service

    @app.route("/api/payroll/statutory-rates", methods=["POST"], endpoint="create_statutory_rates")
    @roles_required()
    @api_view
    def create_statutory_rates():
        data = json_body()
        rate = service.create_rates(effective_from=date_field(data, "effective_from"), values=data)
        return jsonify({"success": True, "rates": jsonable(rate)}), 201

    @app.route("/api/payroll/statutory-rates", methods=["GET"], endpoint="list_statutory_rates")
    @roles_required()
    @api_view
    def list_statutory_rates():
        return jsonify({"success": True, "rates": jsonable(list(service.list_rates()))})

    @app.route("/api/payroll/tax-slabs", methods=["POST"], endpoint="create_tax_slab")
    @roles_required()
    @api_view
    def create_tax_slab():
        data = json_body()
        slab = service.create_slab(
            assessment_year=str(require_field(data, "assessment_year")),
            regime=str(require_field(data, "regime")),
            slab_from=require_field(data, "slab_from"),
            slab_to=data.get("slab_to"),
            rate=require_field(data, "rate"),
            surcharge=data.get("surcharge", 0),
            cess=data.get("cess", 0),
        )
        return jsonify({"success": True, "slab": jsonable(slab)}), 201

    @app.route("/api/payroll/tax-slabs", methods=["GET"], endpoint="list_tax_slabs")
    @roles_required()
    @api_view
    def list_tax_slabs():
        year = request.args.get("assessment_year") or assessment_year_for(now_local().date())
        slabs = service.list_slabs(assessment_year=year, regime=request.args.get("regime"))
        return jsonify({"success": True, "assessment_year": year, "slabs": jsonable(list(slabs))})
