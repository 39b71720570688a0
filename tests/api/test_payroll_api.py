from __future__ import annotations

from datetime import date

import pytest

from src.hr_payroll.hr_payroll.main import create_app


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def _login(client, *, role="hr", user_id=1, staff_id=None):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
        if staff_id is not None:
            sess["staff_id"] = staff_id


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_payroll_routes_require_login(client):
    res = client.get("/api/payroll/periods")

    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_staff_role_cannot_run_payroll(client):
    _login(client, role="staff", staff_id=1)

    res = client.post("/api/payroll/periods", json={"name": "April", "start_date": "2025-04-01", "end_date": "2025-04-30"})

    assert res.status_code == 403


def test_full_period_over_http(client, container, seed):
    _login(client)

    res = client.post(
        "/api/staff",
        json={"full_name": "Asha Rao", "join_date": "2024-01-01", "bank_account": "0011223344", "ifsc_code": "HDFC0001"},
    )
    assert res.status_code == 201
    staff_id = res.get_json()["staff"]["staff_id"]

    res = client.post(
        "/api/payroll/salary-structures",
        json={"staff_id": staff_id, "basic_salary": "20000", "effective_from": "2024-01-01", "allowances": {"hra": 8000}},
    )
    assert res.status_code == 201
    assert res.get_json()["structure"]["basic_salary"] == "20000.00"

    assert client.post("/api/payroll/statutory-rates", json={"effective_from": "2024-04-01"}).status_code == 201
    res = client.post(
        "/api/payroll/tax-slabs",
        json={"assessment_year": "2026-27", "regime": "new", "slab_from": 0, "rate": 0},
    )
    assert res.status_code == 201

    seed.attend(staff_id, date(2025, 4, 1), date(2025, 4, 30))

    res = client.post("/api/payroll/periods", json={"name": "April 2025", "start_date": "2025-04-01", "end_date": "2025-04-30"})
    assert res.status_code == 201
    period_id = res.get_json()["period"]["period_id"]

    res = client.post(f"/api/payroll/periods/{period_id}/process", json={})
    assert res.get_json() == {"success": 1, "errors": []}

    body = client.get(f"/api/payroll/periods/{period_id}").get_json()
    assert body["period"]["status"] == "processing"
    record = body["records"][0]
    assert record["gross_earnings"] == "28000.00"
    assert record["pf_employee"] == "1800.00"
    assert record["professional_tax"] == "200.00"
    assert record["net_pay"] == "26000.00"
    assert body["period"]["totals"]["total_net_pay"] == "26000.00"

    res = client.get(f"/api/payroll/records/{record['record_id']}/payslip")
    assert res.get_json()["summary"]["take_home_percentage"] == "92.86"

    assert client.post(f"/api/payroll/periods/{period_id}/approve").get_json()["period"]["status"] == "approved"

    res = client.get(f"/api/payroll/periods/{period_id}/bank-file")
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    assert "26000.00" in res.data.decode("utf-8-sig")

    res = client.post(f"/api/payroll/periods/{period_id}/pay", json={"payment_reference": "BATCH-APR"})
    assert res.get_json()["period"]["status"] == "paid"
    assert client.post(f"/api/payroll/periods/{period_id}/lock").get_json()["period"]["status"] == "locked"

    res = client.get(f"/api/payroll/periods/{period_id}/register.xlsx")
    assert res.status_code == 200
    assert res.data[:2] == b"PK"


def test_processing_errors_are_reported_per_employee(client, container, seed):
    _login(client)
    seed.rate_tables("2026-27")
    member = seed.staff("No Structure")
    seed.attend(member.staff_id, date(2025, 4, 1), date(2025, 4, 30))
    period = container.payroll_service.create_period(name="April 2025", start_date=date(2025, 4, 1), end_date=date(2025, 4, 30))

    body = client.post(f"/api/payroll/periods/{period.period_id}/process", json={}).get_json()

    assert body["success"] == 0
    assert body["errors"][0]["employeeId"] == member.staff_id
    assert "salary structure" in body["errors"][0]["message"]

    res = client.post(f"/api/payroll/periods/{period.period_id}/process", json={})
    assert res.status_code == 409


def test_missing_rate_tables_map_to_422(client, container):
    _login(client)
    period = container.payroll_service.create_period(name="April 2025", start_date=date(2025, 4, 1), end_date=date(2025, 4, 30))

    res = client.post(f"/api/payroll/periods/{period.period_id}/process", json={})

    assert res.status_code == 422
    assert container.payroll_service.get_period(period.period_id).status.value == "draft"


def test_bad_input_maps_to_400_and_unknown_ids_to_404(client):
    _login(client)

    res = client.post("/api/payroll/periods", json={"name": "April", "start_date": "01/04/2025", "end_date": "2025-04-30"})
    assert res.status_code == 400

    res = client.post("/api/payroll/periods/1/process", json={"adjustments": {"1": {"bonus": "-10"}}})
    assert res.status_code == 400
    res = client.post("/api/payroll/periods/1/process", json={"adjustments": {"1": 5}})
    assert res.status_code == 400
    assert res.get_json()["success"] is False

    assert client.get("/api/payroll/periods/99").status_code == 404
    assert client.get("/api/payroll/records/99").status_code == 404


def test_staff_user_clocks_only_themselves(client, seed):
    me = seed.staff("Asha Rao")
    other = seed.staff("Vikram Shah")
    _login(client, role="staff", user_id=10, staff_id=me.staff_id)

    res = client.post("/api/attendance/login", json={})
    assert res.status_code == 201
    assert res.get_json()["attendance"]["staff_id"] == me.staff_id

    res = client.post("/api/attendance/login", json={"staff_id": other.staff_id})
    assert res.status_code == 403

    assert client.get(f"/api/attendance/summary/{me.staff_id}?start=2025-04-01&end=2025-04-30").status_code == 403


def test_attendance_summary_over_http(client, seed):
    member = seed.staff("Asha Rao")
    seed.attend(member.staff_id, date(2025, 4, 1), date(2025, 4, 30), skip={date(2025, 4, 30)})
    _login(client)

    res = client.get(f"/api/attendance/summary/{member.staff_id}?start=2025-04-01&end=2025-04-30")

    summary = res.get_json()["summary"]
    assert summary["working_days"] == 22
    assert summary["absent_days"] == "1.00"
    assert summary["paid_days"] == "21.00"
