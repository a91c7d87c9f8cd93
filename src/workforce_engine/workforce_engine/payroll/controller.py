from __future__ import annotations

from flask import Flask, request

from ..common.http import int_arg, json_body, ok, tenant_id_from_request
from ..container import Container
from ..core.exceptions import ValidationError
from .model import PaymentInfo


def _payment(data: dict) -> PaymentInfo:
    return PaymentInfo(method=data.get("payment_method"), reference=data.get("payment_reference"))


def _id_list(data: dict, key: str, *, required: bool) -> list[int] | None:
    raw = data.get(key)
    if raw is None:
        if required:
            raise ValidationError(f"{key} is required")
        return None
    if not isinstance(raw, list):
        raise ValidationError(f"{key} must be a list")
    try:
        return [int(i) for i in raw]
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must contain integers")


def register(app: Flask, container: Container) -> None:
    payroll = container.payroll_service

    @app.route("/api/employees/<int:employee_id>/salary-slips", methods=["POST"], endpoint="payroll_generate")
    def payroll_generate(employee_id: int):
        data = json_body()
        slip = payroll.generate_salary_slip(
            employee_id=employee_id, month=int_arg(data, "month"), year=int_arg(data, "year")
        )
        return ok(slip.to_dict(), message="Salary slip generated")

    @app.route("/api/employees/<int:employee_id>/salary-slips/recompute", methods=["POST"], endpoint="payroll_recompute")
    def payroll_recompute(employee_id: int):
        data = json_body()
        slip = payroll.recompute_salary_slip(
            employee_id=employee_id, month=int_arg(data, "month"), year=int_arg(data, "year")
        )
        return ok(slip.to_dict(), message="Salary slip recomputed")

    @app.route("/api/employees/<int:employee_id>/salary-preview", methods=["GET"], endpoint="payroll_preview")
    def payroll_preview(employee_id: int):
        computation = payroll.preview_salary(
            employee_id=employee_id, month=int_arg(request.args, "month"), year=int_arg(request.args, "year")
        )
        return ok(computation.to_dict())

    @app.route("/api/employees/<int:employee_id>/salary-slips", methods=["GET"], endpoint="payroll_history")
    def payroll_history(employee_id: int):
        limit = int_arg(request.args, "limit", required=False, default=12)
        return ok([s.to_dict() for s in payroll.salary_history(employee_id=employee_id, limit=limit)])

    @app.route("/api/salary-slips/bulk-generate", methods=["POST"], endpoint="payroll_bulk_generate")
    def payroll_bulk_generate():
        data = json_body()
        outcome = payroll.bulk_generate_salary_slips(
            month=int_arg(data, "month"),
            year=int_arg(data, "year"),
            employee_ids=_id_list(data, "employee_ids", required=False),
            tenant_id=tenant_id_from_request(required=False),
        )
        return ok(outcome.to_dict(), message=f"{outcome.count} salary slips generated")

    @app.route("/api/salary-slips/<int:slip_id>", methods=["GET"], endpoint="payroll_get")
    def payroll_get(slip_id: int):
        return ok(payroll.get_salary_slip(slip_id).to_dict())

    @app.route("/api/salary-slips/<int:slip_id>/pay", methods=["POST"], endpoint="payroll_mark_paid")
    def payroll_mark_paid(slip_id: int):
        slip = payroll.mark_as_paid(slip_id, _payment(json_body()))
        return ok(slip.to_dict(), message="Salary slip marked as paid")

    @app.route("/api/salary-slips/bulk-pay", methods=["POST"], endpoint="payroll_bulk_mark_paid")
    def payroll_bulk_mark_paid():
        data = json_body()
        count = payroll.bulk_mark_as_paid(_id_list(data, "slip_ids", required=True), _payment(data))
        return ok({"count": count}, message=f"{count} salary slips marked as paid")

    @app.route("/api/payroll/summary", methods=["GET"], endpoint="payroll_summary")
    def payroll_summary():
        summary = payroll.monthly_summary(
            month=int_arg(request.args, "month"),
            year=int_arg(request.args, "year"),
            tenant_id=tenant_id_from_request(required=False),
        )
        return ok(summary.to_dict())
