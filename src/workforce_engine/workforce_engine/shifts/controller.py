from __future__ import annotations

from flask import Flask, request

from ..common.dates import parse_clock_time
from ..common.http import date_arg, int_arg, json_body, ok, tenant_id_from_request
from ..container import Container
from ..core.exceptions import ValidationError


def _shift_fields(data: dict, *, partial: bool) -> dict:
    fields = {}
    for key in ("shift_name", "overtime_after_hours", "is_night_shift", "break_minutes"):
        if key in data:
            fields[key] = data[key]
    for key in ("start_time", "end_time"):
        if key in data:
            try:
                fields[key] = parse_clock_time(data[key])
            except ValueError:
                raise ValidationError(f"{key} must be HH:MM or HH:MM:SS")
        elif not partial:
            raise ValidationError(f"{key} is required")
    if not partial and "shift_name" not in fields:
        raise ValidationError("shift_name is required")
    return fields


def register(app: Flask, container: Container) -> None:
    shifts = container.shift_service

    @app.route("/api/shifts", methods=["GET"], endpoint="shift_list")
    def shift_list():
        return ok([s.to_dict() for s in shifts.list_shifts()])

    @app.route("/api/shifts", methods=["POST"], endpoint="shift_create")
    def shift_create():
        shift = shifts.create_shift(**_shift_fields(json_body(), partial=False))
        return ok(shift.to_dict(), message="Shift created", status=201)

    @app.route("/api/shifts/<int:shift_id>", methods=["GET"], endpoint="shift_get")
    def shift_get(shift_id: int):
        return ok(shifts.get_shift(shift_id).to_dict())

    @app.route("/api/shifts/<int:shift_id>", methods=["PUT"], endpoint="shift_update")
    def shift_update(shift_id: int):
        shift = shifts.update_shift(shift_id, **_shift_fields(json_body(), partial=True))
        return ok(shift.to_dict(), message="Shift updated")

    @app.route("/api/shifts/<int:shift_id>", methods=["DELETE"], endpoint="shift_delete")
    def shift_delete(shift_id: int):
        shifts.delete_shift(shift_id)
        return ok(message="Shift deleted")

    @app.route("/api/shifts/<int:shift_id>/assign", methods=["POST"], endpoint="shift_assign")
    def shift_assign(shift_id: int):
        data = json_body()
        employee_ids = data.get("employee_ids")
        if employee_ids is None:
            employee_ids = [int_arg(data, "employee_id")]
        if not isinstance(employee_ids, list):
            raise ValidationError("employee_ids must be a list")
        try:
            employee_ids = [int(i) for i in employee_ids]
        except (TypeError, ValueError):
            raise ValidationError("employee_ids must contain integers")

        assignments = shifts.assign(
            shift_id=shift_id,
            employee_ids=employee_ids,
            effective_from=date_arg(data, "effective_from"),
            effective_to=date_arg(data, "effective_to", required=False),
        )
        return ok([a.to_dict() for a in assignments], message="Shift assigned successfully")

    @app.route("/api/employees/<int:employee_id>/shift", methods=["GET"], endpoint="shift_for_employee")
    def shift_for_employee(employee_id: int):
        on_date = date_arg(request.args, "date", required=False) or container.tenant_clock.today(None)
        shift = shifts.resolve_shift(employee_id=employee_id, on_date=on_date)
        return ok({"date": on_date, "shift": shift.to_dict() if shift else None})

    @app.route("/api/employees/<int:employee_id>/schedule", methods=["GET"], endpoint="shift_schedule")
    def shift_schedule(employee_id: int):
        entries = shifts.schedule_for(
            employee_id=employee_id,
            start=date_arg(request.args, "start_date"),
            end=date_arg(request.args, "end_date"),
        )
        return ok([a.to_dict() for a in entries])

    @app.route("/api/shift-assignments/<int:assignment_id>", methods=["DELETE"], endpoint="shift_assignment_delete")
    def shift_assignment_delete(assignment_id: int):
        shifts.delete_assignment(assignment_id)
        return ok(message="Assignment deleted successfully")

    @app.route("/api/shift-roster", methods=["GET"], endpoint="shift_roster")
    def shift_roster():
        tenant_id = tenant_id_from_request(required=False)
        on_date = date_arg(request.args, "date", required=False) or container.tenant_clock.today(tenant_id)
        entries = shifts.roster(on_date=on_date, tenant_id=tenant_id)
        return ok({"date": on_date, "assignments": [a.to_dict() for a in entries]})
