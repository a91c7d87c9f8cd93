from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from flask import Flask, request

from ..common.http import date_arg, int_arg, json_body, ok
from ..container import Container
from ..core.exceptions import ValidationError
from .model import ClockContext, GeoPoint


def _location(data: dict) -> Optional[GeoPoint]:
    if data.get("latitude") is None or data.get("longitude") is None:
        return None
    try:
        return GeoPoint(
            latitude=Decimal(str(data["latitude"])),
            longitude=Decimal(str(data["longitude"])),
            accuracy=Decimal(str(data["accuracy"])) if data.get("accuracy") is not None else None,
        )
    except InvalidOperation:
        raise ValidationError("latitude, longitude and accuracy must be numbers")


def _context(data: dict) -> ClockContext:
    return ClockContext(
        ip_address=request.remote_addr,
        location=_location(data),
        author_id=int_arg(data, "author_id", required=False),
    )


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.route("/api/employees/<int:employee_id>/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    def attendance_clock_in(employee_id: int):
        status = attendance.clock_in(employee_id=employee_id, context=_context(json_body()))
        return ok(status.to_dict(), message="Clocked in successfully")

    @app.route("/api/employees/<int:employee_id>/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    def attendance_clock_out(employee_id: int):
        status = attendance.clock_out(employee_id=employee_id, context=_context(json_body()))
        return ok(status.to_dict(), message="Clocked out successfully")

    @app.route("/api/employees/<int:employee_id>/attendance-status", methods=["GET"], endpoint="attendance_status")
    def attendance_status(employee_id: int):
        return ok(attendance.get_current_status(employee_id=employee_id).to_dict())

    @app.route("/api/employees/<int:employee_id>/work-logs", methods=["GET"], endpoint="attendance_list")
    def attendance_list(employee_id: int):
        logs = attendance.list_work_logs(
            employee_id=employee_id,
            start=date_arg(request.args, "start_date"),
            end=date_arg(request.args, "end_date"),
        )
        return ok([log.to_dict() for log in logs])

    @app.route("/api/work-logs", methods=["POST"], endpoint="attendance_record")
    def attendance_record():
        data = json_body()
        fields = {k: v for k, v in data.items() if k not in ("employee_id", "log_date")}
        log = attendance.record_attendance(
            employee_id=int_arg(data, "employee_id"),
            log_date=date_arg(data, "log_date"),
            fields=fields,
        )
        return ok(log.to_dict(), message="Attendance recorded")

    @app.route("/api/work-logs/bulk", methods=["POST"], endpoint="attendance_bulk_record")
    def attendance_bulk_record():
        records = json_body().get("records")
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise ValidationError("records must be a list of objects")
        outcome = attendance.bulk_record_attendance(records)
        return ok(outcome.to_dict(), message=f"{outcome.count} attendance records saved")

    @app.route("/api/work-logs/<int:log_id>", methods=["DELETE"], endpoint="attendance_delete")
    def attendance_delete(log_id: int):
        attendance.delete_work_log(log_id)
        return ok(message="Work log deleted")
