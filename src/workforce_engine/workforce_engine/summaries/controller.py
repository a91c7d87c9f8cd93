from __future__ import annotations

from flask import Flask, request

from ..common.http import date_arg, int_arg, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    summaries = container.monthly_aggregator

    @app.route("/api/employees/<int:employee_id>/attendance/monthly", methods=["GET"], endpoint="summary_monthly")
    def summary_monthly(employee_id: int):
        summary = summaries.aggregate(
            employee_id=employee_id,
            month=int_arg(request.args, "month"),
            year=int_arg(request.args, "year"),
        )
        return ok(summary.to_dict())

    @app.route("/api/employees/<int:employee_id>/attendance/summary", methods=["GET"], endpoint="summary_range")
    def summary_range(employee_id: int):
        summary = summaries.range_summary(
            employee_id=employee_id,
            start=date_arg(request.args, "start_date"),
            end=date_arg(request.args, "end_date"),
        )
        return ok(summary.to_dict(include_records=False))
