from __future__ import annotations

from flask import Flask, request

from ..common.http import date_arg, json_body, ok, tenant_id_from_request
from ..container import Container
from .model import WeekdayFlags


def register(app: Flask, container: Container) -> None:
    calendars = container.calendar_service

    @app.route("/api/calendar-configurations", methods=["GET"], endpoint="calendar_list")
    def calendar_list():
        configs = calendars.list_configurations(tenant_id=tenant_id_from_request())
        return ok([c.to_dict() for c in configs])

    @app.route("/api/calendar-configurations", methods=["POST"], endpoint="calendar_create")
    def calendar_create():
        data = json_body()
        created = calendars.create_configuration(
            tenant_id=tenant_id_from_request(),
            flags=WeekdayFlags.from_mapping(data),
            valid_from=date_arg(data, "valid_from", required=False),
            valid_to=date_arg(data, "valid_to", required=False),
        )
        return ok(created.to_dict(), message="Calendar configuration created", status=201)

    @app.route("/api/calendar-configurations/<int:config_id>", methods=["GET"], endpoint="calendar_get")
    def calendar_get(config_id: int):
        return ok(calendars.get_configuration(config_id, tenant_id=tenant_id_from_request()).to_dict())

    @app.route("/api/calendar-configurations/<int:config_id>", methods=["PUT"], endpoint="calendar_update")
    def calendar_update(config_id: int):
        data = json_body()
        tenant_id = tenant_id_from_request()
        current = calendars.get_configuration(config_id, tenant_id=tenant_id)
        kwargs = {}
        if "valid_from" in data:
            kwargs["valid_from"] = date_arg(data, "valid_from", required=False)
        if "valid_to" in data:
            kwargs["valid_to"] = date_arg(data, "valid_to", required=False)
        updated = calendars.update_configuration(
            config_id,
            tenant_id=tenant_id,
            flags=WeekdayFlags.from_mapping(data, base=current.flags),
            **kwargs,
        )
        return ok(updated.to_dict(), message="Calendar configuration updated")

    @app.route("/api/calendar-configurations/<int:config_id>", methods=["DELETE"], endpoint="calendar_delete")
    def calendar_delete(config_id: int):
        calendars.delete_configuration(config_id, tenant_id=tenant_id_from_request())
        return ok(message="Calendar configuration deleted")

    @app.route("/api/working-days", methods=["GET"], endpoint="calendar_working_days")
    def calendar_working_days():
        result = calendars.resolve_working_days(
            tenant_id=tenant_id_from_request(),
            start=date_arg(request.args, "start_date"),
            end=date_arg(request.args, "end_date"),
        )
        return ok(result.to_dict())
