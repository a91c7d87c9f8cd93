from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from flask import Flask, jsonify, request

from ..core.exceptions import BusinessRuleViolation, ConflictError, DomainError, NotFoundError, ValidationError
from .dates import parse_iso_date

logger = logging.getLogger(__name__)

TENANT_HEADER = "X-Tenant-Id"


def to_jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return to_jsonable(value.to_dict())
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = to_jsonable(data)
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def tenant_id_from_request(required: bool = True) -> Optional[int]:
    raw = request.headers.get(TENANT_HEADER) or request.args.get("tenant_id")
    if not raw:
        if required:
            raise ValidationError(f"{TENANT_HEADER} header is required")
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("Tenant id must be an integer")


def date_arg(data: dict, key: str, *, required: bool = True) -> Optional[date]:
    raw = data.get(key)
    if raw in (None, ""):
        if required:
            raise ValidationError(f"{key} is required")
        return None
    try:
        return parse_iso_date(str(raw))
    except ValueError:
        raise ValidationError(f"{key} must be a date in YYYY-MM-DD format")


def int_arg(data: dict, key: str, *, required: bool = True, default: Optional[int] = None) -> Optional[int]:
    raw = data.get(key)
    if raw in (None, ""):
        if required:
            raise ValidationError(f"{key} is required")
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def register_error_handlers(app: Flask) -> None:
    """Map domain exceptions onto JSON error responses."""

    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return jsonify({"success": False, "message": str(e)}), 422

    @app.errorhandler(ConflictError)
    def _conflict(e: ConflictError):
        body = {"success": False, "message": str(e)}
        if e.existing is not None:
            body["existing_record"] = to_jsonable(e.existing)
        return jsonify(body), 422

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return jsonify({"success": False, "message": str(e)}), 404

    @app.errorhandler(BusinessRuleViolation)
    def _rule(e: BusinessRuleViolation):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        if hasattr(e, "code") and hasattr(e, "get_response"):
            return e
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "message": "Internal server error"}), 500
