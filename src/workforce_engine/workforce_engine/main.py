from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.clock import parse_tenant_timezones
from .common.http import register_error_handlers
from .common.logs import configure_logging
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .calendars.controller import register as register_calendars
from .payroll.controller import register as register_payroll
from .shifts.controller import register as register_shifts
from .summaries.controller import register as register_summaries

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.debug(
            "settings=%s db=%s@%s:%s/%s",
            settings_module, db_config.get("user"), db_config.get("host"),
            db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("Demo seed ready")

        container = build_container(
            db_config=db_config,
            default_timezone=getattr(settings, "DEFAULT_TIMEZONE", "UTC"),
            tenant_timezones=parse_tenant_timezones(getattr(settings, "TENANT_TIMEZONES", "")),
        )

    register_error_handlers(app)
    register_calendars(app, container)
    register_shifts(app, container)
    register_attendance(app, container)
    register_summaries(app, container)
    register_payroll(app, container)

    return app
