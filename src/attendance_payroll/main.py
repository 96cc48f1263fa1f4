from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .payroll.controller import register as register_payroll

logger = logging.getLogger(__name__)


def create_app(*, settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        container = build_container(settings=settings)
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn)
            logger.info("[app] schema ready (tables=%s)", len(list_tables(container.conn)))

    cfg = getattr(settings, "DB_CONFIG", {})
    logger.info(
        "[app] settings=%s db=%s@%s:%s/%s",
        settings_module,
        cfg.get("user"),
        cfg.get("host"),
        cfg.get("port", 3306),
        cfg.get("database"),
    )

    app.extensions["attendance_payroll"] = container
    register_error_handlers(app)
    register_attendance(app, container)
    register_payroll(app, container)

    return app
