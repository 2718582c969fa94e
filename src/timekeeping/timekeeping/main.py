from __future__ import annotations

import importlib
from typing import Optional

import structlog
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .core.logging import setup_logging
from .database.bootstrap import apply_schema, list_tables
from .regularization.controller import register as register_regularization

log = structlog.get_logger(__name__)


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    setup_logging(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")),
        fmt=str(getattr(settings, "LOG_FORMAT", "console")),
    )

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    storage = str(getattr(settings, "STORAGE", "mysql")).lower()
    log.info("app.configure", settings=settings_module, storage=storage)

    if container is None:
        if storage == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            db_config = getattr(settings, "DB_CONFIG")
            apply_schema(db_config)
            log.info(
                "app.schema_ready",
                db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
                tables=len(list_tables(db_config)),
            )
        container = build_container(settings=settings)

    register_error_handlers(app)
    register_attendance(app, container)
    register_regularization(app, container)

    return app
