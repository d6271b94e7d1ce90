from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import ok, register_error_handlers
from .common.identity import DEFAULT_IDENTITY_HEADER
from .container import Container, build_container
from .core.constants import DEFAULT_TRANSACTION_ATTEMPTS, DEFAULT_TRANSACTION_RETRY_DELAY_MS
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .projection.controller import register as register_projection
from .subjects.controller import register as register_subjects
from .timetable.controller import register as register_timetable

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app. Pass ``container`` to run against other repositories."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["IDENTITY_HEADER"] = getattr(settings, "IDENTITY_HEADER", DEFAULT_IDENTITY_HEADER)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            max_attempts=int(getattr(settings, "TRANSACTION_MAX_ATTEMPTS", DEFAULT_TRANSACTION_ATTEMPTS)),
            retry_delay_ms=int(getattr(settings, "TRANSACTION_RETRY_DELAY_MS", DEFAULT_TRANSACTION_RETRY_DELAY_MS)),
        )

    register_error_handlers(app)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return ok({"status": "ok"})

    register_subjects(app, container)
    register_attendance(app, container)
    register_timetable(app, container)
    register_projection(app, container)

    return app
