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
from .core.constants import DEFAULT_EVENT_TIMEZONE
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin, list_tables
from .events.controller import register as register_events
from .sessions.controller import register as register_sessions
from .sessions.windows import WindowRules
from .users.controller import register as register_users

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(app: Flask, level: str) -> None:
    """Route the package loggers through app.logger's handlers at `level`."""

    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger = logging.getLogger("campus_attendance")
    package_logger.setLevel(numeric)
    if not package_logger.handlers:
        package_logger.addHandler(handler)

    app.logger.setLevel(numeric)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; pass `container` to run on other repositories (tests)."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["EVENT_TIMEZONE"] = getattr(settings, "EVENT_TIMEZONE", DEFAULT_EVENT_TIMEZONE)

    setup_logging(app, getattr(settings, "LOG_LEVEL", "INFO"))
    app.logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config)
            app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config)
            ensure_admin(
                db_config,
                email=getattr(settings, "ADMIN_EMAIL", None),
                password=getattr(settings, "ADMIN_PASSWORD", None),
            )
            app.logger.info("seed ready")

        rules = WindowRules(
            min_minutes=int(getattr(settings, "MIN_WINDOW_MINUTES", WindowRules.min_minutes)),
            max_minutes=int(getattr(settings, "MAX_WINDOW_MINUTES", WindowRules.max_minutes)),
            min_gap_minutes=int(getattr(settings, "MIN_WINDOW_GAP_MINUTES", WindowRules.min_gap_minutes)),
        )
        container = build_container(db_config=db_config, rules=rules, timezone=app.config["EVENT_TIMEZONE"])

    register_error_handlers(app)
    register_users(app, container)
    register_events(app, container)
    register_sessions(app, container)
    register_attendance(app, container)

    return app
