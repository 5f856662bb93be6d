from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .completion.controller import register as register_completion
from .container import Container, build_container
from .core.policy import OvertimePolicy
from .database.bootstrap import apply_schema
from .edit_requests.controller import register as register_edit_requests
from .logging_config import configure_logging
from .time_logs.controller import register as register_time_logs

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = getattr(settings, "DB_CONFIG")

    logger.info(
        "Starting with settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
        container = build_container(db_config=db_config, policy=OvertimePolicy.from_settings(settings))

    app.extensions["internship_tracker"] = container

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "error": e.description, "error_kind": "http"}), e.code
        logger.exception("Unhandled error")
        return jsonify({"success": False, "error": "Internal server error", "error_kind": "internal"}), 500

    register_time_logs(app, container)
    register_edit_requests(app, container)
    register_completion(app, container)

    return app
