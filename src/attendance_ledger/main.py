from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging_utils import setup_json_logging
from .container import Container, build_container
from .core.exceptions import AlreadyProcessedError, DomainError, InvariantViolation, NotFoundError, ValidationError
from .database.bootstrap import apply_schema, list_tables
from .leave.controller import register as register_leave
from .requests.controller import register as register_requests

logger = logging.getLogger(__name__)


def _status_for(exc: DomainError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, AlreadyProcessedError):
        return 409
    if isinstance(exc, InvariantViolation):
        return 500
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = _status_for(exc)
        if status >= 500:
            logger.error("invariant violated", extra={"error": str(exc)})
        return jsonify({"success": False, "error": str(exc), "field": getattr(exc, "field", None)}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"success": False, "error": exc.description, "field": None}), exc.code


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_json_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    store_backend = getattr(settings, "STORE_BACKEND", "memory")
    db_config = getattr(settings, "DB_CONFIG", None)
    logger.info("starting", extra={"settings": settings_module, "store_backend": store_backend})

    if container is None:
        if store_backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready", extra={"tables": len(list_tables(db_config))})

        container = build_container(
            store_backend=store_backend,
            db_config=db_config,
            default_in_time=getattr(settings, "DEFAULT_IN_TIME", "09:00"),
            default_out_time=getattr(settings, "DEFAULT_OUT_TIME", "18:00"),
            monthly_leave_accrual=float(getattr(settings, "MONTHLY_LEAVE_ACCRUAL", 2)),
            bulk_max_workers=int(getattr(settings, "BULK_MAX_WORKERS", 1)),
        )
    app.extensions["attendance_ledger"] = container

    register_error_handlers(app)
    register_requests(app, container)
    register_leave(app, container)
    register_attendance(app, container)

    return app
