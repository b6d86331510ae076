"""Watch-later queue service: the single process that owns the queue state.

Popup, per-tab content scripts and the subscription fetch pipeline send
intent requests here; only this process reads and writes the stored blob.
"""

from pathlib import Path

from flask import Flask, request, has_request_context
from werkzeug.exceptions import HTTPException

from watchqueue.core.logging_setup import build_loggers
from watchqueue.core.response_helpers import internal_error_response, rejected_response
from watchqueue.core.state_db import initialize_state_db, migrate_legacy_state_file
from watchqueue.core.web_config import QueueConfig, load_settings, resolve_config_path
from watchqueue.routes.queue_routes import register_routes
from watchqueue.services.state_builder import build_app_state
from watchqueue.services.state_runner import StateRunner

APP_DIR = Path(__file__).resolve().parent.parent


def create_app(config_path=None, base_dir=None):
    """Build the Flask app, its storage and its loggers from one config file."""
    base_dir = Path(base_dir) if base_dir else APP_DIR
    cfg = QueueConfig(resolve_config_path(base_dir, config_path), base_dir)
    settings = load_settings(cfg)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.json.sort_keys = False

    log_queue_action, log_queue_system, log_queue_exception = build_loggers(settings.display_tz, settings.log_dir)
    if not initialize_state_db(db_path=settings.state_db_path, log_exception=log_queue_exception):
        log_queue_system("boot-warning", rejection_message=f"state db init failed: {settings.state_db_path}")
    if migrate_legacy_state_file(
        db_path=settings.state_db_path,
        legacy_path=settings.legacy_state_file,
        log_exception=log_queue_exception,
    ):
        log_queue_system("legacy-migrated", command=str(settings.legacy_state_file))

    runner = StateRunner(
        settings.state_db_path,
        max_retries=settings.state_write_retries,
        log_action=log_queue_system,
    )
    state = build_app_state(settings, runner, log_queue_action, log_queue_system, log_queue_exception)
    app.config["WATCHQUEUE_SETTINGS"] = settings
    app.config["WATCHQUEUE_STATE"] = state

    @app.errorhandler(Exception)
    def _unhandled_exception_handler(exc):
        if isinstance(exc, HTTPException):
            code = (exc.name or "http_error").lower().replace(" ", "_")
            return rejected_response(code, exc.description or exc.name, exc.code or 500)
        # Log uncaught request exceptions to the queue system log.
        path = request.path if has_request_context() else "unknown-path"
        log_queue_exception(f"unhandled_exception path={path}", exc)
        return internal_error_response()

    register_routes(app, state)
    return app
