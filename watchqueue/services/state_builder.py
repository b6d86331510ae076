"""Explicit AppState builder."""

from watchqueue.state import AppState


def build_app_state(settings, runner, log_queue_action, log_queue_system, log_queue_exception):
    """Bind resolved settings and runtime callables into the routes' AppState."""
    return AppState({
        "AUTO_COLLECT_COOLDOWN_SECONDS": settings.auto_collect_cooldown_seconds,
        "STATE_DB_PATH": settings.state_db_path,
        "log_queue_action": log_queue_action,
        "log_queue_exception": log_queue_exception,
        "log_queue_system": log_queue_system,
        "runner": runner,
    })
