"""Logging setup helpers."""

from watchqueue.core.action_logging import make_log_action, make_log_exception

ACTION_LOG_NAME = "queue-actions.log"
SYSTEM_LOG_NAME = "watchqueue.log"


def build_loggers(display_tz, log_dir):
    """Create the queue action/system log writers and the exception logger."""
    log_queue_action = make_log_action(display_tz, log_dir, log_dir / ACTION_LOG_NAME)
    log_queue_system = make_log_action(display_tz, log_dir, log_dir / SYSTEM_LOG_NAME)
    log_queue_exception = make_log_exception(log_queue_system)
    return log_queue_action, log_queue_system, log_queue_exception
