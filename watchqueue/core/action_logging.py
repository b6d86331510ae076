"""Queue action/error log writers that tag each line with its caller context."""

import os
import re
import traceback
from datetime import datetime

from flask import has_request_context, request

LOG_ROTATE_MAX_BYTES = 5 * 1024 * 1024
LOG_ROTATE_BACKUP_COUNT = 5
LOG_TIME_FORMAT = "%b %d %H:%M:%S"
TRACEBACK_LOG_LIMIT = 700
CALLER_HEADER = "X-Queue-Context"
_CALLER_LABEL_RE = re.compile(r"[^A-Za-z0-9_.:-]+")


def sanitize_log_fragment(text):
    """Collapse any value into one whitespace-normalized log line."""
    if text is None:
        return ""
    return " ".join(str(text).split())


def get_caller_label():
    """Name the execution context behind the current request.

    Content scripts, the popup and the fetch pipeline announce themselves in
    ``X-Queue-Context``; anything else is identified by its address.
    """
    if not has_request_context():
        return "watchqueue"
    announced = _CALLER_LABEL_RE.sub("", request.headers.get(CALLER_HEADER, ""))[:40]
    if announced:
        return announced
    forwarded, _, _ = request.headers.get("X-Forwarded-For", "").partition(",")
    return forwarded.strip() or (request.remote_addr or "").strip() or "watchqueue"


def _rotate_log_file(path, max_bytes=LOG_ROTATE_MAX_BYTES, backup_count=LOG_ROTATE_BACKUP_COUNT):
    """Roll ``path`` to ``path.1`` (shifting older backups) once it is too big."""
    if min(max_bytes, backup_count) <= 0:
        return
    try:
        if path.stat().st_size < max_bytes:
            return
        backups = [path.with_name(f"{path.name}.{n}") for n in range(1, backup_count + 1)]
        for older, newer in zip(reversed(backups[1:]), reversed(backups[:-1])):
            if newer.exists():
                os.replace(newer, older)
        os.replace(path, backups[0])
    except OSError:
        # Missing file, or rotation lost a race; keep appending.
        return


def format_action_line(display_tz, action, command=None, rejection_message=None):
    """Render ``<time> <caller> [watchqueue/<action>] <detail> rejected: <why>``."""
    segments = [
        datetime.now(tz=display_tz).strftime(LOG_TIME_FORMAT),
        f"<{sanitize_log_fragment(get_caller_label()) or 'unknown'}>",
        f"[watchqueue/{sanitize_log_fragment(action) or 'unknown'}]",
        sanitize_log_fragment(command),
    ]
    reason = sanitize_log_fragment(rejection_message)
    if reason:
        segments.append(f"rejected: {reason}")
    return " ".join(segment for segment in segments if segment)


def describe_exception(context, exc):
    """Summarize ``exc`` as ``context: Type: text | traceback: ...`` on one line."""
    if exc is None:
        return f"{context}: Exception"
    summary = f"{context}: {type(exc).__name__}"
    detail = sanitize_log_fragment(exc)
    if detail:
        summary = f"{summary}: {detail}"
    frames = traceback.format_tb(exc.__traceback__)
    if frames:
        summary = f"{summary} | traceback: {sanitize_log_fragment(' | '.join(frames))[:TRACEBACK_LOG_LIMIT]}"
    return summary


def make_log_action(display_tz, log_dir, log_file):
    """Build the append-only logger closure for ``log_file``."""

    def log_action(action, command=None, rejection_message=None):
        line = format_action_line(display_tz, action, command, rejection_message)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            _rotate_log_file(log_file)
            with log_file.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError:
            # Queue operations must not fail because the log disk is full.
            return

    return log_action


def make_log_exception(log_action):
    """Build an exception logger that writes ``error`` lines via ``log_action``."""

    def log_exception(context, exc):
        log_action("error", rejection_message=describe_exception(context, exc))

    return log_exception
