"""Shared Flask JSON response helpers for queue endpoints."""

from flask import jsonify

from watchqueue.core.queue_model import (
    EntryValidationError,
    ListNotFoundError,
    StateConflictError,
)

_ERROR_STATUS = (
    (EntryValidationError, 400),
    (ListNotFoundError, 404),
    (StateConflictError, 409),
)


def read_payload(request):
    """Return the JSON object body, or ``{}`` for anything else."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def ok_response(state=None, **extra):
    """Return the success envelope, optionally carrying the presentation state."""
    body = {"ok": True}
    if state is not None:
        body["state"] = state
    body.update(extra)
    return jsonify(body)


def rejected_response(error, message, status_code):
    return jsonify({"ok": False, "error": error, "message": message}), status_code


def store_error_response(exc):
    """Map a ``QueueStoreError`` onto its HTTP status and error code."""
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return rejected_response(exc.error_code, str(exc), status_code)
    return rejected_response(exc.error_code, str(exc), 400)


def internal_error_response():
    """Return generic internal-error payload."""
    return rejected_response("internal_error", "Internal server error.", 500)
