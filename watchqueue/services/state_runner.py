"""Serialized read -> transform -> sanitize -> persist runner for queue state."""

from __future__ import annotations

import threading
from collections.abc import Mapping

from watchqueue.core.queue_model import StateConflictError, clone_state, sanitize_state
from watchqueue.core.state_db import load_state_blob, save_state_blob


class StateRunner:
    """Single serialization point for every queue state transition.

    One lock covers the whole read-modify-write window so request threads of
    this process never interleave. The stored version stamp catches writers in
    other processes: a lost race re-reads and re-applies the transform.
    """

    def __init__(self, db_path, *, max_retries=3, log_action=None):
        self.db_path = db_path
        self.max_retries = max(0, int(max_retries))
        self.log_action = log_action
        self._lock = threading.Lock()

    def read(self):
        """Return the sanitized persisted state (defaults when nothing is stored)."""
        with self._lock:
            payload, _ = load_state_blob(self.db_path)
        return sanitize_state(payload)

    def mutate(self, transform):
        """Apply ``transform(state) -> state`` and persist the sanitized result.

        Exceptions raised by ``transform`` propagate and nothing is written.
        """
        with self._lock:
            for attempt in range(self.max_retries + 1):
                payload, version = load_state_blob(self.db_path)
                updated = transform(sanitize_state(payload))
                if not isinstance(updated, Mapping):
                    raise TypeError("State transform must return the updated state")
                sanitized = sanitize_state(updated)
                if save_state_blob(self.db_path, sanitized, expected_version=version):
                    return sanitized
                if callable(self.log_action):
                    self.log_action(
                        "state-conflict",
                        command=f"attempt={attempt + 1} version={version}",
                    )
        raise StateConflictError(
            f"Queue state changed concurrently; gave up after {self.max_retries + 1} attempts."
        )

    def replace(self, new_state):
        """Overwrite the stored state with a sanitized copy of ``new_state``."""
        snapshot = clone_state(new_state)
        return self.mutate(lambda _current: snapshot)
