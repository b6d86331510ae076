"""Watch-later queue service entrypoint.

Serves the queue API that the popup, content scripts and the subscription
fetch pipeline call. Settings come from ``wqweb.env`` (or the file named by
``WATCHQUEUE_CONFIG``).
"""

from watchqueue.main import create_app
from watchqueue.services.bootstrap import run_server


def main():
    app = create_app()
    settings = app.config["WATCHQUEUE_SETTINGS"]
    state = app.config["WATCHQUEUE_STATE"]
    boot_steps = [
        ("state-check", state["runner"].read),
    ]
    run_server(app, settings, state["log_queue_system"], state["log_queue_exception"], boot_steps)


if __name__ == "__main__":
    main()
