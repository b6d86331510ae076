"""Service bootstrap/run helpers."""


def run_server(app, settings, log_queue_system, log_queue_exception, boot_steps):
    """Run startup steps in order, then serve the queue API."""
    host = settings.web_host
    port = settings.web_port
    log_queue_system("boot-start", command=f"host={host} port={port} db={settings.state_db_path}")

    for step_name, step_func in boot_steps:
        try:
            step_func()
        except Exception as exc:
            log_queue_exception(f"boot_step/{step_name}", exc)
            log_queue_system("boot-failed", command=step_name, rejection_message=str(exc)[:500] or "startup step failed")
            raise

    log_queue_system("boot-ready", command=f"host={host} port={port}")
    try:
        # Threaded requests are serialized by the state runner lock.
        app.run(host=host, port=port, threaded=True)
    except Exception as exc:
        log_queue_exception("boot_step/app.run", exc)
        log_queue_system("boot-failed", command="app.run", rejection_message=str(exc)[:500] or "web server startup failed")
        raise
