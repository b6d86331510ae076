"""App factory entrypoint for WSGI servers."""


def create_app(config_path=None, base_dir=None):
    """Return a configured Flask app for WSGI entrypoints such as ``gunicorn``."""
    from watchqueue.main import create_app as build

    return build(config_path=config_path, base_dir=base_dir)
