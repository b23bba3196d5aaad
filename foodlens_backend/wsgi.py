"""WSGI entry point, e.g. ``gunicorn foodlens_backend.wsgi:app``."""

from foodlens_backend import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000)
