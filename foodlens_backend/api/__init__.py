"""API package wiring for FoodLens backend."""

from flask import Flask

from .analyze import bp as analyze_bp
from .vision_models import bp as vision_models_bp


def init_app(app: Flask) -> None:
    """Register all API blueprints on the given application."""

    app.register_blueprint(analyze_bp)
    app.register_blueprint(vision_models_bp)
