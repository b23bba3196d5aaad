"""Endpoint listing the vision models the configured key can reach."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from foodlens_backend.api.deps import get_vision_model_client
from foodlens_backend.services.errors import (
    ConfigurationMissingError,
    ModelFailureError,
)

bp = Blueprint("vision_models", __name__, url_prefix="/api")


@bp.get("/models")
def list_models():
    """Return available vision models alongside the configured candidates."""

    try:
        client = get_vision_model_client()
    except RuntimeError as exc:
        return jsonify(error=str(exc)), 503

    try:
        available = client.list_vision_models()
    except ConfigurationMissingError as exc:
        return jsonify(error=str(exc)), 503
    except ModelFailureError:
        current_app.logger.exception("failed to list vision models")
        return jsonify(error="failed to query vision model endpoint"), 502

    return jsonify(models=available, candidates=list(client.models))
