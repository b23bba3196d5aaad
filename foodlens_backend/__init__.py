import logging
import os
from typing import Mapping

from flask import Flask, jsonify

from foodlens_backend.api import init_app as init_api
from foodlens_backend.config import (
    DEFAULT_IMAGE_HOST_TIMEOUT_SECONDS,
    DEFAULT_IMAGE_HOST_UPLOAD_URL,
    DEFAULT_VISION_BASE_URL,
    DEFAULT_VISION_MODELS,
    DEFAULT_VISION_PROMPT,
    has_usable_api_key,
)
from foodlens_backend.services.hosting import (
    ImageHostSettings,
    init_image_host_client,
)
from foodlens_backend.services.llm import (
    VisionLLMSettings,
    init_vision_model_client,
    parse_model_list,
)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_VISION_TIMEOUT_SECONDS = 60.0


def create_app(environ: Mapping[str, str] | None = None) -> Flask:
    """Application factory for the FoodLens backend."""
    env = os.environ if environ is None else environ
    app = Flask(__name__)

    _configure_logging(app)

    app.config["MAX_CONTENT_LENGTH"] = _read_int(
        app, env, "FOODLENS_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES
    )

    @app.get("/healthz")
    def healthcheck():
        return jsonify(status="ok")

    @app.get("/api/healthz")
    def api_healthcheck():
        return jsonify(status="ok")

    host_api_key = env.get("FOODLENS_IMAGE_HOST_API_KEY") or env.get("IMGBB_API_KEY")
    if not has_usable_api_key(host_api_key):
        app.logger.warning(
            "FOODLENS_IMAGE_HOST_API_KEY/IMGBB_API_KEY not set; images are sent inline as data URLs"
        )
    app.extensions["image_host_client"] = init_image_host_client(
        ImageHostSettings(
            api_key=host_api_key,
            upload_url=env.get(
                "FOODLENS_IMAGE_HOST_UPLOAD_URL", DEFAULT_IMAGE_HOST_UPLOAD_URL
            ),
            timeout=_read_float(
                app,
                env,
                "FOODLENS_IMAGE_HOST_TIMEOUT",
                DEFAULT_IMAGE_HOST_TIMEOUT_SECONDS,
            ),
        )
    )

    vision_api_key = env.get("FOODLENS_VISION_API_KEY") or env.get("GROQ_API_KEY")
    if not has_usable_api_key(vision_api_key):
        app.logger.warning(
            "FOODLENS_VISION_API_KEY/GROQ_API_KEY not set; every analysis will report no food"
        )
    vision_models = (
        parse_model_list(env.get("FOODLENS_VISION_MODELS")) or DEFAULT_VISION_MODELS
    )
    app.extensions["vision_model_client"] = init_vision_model_client(
        VisionLLMSettings(
            api_key=vision_api_key,
            models=vision_models,
            base_url=env.get("FOODLENS_VISION_BASE_URL", DEFAULT_VISION_BASE_URL),
            prompt=env.get("FOODLENS_VISION_PROMPT") or DEFAULT_VISION_PROMPT,
            timeout=_read_float(
                app, env, "FOODLENS_VISION_TIMEOUT", DEFAULT_VISION_TIMEOUT_SECONDS
            ),
        )
    )
    app.logger.info("vision model candidates: %s", ", ".join(vision_models))

    init_api(app)

    return app


def _configure_logging(app: Flask) -> None:
    """Ensure application and root loggers emit INFO-level logs."""

    logging.basicConfig(level=logging.INFO)
    logging.getLogger().setLevel(logging.INFO)
    app.logger.setLevel(logging.INFO)


def _read_int(app: Flask, env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        app.logger.warning("invalid %s=%s; using %s", name, raw, default)
        return default


def _read_float(
    app: Flask, env: Mapping[str, str], name: str, default: float
) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        app.logger.warning("invalid %s=%s; using %s", name, raw, default)
        return default
