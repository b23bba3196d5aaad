"""Shared API dependencies and helpers."""

from flask import current_app

from foodlens_backend.services.hosting import ImageHostClient
from foodlens_backend.services.llm import VisionModelClient
from foodlens_backend.services.pipeline import AnalysisPipeline, ProgressMilestone


def get_image_host_client() -> ImageHostClient:
    """Return the configured image host client."""

    client: ImageHostClient | None = current_app.extensions.get("image_host_client")
    if client is None:
        raise RuntimeError("image host client is not configured")
    return client


def get_vision_model_client() -> VisionModelClient:
    """Return the configured vision model client."""

    client: VisionModelClient | None = current_app.extensions.get(
        "vision_model_client"
    )
    if client is None:
        raise RuntimeError("vision model client is not configured")
    return client


def _log_progress(milestone: ProgressMilestone) -> None:
    current_app.logger.info(
        "analysis step %s/3 reached (%s%%, %s)",
        milestone.step,
        milestone.percent,
        milestone.label,
    )


def build_analysis_pipeline() -> AnalysisPipeline:
    """Create a fresh pipeline for the current request."""

    return AnalysisPipeline(
        host_client=get_image_host_client(),
        vision_client=get_vision_model_client(),
        progress=_log_progress,
    )
