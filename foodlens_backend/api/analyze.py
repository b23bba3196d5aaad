"""Endpoint that analyzes a food photo."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from foodlens_backend.api.deps import build_analysis_pipeline
from foodlens_backend.models import AnalysisResult, FoodItems, ImageBlob, NutritionItem
from foodlens_backend.services.uploads import read_data_url_upload, read_image_upload

bp = Blueprint("analyze", __name__, url_prefix="/api")

GENERIC_ITEM_LABEL = "Food Item"


def _serialize_item(item: NutritionItem) -> dict[str, object]:
    return {
        "name": item.name,
        "displayName": item.name.strip() or GENERIC_ITEM_LABEL,
        "calories": item.calories,
        "protein": item.protein_grams,
        "carbs": item.carbs_grams,
        "fats": item.fats_grams,
    }


def _serialize_result(result: AnalysisResult) -> dict[str, object]:
    if not isinstance(result, FoodItems):
        return {"hasFood": False, "items": [], "totals": None}

    totals = result.totals()
    return {
        "hasFood": True,
        "items": [_serialize_item(item) for item in result.items],
        "totals": {
            "calories": totals.calories,
            "protein": totals.protein_grams,
            "carbs": totals.carbs_grams,
            "fats": totals.fats_grams,
        },
    }


def _read_request_image() -> ImageBlob:
    if "image" in request.files:
        return read_image_upload(request.files["image"])

    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict) or "image" not in payload:
        raise ValueError("missing file part or data URL field 'image'")
    return read_data_url_upload(payload["image"])


@bp.post("/analyze")
def analyze_photo():
    """Estimate nutrition for the uploaded photo."""

    try:
        blob = _read_request_image()
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    try:
        pipeline = build_analysis_pipeline()
    except RuntimeError as exc:
        return jsonify(error=str(exc)), 503

    outcome = pipeline.analyze(blob)
    if outcome.failed:
        current_app.logger.warning(
            "analysis resolved to no food after failure",
            extra={"error_type": type(outcome.error).__name__},
        )

    return jsonify(_serialize_result(outcome.result))
