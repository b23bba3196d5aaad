"""Turn free-form vision model output into typed nutrition results.

Model output is untrusted text: it may wrap the JSON in prose, return a
partial object, or use strings where numbers were requested. Every ambiguity
degrades to ``NoFood`` so callers never see a crash or invented numbers.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Mapping

from foodlens_backend.models import (
    NO_FOOD,
    AnalysisResult,
    FoodItems,
    NutritionItem,
)

logger = logging.getLogger(__name__)

# Leading decimal number, the part ``parseFloat``-style coercion keeps.
_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def find_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` span in ``text``.

    Braces inside JSON string literals do not count towards the depth.
    """

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def coerce_number(value: object) -> float:
    """Coerce a model-supplied value to a non-negative float, else 0."""

    number: float | None = None
    if isinstance(value, bool):
        number = None
    elif isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match:
            number = float(match.group(1))
    if number is None or not math.isfinite(number):
        return 0.0
    return max(number, 0.0)


def _normalize_name(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def normalize_item(raw_item: object) -> NutritionItem:
    """Map one raw ``items`` entry onto a ``NutritionItem``."""

    entry: Mapping[str, Any] = raw_item if isinstance(raw_item, dict) else {}
    return NutritionItem(
        name=_normalize_name(entry.get("item_name")),
        calories=coerce_number(entry.get("total_calories")),
        protein_grams=coerce_number(entry.get("total_protein")),
        carbs_grams=coerce_number(entry.get("total_carbs")),
        fats_grams=coerce_number(entry.get("total_fats")),
    )


def classify_payload(payload: object) -> AnalysisResult:
    """Classify a decoded JSON payload as ``NoFood`` or ``FoodItems``."""

    if not isinstance(payload, dict):
        return NO_FOOD
    if payload.get("has_food") is False:
        return NO_FOOD

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        return NO_FOOD

    return FoodItems(items=tuple(normalize_item(item) for item in raw_items))


def interpret(raw_text: str | None) -> AnalysisResult:
    """Interpret raw vision model text; never raises."""

    if not raw_text:
        logger.info("empty model response; assuming no food detected")
        return NO_FOOD

    candidate = find_json_object(raw_text)
    if candidate is None:
        logger.info("no JSON object in model response; assuming no food detected")
        return NO_FOOD

    try:
        payload = json.loads(candidate)
    except (ValueError, RecursionError):
        logger.debug("model output was not valid JSON", exc_info=True)
        return NO_FOOD

    result = classify_payload(payload)
    if isinstance(result, FoodItems):
        logger.info("parsed %s food item(s) from model response", len(result.items))
    else:
        logger.info("model response indicates no food")
    return result
