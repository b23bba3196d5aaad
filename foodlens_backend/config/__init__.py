"""Static configuration shipped with the codebase."""

# Model and hosting defaults live in dedicated modules for clarity and reuse.
from .hosting import (
    DEFAULT_IMAGE_HOST_TIMEOUT_SECONDS,
    DEFAULT_IMAGE_HOST_UPLOAD_URL,
    IMAGE_HOST_PLACEHOLDER_KEY,
)
from .llm import (
    DEFAULT_VISION_BASE_URL,
    DEFAULT_VISION_MAX_TOKENS,
    DEFAULT_VISION_MODELS,
    DEFAULT_VISION_PROMPT,
    DEFAULT_VISION_TEMPERATURE,
    VISION_PLACEHOLDER_KEY,
)

PLACEHOLDER_API_KEYS = frozenset(
    {IMAGE_HOST_PLACEHOLDER_KEY, VISION_PLACEHOLDER_KEY}
)


def has_usable_api_key(api_key: str | None) -> bool:
    """Return True when the key is set and is not a shipped placeholder."""

    candidate = (api_key or "").strip()
    return bool(candidate) and candidate not in PLACEHOLDER_API_KEYS


__all__ = [
    "DEFAULT_IMAGE_HOST_TIMEOUT_SECONDS",
    "DEFAULT_IMAGE_HOST_UPLOAD_URL",
    "DEFAULT_VISION_BASE_URL",
    "DEFAULT_VISION_MAX_TOKENS",
    "DEFAULT_VISION_MODELS",
    "DEFAULT_VISION_PROMPT",
    "DEFAULT_VISION_TEMPERATURE",
    "IMAGE_HOST_PLACEHOLDER_KEY",
    "PLACEHOLDER_API_KEYS",
    "VISION_PLACEHOLDER_KEY",
    "has_usable_api_key",
]
