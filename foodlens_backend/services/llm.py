"""Client helpers for interacting with vision-capable LLMs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from httpx import RequestError, TimeoutException
from openai import APIStatusError, OpenAI, OpenAIError

from foodlens_backend.config import (
    DEFAULT_VISION_BASE_URL,
    DEFAULT_VISION_MAX_TOKENS,
    DEFAULT_VISION_MODELS,
    DEFAULT_VISION_PROMPT,
    DEFAULT_VISION_TEMPERATURE,
    has_usable_api_key,
)
from foodlens_backend.models import HostedImageRef
from foodlens_backend.services.errors import (
    ConfigurationMissingError,
    ModelFailureError,
)

logger = logging.getLogger(__name__)

VISION_MODEL_KEYWORDS = ("vision", "llava")


@dataclass
class VisionLLMSettings:
    """Configuration required to talk to the vision models."""

    api_key: Optional[str] = None
    models: tuple[str, ...] = DEFAULT_VISION_MODELS
    base_url: str = DEFAULT_VISION_BASE_URL
    prompt: str = DEFAULT_VISION_PROMPT
    temperature: float = DEFAULT_VISION_TEMPERATURE
    max_tokens: int = DEFAULT_VISION_MAX_TOKENS
    timeout: Optional[float] = None
    # Candidate fallback replaces SDK-level retries.
    max_retries: int = 0


@dataclass(slots=True)
class VisionLLMResult:
    """Raw text returned by the vision model that answered."""

    raw_text: str
    model: str


def parse_model_list(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated model list, dropping blanks and duplicates."""

    if not raw:
        return ()
    return _unique(part.strip() for part in raw.split(","))


def _unique(models: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    ordered = []
    for model in models:
        if model and model not in seen:
            ordered.append(model)
            seen.add(model)
    return tuple(ordered)


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, APIStatusError):
        return f"HTTP {exc.status_code}: {exc.message}"
    return f"{type(exc).__name__}: {exc}"


def _is_invalid_model_error(exc: Exception) -> bool:
    return (
        isinstance(exc, APIStatusError)
        and 400 <= exc.status_code < 500
        and "model" in str(exc.message).lower()
    )


def _extract_content(response: Any) -> str:
    """Return ``choices[0].message.content`` or raise ``ValueError``."""

    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, TypeError) as exc:
        raise ValueError("vision response is missing choices[0].message") from exc
    return content or ""


class VisionModelClient:
    """Chat-completions client that walks an ordered list of candidate models."""

    def __init__(
        self,
        settings: VisionLLMSettings,
        *,
        client: OpenAI | None = None,
    ) -> None:
        self._settings = settings
        self._models = _unique(settings.models)
        if client is None and self.is_configured:
            client = OpenAI(
                api_key=settings.api_key,
                base_url=settings.base_url,
                timeout=settings.timeout,
                max_retries=settings.max_retries,
            )
        self._client = client

    @property
    def models(self) -> tuple[str, ...]:
        return self._models

    @property
    def is_configured(self) -> bool:
        return has_usable_api_key(self._settings.api_key)

    def ensure_configured(self) -> None:
        """Raise ``ConfigurationMissingError`` when no usable key is set."""

        if not self.is_configured:
            raise ConfigurationMissingError("vision model API key is not configured")
        if not self._models:
            raise ConfigurationMissingError("no vision models are configured")

    def _get_client(self) -> OpenAI:
        if self._client is None:
            raise ConfigurationMissingError("vision model API key is not configured")
        return self._client

    def build_messages(self, image_ref: HostedImageRef) -> list[dict[str, Any]]:
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": self._settings.prompt},
                    {"type": "image_url", "image_url": {"url": image_ref.url}},
                ],
            }
        ]

    def classify_food(self, image_ref: HostedImageRef) -> VisionLLMResult:
        """Ask each candidate model in turn to describe the food in the image."""

        self.ensure_configured()
        client = self._get_client()
        messages = self.build_messages(image_ref)

        attempted: list[str] = []
        last_error: str | None = None
        for model in self._models:
            attempted.append(model)
            logger.info(
                "requesting nutrition analysis",
                extra={
                    "model": model,
                    "remote_image": image_ref.remote,
                    "image_url_length": len(image_ref.url),
                },
            )
            try:
                response = client.chat.completions.create(
                    model=model,
                    messages=messages,
                    temperature=self._settings.temperature,
                    max_tokens=self._settings.max_tokens,
                    stream=False,
                )
                raw_text = _extract_content(response)
            except APIStatusError as exc:
                last_error = _describe_failure(exc)
                if _is_invalid_model_error(exc):
                    logger.warning(
                        "model %s rejected as invalid or unavailable: %s",
                        model,
                        last_error,
                    )
                else:
                    logger.warning("model %s failed: %s", model, last_error)
                continue
            except (TimeoutException, RequestError, OpenAIError, ValueError) as exc:
                last_error = _describe_failure(exc)
                logger.warning("model %s failed: %s", model, last_error)
                continue
            except Exception as exc:  # noqa: BLE001 - try the next candidate
                last_error = _describe_failure(exc)
                logger.exception("unexpected error from model %s", model)
                continue

            logger.info(
                "vision model answered",
                extra={"model": model, "content_length": len(raw_text)},
            )
            return VisionLLMResult(raw_text=raw_text, model=model)

        raise ModelFailureError(
            "all candidate vision models failed",
            attempted_models=attempted,
            cause_message=last_error,
        )

    def list_vision_models(self) -> list[str]:
        """Return model ids from the endpoint that can take image input."""

        if not self.is_configured:
            raise ConfigurationMissingError("vision model API key is not configured")

        try:
            page = self._get_client().models.list()
            available = [entry.id for entry in page]
        except (
            TimeoutException,
            RequestError,
            OpenAIError,
            AttributeError,
            TypeError,
        ) as exc:
            logger.error("failed to list models: %s", _describe_failure(exc))
            raise ModelFailureError(
                "failed to list available models",
                cause_message=_describe_failure(exc),
            ) from exc

        candidates = set(self._models)
        vision_models = [
            model_id
            for model_id in available
            if isinstance(model_id, str)
            and (
                model_id in candidates
                or any(keyword in model_id.lower() for keyword in VISION_MODEL_KEYWORDS)
            )
        ]
        logger.info("available vision models: %s", vision_models)
        return vision_models


def init_vision_model_client(settings: VisionLLMSettings) -> VisionModelClient:
    """Create a ``VisionModelClient`` instance from the provided settings."""

    return VisionModelClient(settings)
