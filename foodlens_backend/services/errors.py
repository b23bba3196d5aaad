"""Exceptions raised by the nutrition analysis pipeline."""

from __future__ import annotations

from typing import Sequence


class PipelineError(RuntimeError):
    """Base class for failures inside the analysis pipeline.

    ``cause_message`` keeps the last underlying failure text for logging; it is
    never returned to API clients.
    """

    def __init__(self, message: str, *, cause_message: str | None = None) -> None:
        super().__init__(message)
        self.cause_message = cause_message


class ConfigurationMissingError(PipelineError):
    """Raised when no usable API key is configured for a required service."""


class TransportFailureError(PipelineError):
    """Raised when the image host upload fails; absorbed by the host client."""


class ModelFailureError(PipelineError):
    """Raised when every candidate vision model failed."""

    exhausted_models = True

    def __init__(
        self,
        message: str,
        *,
        attempted_models: Sequence[str] = (),
        cause_message: str | None = None,
    ) -> None:
        super().__init__(message, cause_message=cause_message)
        self.attempted_models = tuple(attempted_models)
