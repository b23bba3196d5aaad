"""Client for publishing images on a third-party image host."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from foodlens_backend.config import (
    DEFAULT_IMAGE_HOST_TIMEOUT_SECONDS,
    DEFAULT_IMAGE_HOST_UPLOAD_URL,
    has_usable_api_key,
)
from foodlens_backend.models import HostedImageRef, ImageBlob
from foodlens_backend.services.errors import TransportFailureError

logger = logging.getLogger(__name__)

_ERROR_BODY_LOG_LIMIT = 512


@dataclass(slots=True)
class ImageHostSettings:
    """Configuration block for the image host."""

    api_key: Optional[str] = None
    upload_url: str = DEFAULT_IMAGE_HOST_UPLOAD_URL
    timeout: Optional[float] = DEFAULT_IMAGE_HOST_TIMEOUT_SECONDS


class ImageHostClient:
    """Upload images to the host, falling back to inline data URLs.

    Hosting only shortens the URL handed to the vision model, so every failure
    here degrades to the data URL instead of failing the analysis.
    """

    def __init__(
        self,
        settings: ImageHostSettings,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return has_usable_api_key(self._settings.api_key)

    def host_image(self, blob: ImageBlob) -> HostedImageRef:
        """Return a URL the vision model can read ``blob`` from."""

        if not self.is_configured:
            logger.info("image host API key not configured; using data URL directly")
            return _inline_ref(blob)

        try:
            url = self._upload(blob)
        except TransportFailureError as exc:
            logger.warning(
                "image host upload failed; falling back to data URL: %s",
                exc,
                extra={"cause": exc.cause_message},
            )
            return _inline_ref(blob)

        logger.info("image uploaded to host", extra={"url": url})
        return HostedImageRef(url=url, remote=True)

    def _upload(self, blob: ImageBlob) -> str:
        logger.info(
            "uploading image to host",
            extra={"bytes": len(blob.data), "mime_type": blob.mime_type},
        )
        files = {
            "image": (blob.filename or "image", blob.data, blob.mime_type),
        }
        try:
            response = self._session.post(
                self._settings.upload_url,
                params={"key": self._settings.api_key},
                files=files,
                timeout=self._settings.timeout,
            )
        except requests.RequestException as exc:
            raise TransportFailureError(
                "failed to reach image host", cause_message=str(exc)
            ) from exc

        logger.info("image host response status %s", response.status_code)
        if not response.ok:
            body = response.text[:_ERROR_BODY_LOG_LIMIT]
            logger.error(
                "image host returned %s: %s", response.status_code, body
            )
            raise TransportFailureError(
                f"image host upload failed with status {response.status_code}",
                cause_message=body,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportFailureError(
                "invalid image host response", cause_message=str(exc)
            ) from exc

        url = _extract_hosted_url(payload)
        if url is None:
            raise TransportFailureError(
                "image host response did not include an image URL",
                cause_message=repr(payload)[:_ERROR_BODY_LOG_LIMIT],
            )
        return url


def _extract_hosted_url(payload: Any) -> str | None:
    if not isinstance(payload, dict) or payload.get("success") is not True:
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    url = data.get("url")
    if not isinstance(url, str) or not url.strip():
        return None
    return url.strip()


def _inline_ref(blob: ImageBlob) -> HostedImageRef:
    return HostedImageRef(url=blob.to_data_url(), remote=False)


def init_image_host_client(settings: ImageHostSettings) -> ImageHostClient:
    """Create an ``ImageHostClient`` instance from the provided settings."""

    return ImageHostClient(settings)
