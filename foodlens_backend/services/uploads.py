"""Helpers for turning user uploads into image blobs."""

from __future__ import annotations

import mimetypes

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from foodlens_backend.models import DEFAULT_IMAGE_MIME_TYPE, ImageBlob

DEFAULT_UPLOAD_FILENAME = "upload"


def _resolve_mime_type(declared: str | None, filename: str | None) -> str:
    mime_type = (declared or "").split(";", 1)[0].strip().lower()
    if not mime_type or mime_type == "application/octet-stream":
        guessed, _ = mimetypes.guess_type(filename or "")
        mime_type = guessed or DEFAULT_IMAGE_MIME_TYPE
    return mime_type


def _ensure_image_mime_type(mime_type: str) -> None:
    if not mime_type.startswith("image/"):
        raise ValueError(f"unsupported content type {mime_type!r}; expected an image")


def read_image_upload(image_file: FileStorage) -> ImageBlob:
    """Read a multipart upload into an ``ImageBlob``."""

    if image_file.filename == "":
        raise ValueError("empty filename")

    image_bytes = image_file.read()
    if not image_bytes:
        raise ValueError("uploaded file was empty")

    filename = secure_filename(image_file.filename or "") or DEFAULT_UPLOAD_FILENAME
    mime_type = _resolve_mime_type(image_file.mimetype, image_file.filename)
    _ensure_image_mime_type(mime_type)

    return ImageBlob(data=image_bytes, mime_type=mime_type, filename=filename)


def read_data_url_upload(data_url: object) -> ImageBlob:
    """Decode an image sent inline as a ``data:`` URL string."""

    if not isinstance(data_url, str) or not data_url.strip():
        raise ValueError("image must be a non-empty data URL string")

    blob = ImageBlob.from_data_url(data_url)
    _ensure_image_mime_type(blob.mime_type)
    return blob
