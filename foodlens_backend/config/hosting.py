"""Defaults for the third-party image host that are tracked in Git."""

DEFAULT_IMAGE_HOST_UPLOAD_URL = "https://api.imgbb.com/1/upload"

# Seconds before the upload gives up and the inline data URL is used instead.
DEFAULT_IMAGE_HOST_TIMEOUT_SECONDS = 30.0

# Value shipped in sample configs; treated the same as an unset key.
IMAGE_HOST_PLACEHOLDER_KEY = "YOUR_IMGBB_API_KEY_HERE"
