from urllib.parse import urlparse

import validators

from synesthesia.utils.exceptions import ValidationError

MAX_URL_LENGTH = 2048


def validate_media_url(url) -> str:
    """Return the trimmed URL or raise ValidationError if it is not a usable http(s) link"""
    if not isinstance(url, str):
        raise ValidationError("url must be a string")

    cleaned = url.strip()
    if not cleaned:
        raise ValidationError("url cannot be empty")

    if len(cleaned) > MAX_URL_LENGTH:
        raise ValidationError(f"url too long (max {MAX_URL_LENGTH} characters)")

    if validators.url(cleaned) is not True:
        raise ValidationError("url is not a valid URL")

    if urlparse(cleaned).scheme not in ("http", "https"):
        raise ValidationError("Only http and https URLs are supported")

    return cleaned
