"""
Shared validators for input normalization.

All validators raise shared.utils.exceptions.ValidationError so callers can
report problems before anything reaches a store.
"""

from typing import Optional
from urllib.parse import urlparse

from shared.config.constants import Limits
from shared.utils.exceptions import ValidationError


def validate_url(url: Optional[str], field: str = "url") -> Optional[str]:
    """
    Validate an optional http(s) URL.

    Returns:
        Trimmed URL, or None when empty.
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    if len(url) > Limits.MAX_URL_LENGTH:
        raise ValidationError(f"{field} is too long", field=field)

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"{field} must be an http(s) URL", field=field, value=url)

    return url
