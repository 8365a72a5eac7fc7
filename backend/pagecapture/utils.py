"""
Utility functions
"""

import math
from typing import Any, Iterable, Optional
from urllib.parse import urljoin, urlparse

import httpx

from .errors import InvalidRequestError
from .models import OgRequest, ScreenshotRequest

MIN_ZOOM = 0.0
MAX_ZOOM = 5.0


def is_absolute_url(value: Any) -> bool:
    """Check that value is a string with both a scheme and a host"""
    if not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    # hostless schemes (about:, data:, file:) are not navigable targets here
    return bool(parsed.scheme and parsed.netloc)


def _require_url(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise InvalidRequestError("Invalid JSON body")

    url = payload.get("url")
    if not url:
        raise InvalidRequestError("Missing 'url' in request body")
    if not is_absolute_url(url):
        raise InvalidRequestError("Invalid URL format")
    return url.strip()


def _is_valid_zoom(zoom: Any) -> bool:
    # bool is an int subclass but not a JSON number
    if isinstance(zoom, bool) or not isinstance(zoom, (int, float)):
        return False
    try:
        value = float(zoom)
    except OverflowError:
        return False
    return math.isfinite(value) and MIN_ZOOM < value <= MAX_ZOOM


def parse_screenshot_request(payload: Any) -> ScreenshotRequest:
    """Validate a decoded /screenshot body, first failing check wins"""
    url = _require_url(payload)

    zoom = payload.get("zoom", 1.0)
    if not _is_valid_zoom(zoom):
        raise InvalidRequestError("Zoom must be a number between 0 and 5")

    return ScreenshotRequest(url=url, zoom=float(zoom))


def parse_og_request(payload: Any) -> OgRequest:
    """Validate a decoded /og body"""
    return OgRequest(url=_require_url(payload))


def pick_og_image(candidates: Iterable[Optional[str]]) -> Optional[str]:
    """Return the first non-empty candidate, in selector order"""
    for content in candidates:
        if content:
            return content
    return None


def resolve_image_url(reference: str, page_url: str) -> str:
    """Resolve an og:image reference (absolute, //host or relative) against the page

    The result is percent-encoded so it is safe in a response header.
    Raises ValueError or httpx.InvalidURL when the reference is not a usable URL.
    """
    return str(httpx.URL(urljoin(page_url, reference.strip())))
