"""
Service errors rendered as JSON error bodies
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base error carrying the HTTP status and client-facing message"""

    status_code = 500

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class InvalidRequestError(ServiceError):
    status_code = 400


class OgImageNotFoundError(ServiceError):
    status_code = 404

    def __init__(self):
        super().__init__("No OG image found on this page")


class ImageFetchError(ServiceError):
    """The resolved OG image could not be fetched from upstream"""

    status_code = 502

    def __init__(self, image_url: str):
        super().__init__("Failed to fetch OG image", {"imageUrl": image_url})
        self.image_url = image_url


class ScreenshotCaptureError(ServiceError):
    def __init__(self):
        super().__init__("Failed to capture screenshot")


class OgExtractionError(ServiceError):
    def __init__(self):
        super().__init__("Failed to extract OG image")
