"""
Application configuration
"""

import os
from typing import Optional

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

# MacBook Pro 14" logical resolution
SCREENSHOT_VIEWPORT = {"width": 3024, "height": 1964}

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class Settings:
    """Application settings"""

    def __init__(self):
        self.DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "3020"))

        # Browser settings
        self.BROWSER_EXECUTABLE_PATH: Optional[str] = (
            os.getenv("BROWSER_EXECUTABLE_PATH") or os.getenv("PUPPETEER_EXECUTABLE_PATH") or None
        )
        self.NAVIGATION_TIMEOUT_MS: int = int(os.getenv("NAVIGATION_TIMEOUT_MS", "30000"))
        self.NAVIGATION_WAIT_UNTIL: str = os.getenv("NAVIGATION_WAIT_UNTIL", "networkidle")

        # Screenshot settings
        self.ZOOM_SETTLE_MS: int = int(os.getenv("ZOOM_SETTLE_MS", "100"))
        self.JPEG_QUALITY: int = int(os.getenv("JPEG_QUALITY", "90"))

        # OG image proxy
        self.IMAGE_FETCH_TIMEOUT: float = float(os.getenv("IMAGE_FETCH_TIMEOUT", "30"))


settings = Settings()
