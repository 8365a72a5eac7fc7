"""
Browser-backed capture service
Launches an isolated headless Chromium per request for screenshots and
Open Graph image extraction, and proxies OG images over HTTP
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

import httpx
from playwright.async_api import Browser, Page, async_playwright

from .config import BROWSER_ARGS, SCREENSHOT_VIEWPORT, USER_AGENT, Settings
from .errors import (
    ImageFetchError,
    OgExtractionError,
    OgImageNotFoundError,
    ScreenshotCaptureError,
)
from .models import FetchedImage, ScreenshotRequest
from .utils import pick_og_image, resolve_image_url

logger = logging.getLogger(__name__)

BrowserLauncher = Callable[[Settings], Awaitable[Browser]]

OG_IMAGE_SELECTORS = [
    'meta[property="og:image"]',
    'meta[name="twitter:image"]',
    'meta[name="twitter:image:src"]',
    'meta[property="twitter:image"]',
]

# Returns the content attribute for every selector, null where absent
READ_META_CONTENT_JS = """
(selectors) => selectors.map((selector) => {
    const el = document.querySelector(selector);
    return el ? el.getAttribute("content") : null;
})
"""

APPLY_ZOOM_JS = """
(zoomLevel) => {
    document.body.style.zoom = String(zoomLevel);
}
"""


class ScreenshotService:
    """Per-request browser orchestration for /screenshot and /og"""

    def __init__(
        self,
        settings: Settings,
        launcher: Optional[BrowserLauncher] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.playwright = None
        self.http_client: Optional[httpx.AsyncClient] = None
        self._launcher = launcher
        self._http_transport = http_transport

    async def initialize(self):
        """Start the Playwright driver and the image proxy client"""
        if self._launcher is None:
            self.playwright = await async_playwright().start()
            self._launcher = self._launch_chromium

        self.http_client = httpx.AsyncClient(
            transport=self._http_transport,
            follow_redirects=True,
            timeout=self.settings.IMAGE_FETCH_TIMEOUT,
        )
        logger.info(
            "Capture service initialized (executable=%s)",
            self.settings.BROWSER_EXECUTABLE_PATH or "bundled",
        )

    async def cleanup(self):
        """Release process-lifetime resources"""
        try:
            if self.http_client:
                await self.http_client.aclose()
                self.http_client = None
            if self.playwright:
                await self.playwright.stop()
                self.playwright = None
                # next initialize() must start a fresh driver
                self._launcher = None
            logger.info("Capture service cleaned up")
        except Exception:
            logger.exception("Error during cleanup")

    async def health_check(self) -> bool:
        """Healthy once a launcher and the HTTP client are available"""
        return self._launcher is not None and self.http_client is not None

    async def _launch_chromium(self, settings: Settings) -> Browser:
        return await self.playwright.chromium.launch(
            headless=True,
            executable_path=settings.BROWSER_EXECUTABLE_PATH or None,
            args=BROWSER_ARGS,
        )

    @asynccontextmanager
    async def browser_page(self, viewport: Optional[Dict[str, int]] = None) -> AsyncIterator[Page]:
        """Launch an isolated browser, yield its single page, always close it"""
        if self._launcher is None:
            raise RuntimeError("Capture service is not initialized")

        browser = None
        try:
            browser = await self._launcher(self.settings)
            page_options: Dict[str, Any] = {"user_agent": USER_AGENT}
            if viewport:
                page_options["viewport"] = viewport
            page = await browser.new_page(**page_options)
            yield page
        finally:
            if browser is not None:
                await browser.close()

    async def _navigate(self, page: Page, url: str):
        await page.goto(
            url,
            wait_until=self.settings.NAVIGATION_WAIT_UNTIL,
            timeout=self.settings.NAVIGATION_TIMEOUT_MS,
        )

    async def capture_screenshot(self, request: ScreenshotRequest) -> bytes:
        """Capture the rendered page as JPEG at the requested zoom"""
        try:
            async with self.browser_page(viewport=SCREENSHOT_VIEWPORT) as page:
                await self._navigate(page, request.url)

                if request.zoom != 1.0:
                    await page.evaluate(APPLY_ZOOM_JS, request.zoom)
                    await asyncio.sleep(self.settings.ZOOM_SETTLE_MS / 1000)

                return await page.screenshot(type="jpeg", quality=self.settings.JPEG_QUALITY)

        except Exception:
            logger.exception("Screenshot error for %s", request.url)
            raise ScreenshotCaptureError()

    async def _read_og_candidates(self, page: Page) -> List[Optional[str]]:
        return await page.evaluate(READ_META_CONTENT_JS, OG_IMAGE_SELECTORS)

    async def find_og_image(self, url: str) -> str:
        """Locate the page's social-preview image and return its absolute URL"""
        try:
            async with self.browser_page() as page:
                await self._navigate(page, url)
                candidates = await self._read_og_candidates(page)
        except Exception:
            logger.exception("OG extraction error for %s", url)
            raise OgExtractionError()

        reference = pick_og_image(candidates or [])
        if not reference:
            raise OgImageNotFoundError()

        try:
            return resolve_image_url(reference, url)
        except (ValueError, httpx.InvalidURL):
            logger.exception("Unusable OG image reference %r on %s", reference, url)
            raise OgExtractionError()

    async def fetch_image(self, image_url: str) -> FetchedImage:
        """Download the resolved OG image, independent of the browser"""
        try:
            response = await self.http_client.get(image_url)
        except httpx.HTTPError as e:
            logger.warning("OG image fetch failed for %s: %s", image_url, e)
            raise ImageFetchError(image_url)

        if not response.is_success:
            logger.warning("OG image fetch returned HTTP %s for %s", response.status_code, image_url)
            raise ImageFetchError(image_url)

        return FetchedImage(
            content=response.content,
            content_type=response.headers.get("content-type") or "image/jpeg",
        )
