from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from pagecapture.config import Settings
from pagecapture.main import create_app
from pagecapture.screenshot_service import ScreenshotService

FAKE_JPEG = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body\xff\xd9"


class FakePage:
    def __init__(self, browser: "FakeBrowser") -> None:
        self._browser = browser
        self.goto_calls: List[Dict[str, Any]] = []
        self.evaluate_calls: List[Any] = []
        self.screenshot_calls: List[Dict[str, Any]] = []

    async def goto(self, url: str, **kwargs: Any) -> None:
        self.goto_calls.append({"url": url, **kwargs})
        if self._browser.fail_on == "goto":
            raise TimeoutError("Navigation timeout of 30000 ms exceeded")

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        self.evaluate_calls.append(arg)
        if self._browser.fail_on == "evaluate":
            raise RuntimeError("Execution context was destroyed")
        if isinstance(arg, list):
            return [self._browser.meta.get(selector) for selector in arg]
        return None

    async def screenshot(self, **kwargs: Any) -> bytes:
        self.screenshot_calls.append(kwargs)
        if self._browser.fail_on == "screenshot":
            raise RuntimeError("Target closed")
        return FAKE_JPEG


class FakeBrowser:
    def __init__(self, meta: Dict[str, str], fail_on: Optional[str]) -> None:
        self.meta = meta
        self.fail_on = fail_on
        self.close_count = 0
        self.page_options: Dict[str, Any] = {}
        self.pages: List[FakePage] = []

    async def new_page(self, **kwargs: Any) -> FakePage:
        self.page_options = kwargs
        page = FakePage(self)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.close_count += 1


class FakeLauncher:
    """Stands in for chromium.launch and records every browser it hands out"""

    def __init__(self) -> None:
        self.meta: Dict[str, str] = {}
        self.fail_on: Optional[str] = None
        self.fail_launch = False
        self.browsers: List[FakeBrowser] = []

    async def __call__(self, settings: Settings) -> FakeBrowser:
        if self.fail_launch:
            raise RuntimeError("Failed to launch the browser process")
        browser = FakeBrowser(dict(self.meta), self.fail_on)
        self.browsers.append(browser)
        return browser

    @property
    def last_page(self) -> FakePage:
        return self.browsers[-1].pages[-1]


class UpstreamImages:
    """httpx.MockTransport handler recording outbound image requests"""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, content=b"\x89PNG\r\n\x1a\nfake-png", headers={"content-type": "image/png"}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


@pytest.fixture
def settings() -> Settings:
    settings = Settings()
    settings.ZOOM_SETTLE_MS = 0
    return settings


@pytest.fixture
def launcher() -> FakeLauncher:
    return FakeLauncher()


@pytest.fixture
def upstream() -> UpstreamImages:
    return UpstreamImages()


@pytest.fixture
def service(settings: Settings, launcher: FakeLauncher, upstream: UpstreamImages) -> ScreenshotService:
    return ScreenshotService(settings, launcher=launcher, http_transport=httpx.MockTransport(upstream))


@pytest.fixture
def client(settings: Settings, service: ScreenshotService) -> Iterator[TestClient]:
    app = create_app(settings, service)
    with TestClient(app) as test_client:
        yield test_client
