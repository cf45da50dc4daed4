"""
Test configuration and fixtures

Pages are plain HTML strings parsed with BeautifulSoup; FakePage and
FakeLocator mimic the slice of the Playwright async API the crawlers use.
"""

import os
from collections import deque
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest
from bs4 import BeautifulSoup, Tag

from menu_crawler.core.config import get_settings
from menu_crawler.core.logging import log
from menu_crawler.engine.page import CrawlRequest, RequestHandler, RequestLike, to_request
from menu_crawler.models.definition import (
    CrawlerDefinition,
    CrawlerStrategy,
    PaginationType,
    ProductDataSelectors,
    SelectorConfig,
    SiteConfig,
)
from menu_crawler.models.options import TestModeConfig

BASE_URL = "https://cafe.example.com"


class ElementNotFound(Exception):
    pass


def _is_hidden(tag: Tag) -> bool:
    node = tag
    while isinstance(node, Tag):
        style = (node.get("style") or "").replace(" ", "").lower()
        if node.has_attr("hidden") or "display:none" in style:
            return True
        node = node.parent
    return False


class FakeLocator:
    def __init__(self, page: "FakePage", resolve: Callable[[], List[Tag]]):
        self.page = page
        self._resolve = resolve

    def _elements(self) -> List[Tag]:
        seen, unique = set(), []
        for tag in self._resolve():
            if id(tag) not in seen:
                seen.add(id(tag))
                unique.append(tag)
        return unique

    def _one(self) -> Tag:
        elements = self._elements()
        if not elements:
            raise ElementNotFound("Timeout waiting for element")
        return elements[0]

    @property
    def first(self) -> "FakeLocator":
        return self.nth(0)

    def nth(self, index: int) -> "FakeLocator":
        def resolve():
            elements = self._elements()
            return [elements[index]] if index < len(elements) else []

        return FakeLocator(self.page, resolve)

    def locator(self, selector: str) -> "FakeLocator":
        return FakeLocator(self.page, lambda: [t for parent in self._elements() for t in parent.select(selector)])

    async def count(self) -> int:
        return len(self._elements())

    async def all(self) -> List["FakeLocator"]:
        return [self.nth(index) for index in range(len(self._elements()))]

    async def text_content(self) -> Optional[str]:
        return self._one().get_text()

    async def get_attribute(self, name: str) -> Optional[str]:
        value = self._one().get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    async def is_visible(self) -> bool:
        elements = self._elements()
        return bool(elements) and not _is_hidden(elements[0])

    async def is_enabled(self) -> bool:
        tag = self._one()
        return not tag.has_attr("disabled") and "disabled" not in (tag.get("class") or [])

    async def click(self) -> None:
        tag = self._one()
        self.page.clicks += 1
        if self.page.on_click:
            self.page.on_click(self.page, tag)


class FakePage:
    def __init__(
        self,
        html: str = "",
        url: str = BASE_URL,
        pages: Optional[Dict[str, str]] = None,
        on_click: Optional[Callable[["FakePage", Tag], None]] = None,
    ):
        self._url = url
        self.pages = pages or {}
        self.on_click = on_click
        self.clicks = 0
        self.visited: List[str] = []
        self.set_content(html)

    @property
    def url(self) -> str:
        return self._url

    def set_content(self, html: str) -> None:
        self.soup = BeautifulSoup(html, "html.parser")

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, lambda: self.soup.select(selector))

    async def goto(self, url: str) -> None:
        if url not in self.pages:
            raise ElementNotFound(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self._url = url
        self.visited.append(url)
        self.set_content(self.pages[url])

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[float] = None) -> None:
        return None

    async def wait_for_timeout(self, timeout: float) -> None:
        return None


class MemoryRunDriver:
    """In-process run driver over a URL -> HTML map; failed requests are dropped"""

    def __init__(self, pages: Dict[str, str], on_click: Optional[Callable[[FakePage, Tag], None]] = None):
        self.pages = pages
        self.on_click = on_click
        self.handled: List[CrawlRequest] = []
        self.failed: List[CrawlRequest] = []
        self._queue: deque = deque()
        self._seen: set = set()
        self._records: List[Dict[str, Any]] = []

    async def enqueue(self, requests: Sequence[RequestLike]) -> None:
        for item in requests:
            request = to_request(item)
            if request.unique_key not in self._seen:
                self._seen.add(request.unique_key)
                self._queue.append(request)

    async def push_record(self, record: Dict[str, Any]) -> None:
        self._records.append(record)

    def collect_all(self) -> List[Dict[str, Any]]:
        return list(self._records)

    async def run(self, requests: Sequence[RequestLike], handler: RequestHandler) -> None:
        await self.enqueue(requests)
        while self._queue:
            request = self._queue.popleft()
            self.handled.append(request)
            page = FakePage(url=request.url, pages=self.pages, on_click=self.on_click)
            try:
                await page.goto(request.url)
                await handler(page, request, self)
            except Exception:
                self.failed.append(request)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep CRAWLER_* variables from the outer environment out of tests"""
    for key in list(os.environ):
        if key.startswith("CRAWLER_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    # The CLI writes flags straight into os.environ
    for key in list(os.environ):
        if key.startswith("CRAWLER_"):
            del os.environ[key]
    get_settings.cache_clear()


@pytest.fixture
def make_page():
    def factory(html: str = "", url: str = BASE_URL, **kwargs) -> FakePage:
        return FakePage(html, url=url, **kwargs)

    return factory


@pytest.fixture
def make_driver():
    def factory(pages: Dict[str, str], **kwargs) -> MemoryRunDriver:
        return MemoryRunDriver(pages, **kwargs)

    return factory


@pytest.fixture
def make_definition():
    """CrawlerDefinition for cafe.example.com with keyword overrides"""

    def factory(
        strategy: CrawlerStrategy = CrawlerStrategy.INLINE_DATA,
        product_containers="li.item",
        name: str = ".title",
        config: Optional[Dict[str, Any]] = None,
        product_data: Optional[Dict[str, Any]] = None,
        selectors: Optional[Dict[str, Any]] = None,
        pagination: PaginationType = PaginationType.NONE,
        **kwargs,
    ) -> CrawlerDefinition:
        site = {"brand": "testcafe", "base_url": BASE_URL, "start_url": f"{BASE_URL}/menu"}
        site.update(config or {})
        fields = {"name": name}
        fields.update(product_data or {})
        selector_data = {"product_containers": product_containers, "product_data": ProductDataSelectors(**fields)}
        selector_data.update(selectors or {})

        return CrawlerDefinition(
            config=SiteConfig(**site),
            selectors=SelectorConfig(**selector_data),
            strategy=strategy,
            pagination=pagination,
            **kwargs,
        )

    return factory


@pytest.fixture
def full_mode() -> TestModeConfig:
    return TestModeConfig()


@pytest.fixture
def limited_mode() -> TestModeConfig:
    return TestModeConfig(enabled=True, max_products=3, max_requests=10, max_categories=1)


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def log_messages():
    """Messages logged through loguru while the test runs"""
    messages: List[str] = []
    handler_id = log.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    log.remove(handler_id)
