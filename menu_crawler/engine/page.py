"""
Page-handle and run-driver contract

The engine never fetches pages itself. It is written against the subset of
the Playwright async API below, and against a run driver that owns the
request queue, concurrency, retries and the output sink.
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Union

from pydantic import BaseModel, Field


class ElementHandle(Protocol):
    """Lazy element locator (playwright.async_api.Locator subset)"""

    @property
    def first(self) -> "ElementHandle": ...

    def nth(self, index: int) -> "ElementHandle": ...

    def locator(self, selector: str) -> "ElementHandle": ...

    async def count(self) -> int: ...

    async def all(self) -> List["ElementHandle"]: ...

    async def text_content(self) -> Optional[str]: ...

    async def get_attribute(self, name: str) -> Optional[str]: ...

    async def is_visible(self) -> bool: ...

    async def is_enabled(self) -> bool: ...

    async def click(self) -> None: ...


class PageHandle(Protocol):
    """Rendered page (playwright.async_api.Page subset)"""

    @property
    def url(self) -> str: ...

    def locator(self, selector: str) -> ElementHandle: ...

    async def goto(self, url: str) -> Any: ...

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[float] = None) -> None: ...

    async def wait_for_timeout(self, timeout: float) -> None: ...


class RequestLabel(str, Enum):
    """State of a request in the main -> category -> product flow"""

    MAIN = "main"
    CATEGORY = "category"
    PRODUCT = "product"


class CrawlRequest(BaseModel):
    """A page to visit plus the metadata carried with it"""

    url: str
    label: RequestLabel = RequestLabel.MAIN
    user_data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def unique_key(self) -> str:
        return f"{self.label.value}:{self.url}"


RequestLike = Union[str, CrawlRequest]


class RunDriver(Protocol):
    """External page-fetching collaborator"""

    async def run(self, requests: Sequence[RequestLike], handler: "RequestHandler") -> None: ...

    async def enqueue(self, requests: Sequence[RequestLike]) -> None: ...

    async def push_record(self, record: Dict[str, Any]) -> None: ...

    def collect_all(self) -> List[Dict[str, Any]]: ...


RequestHandler = Callable[[PageHandle, CrawlRequest, RunDriver], Awaitable[None]]


def to_request(request: RequestLike) -> CrawlRequest:
    """Bare URLs are main-page requests"""
    if isinstance(request, CrawlRequest):
        return request
    return CrawlRequest(url=request)
