"""
Playwright-backed run driver

Owns the browser, the request queue and the output records. Concurrency,
per-request timeouts and retries are enforced here; the crawler only ever
sees one rendered page at a time.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Set

from playwright.async_api import BrowserContext, async_playwright
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from menu_crawler.core.logging import log
from menu_crawler.engine.page import CrawlRequest, RequestHandler, RequestLike, to_request
from menu_crawler.models.options import CrawlerOptions


class PlaywrightRunDriver:
    """Queue-driven browser crawl with bounded workers"""

    def __init__(self, options: Optional[CrawlerOptions] = None):
        self.options = options or CrawlerOptions()
        self.failed_requests: List[CrawlRequest] = []
        self._queue: Optional[asyncio.Queue] = None
        self._seen: Set[str] = set()
        self._records: List[Dict[str, Any]] = []
        self._started = 0

    async def enqueue(self, requests: Sequence[RequestLike]) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue()

        for item in requests:
            request = to_request(item)
            if request.unique_key in self._seen:
                log.debug(f"Skipping duplicate request: {request.url}")
                continue
            self._seen.add(request.unique_key)
            self._queue.put_nowait(request)

    async def push_record(self, record: Dict[str, Any]) -> None:
        self._records.append(record)

    def collect_all(self) -> List[Dict[str, Any]]:
        return list(self._records)

    async def run(self, requests: Sequence[RequestLike], handler: RequestHandler) -> None:
        self._queue = asyncio.Queue()
        await self.enqueue(requests)

        launch = self.options.launch_options
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=launch.headless, args=launch.args)
            try:
                context = await browser.new_context()
                workers = [
                    asyncio.create_task(self._worker(context, handler))
                    for _ in range(self.options.max_concurrency)
                ]
                await self._queue.join()

                for worker in workers:
                    worker.cancel()
                await asyncio.gather(*workers, return_exceptions=True)
            finally:
                await browser.close()

        log.info(
            f"Crawl finished: {self._started} requests, {len(self.failed_requests)} failed, "
            f"{len(self._records)} records"
        )

    async def _worker(self, context: BrowserContext, handler: RequestHandler) -> None:
        while True:
            request = await self._queue.get()
            try:
                if self._started >= self.options.max_requests_per_crawl:
                    log.info(f"Request limit {self.options.max_requests_per_crawl} reached, skipping {request.url}")
                    continue
                self._started += 1
                await self._process(context, request, handler)
            finally:
                self._queue.task_done()

    async def _process(self, context: BrowserContext, request: CrawlRequest, handler: RequestHandler) -> None:
        attempts = self.options.max_request_retries + 1
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=wait_exponential(multiplier=1, min=1, max=5),
                reraise=True,
            ):
                with attempt:
                    await self._handle_once(context, request, handler)
        except Exception as e:
            log.error(f"Request {request.url} failed after {attempts} attempts: {e}")
            self.failed_requests.append(request)

    async def _handle_once(self, context: BrowserContext, request: CrawlRequest, handler: RequestHandler) -> None:
        page = await context.new_page()
        try:
            await asyncio.wait_for(
                self._navigate_and_handle(page, request, handler),
                timeout=self.options.request_handler_timeout_secs,
            )
        finally:
            await page.close()

    async def _navigate_and_handle(self, page, request: CrawlRequest, handler: RequestHandler) -> None:
        await page.goto(request.url)
        await handler(page, request, self)
