"""
Base crawler engine

Request routing for the main -> category -> product flow. The state travels
on each request's label; strategies supply the main-page step and may
override the category and product steps.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Literal, Optional, Sequence, Tuple, TypeVar

from menu_crawler.core.exceptions import CrawlRunError
from menu_crawler.core.logging import log
from menu_crawler.engine.extraction import ExtractionPipeline
from menu_crawler.engine.page import CrawlRequest, ElementHandle, PageHandle, RequestLabel, RunDriver
from menu_crawler.engine.pagination import click_load_more, click_next_button, max_pagination_clicks, wait_for_load
from menu_crawler.models.definition import CrawlerDefinition, CrawlerStrategy, ExtractorContext, PaginationType
from menu_crawler.models.options import CrawlerOptions, TestModeConfig, resolve_crawler_options
from menu_crawler.models.product import DEFAULT_EXTERNAL_CATEGORY, Product

T = TypeVar("T")

StepHandler = Callable[[PageHandle, CrawlRequest, RunDriver], Awaitable[None]]


@dataclass
class HandlerContext:
    """Everything a definition's custom_handler needs to process one request"""

    page: PageHandle
    request: CrawlRequest
    driver: RunDriver
    definition: CrawlerDefinition


class BaseCrawler(ABC):
    """
    Definition-driven crawler.

    Subclasses implement handle_main_page; the category and product steps
    have defaults that fit single-page listings.
    """

    # Strategy tags this class is meant to run; others only log a warning
    supported_strategies: Tuple[CrawlerStrategy, ...] = ()

    def __init__(self, definition: CrawlerDefinition, test_mode: Optional[TestModeConfig] = None):
        self.definition = definition
        self.test_mode = test_mode or TestModeConfig.from_settings()
        self.options: CrawlerOptions = resolve_crawler_options(definition.options, self.test_mode)
        self.pipeline = ExtractionPipeline(definition)

        if self.supported_strategies and definition.strategy not in self.supported_strategies:
            expected = " or ".join(f"'{s.value}'" for s in self.supported_strategies)
            log.warning(
                f"{self.__class__.__name__} used with strategy '{definition.strategy.value}', expected {expected}"
            )

        self._routes: Dict[RequestLabel, StepHandler] = {
            RequestLabel.MAIN: self.handle_main_page,
            RequestLabel.CATEGORY: self.handle_category_page,
            RequestLabel.PRODUCT: self.handle_product_page,
        }

    @property
    def brand(self) -> str:
        return self.definition.config.brand

    @property
    def base_url(self) -> str:
        return self.definition.config.base_url

    def get_extractor_context(self, category_name: Optional[str] = None, page_url: Optional[str] = None) -> ExtractorContext:
        return ExtractorContext(base_url=self.base_url, category_name=category_name, page_url=page_url)

    def limit_items(self, items: Sequence[T], kind: Literal["products", "categories"]) -> List[T]:
        """Apply test-mode caps; a no-op outside test mode"""
        items = list(items)
        if not self.test_mode.enabled:
            return items

        limit = self.test_mode.max_products if kind == "products" else self.test_mode.max_categories
        if limit is not None and len(items) > limit:
            log.info(f"Test mode: limiting {kind} to {limit}")
            return items[:limit]
        return items

    # Routing

    @abstractmethod
    async def handle_main_page(self, page: PageHandle, request: CrawlRequest, driver: RunDriver) -> None:
        """Entry step for every unlabelled request"""

    async def handle_request(self, page: PageHandle, request: CrawlRequest, driver: RunDriver) -> None:
        if self.definition.custom_handler:
            await self.definition.custom_handler(
                HandlerContext(page=page, request=request, driver=driver, definition=self.definition)
            )
            return

        handler = self._routes.get(request.label, self.handle_main_page)
        await handler(page, request, driver)

    async def handle_category_page(self, page: PageHandle, request: CrawlRequest, driver: RunDriver) -> None:
        category_name = request.user_data.get("categoryName") or DEFAULT_EXTERNAL_CATEGORY
        log.info(f"Processing category: {category_name}")

        await wait_for_load(page)
        await self.process_current_page(page, category_name, driver)

    async def handle_product_page(self, page: PageHandle, request: CrawlRequest, driver: RunDriver) -> None:
        log.warning(f"handle_product_page not implemented for {self.brand}: {request.url}")

    # Extraction

    async def find_product_containers(self, page: PageHandle) -> List[ElementHandle]:
        """Reveal lazily loaded items, then locate containers (test-mode capped)"""
        if self.definition.pagination == PaginationType.LOAD_MORE:
            await click_load_more(
                page,
                self.definition.selectors.pagination.load_more,
                max_clicks=max_pagination_clicks(self.test_mode.enabled),
            )

        containers = await self.pipeline.find_elements(page, self.definition.selectors.container_selectors())
        return self.limit_items(containers, "products")

    async def iter_page_products(self, page: PageHandle, category_name: str) -> AsyncIterator[Product]:
        """Products on the currently rendered listing, in container order"""
        context = self.get_extractor_context(category_name, page.url)

        for container in await self.find_product_containers(page):
            product = await self.pipeline.extract_product(container, context)
            if product:
                yield product

    async def extract_products_from_page(self, page: PageHandle, category_name: str) -> List[Product]:
        return [product async for product in self.iter_page_products(page, category_name)]

    async def process_listing(self, page: PageHandle, category_name: str, driver: RunDriver) -> int:
        """Push every product of the rendered listing as soon as it is read"""
        pushed = 0
        async for product in self.iter_page_products(page, category_name):
            await driver.push_record(product.to_record())
            pushed += 1
            log.info(f"Extracted: {product.name}{' with nutrition' if product.nutritions else ''}")
        return pushed

    async def process_current_page(self, page: PageHandle, category_name: str, driver: RunDriver) -> int:
        """
        Process a listing page, following next-button pagination when the
        definition asks for it.

        Returns:
            Number of items handled across all followed pages
        """
        handled = 0
        pages_followed = 0
        click_bound = max_pagination_clicks(self.test_mode.enabled)

        while True:
            handled += await self.process_listing(page, category_name, driver)

            if self.definition.pagination != PaginationType.NEXT_BUTTON or pages_followed >= click_bound:
                break
            if not await click_next_button(page, self.definition.selectors.pagination.next_button):
                break
            pages_followed += 1

        log.info(f"Finished {category_name}: {handled} items")
        return handled

    # Execution

    def create_driver(self) -> RunDriver:
        from menu_crawler.drivers.browser import PlaywrightRunDriver

        return PlaywrightRunDriver(self.options)

    def seed_urls(self) -> List[str]:
        config = self.definition.config
        return list(config.category_urls) if config.category_urls else [config.start_url]

    async def run(self, driver: Optional[RunDriver] = None) -> List[Dict[str, Any]]:
        """
        Crawl the brand and return its product records.

        Args:
            driver: Run driver to use; a Playwright driver is created when omitted

        Returns:
            JSON-serializable product records in emission order

        Raises:
            CrawlRunError: The driver failed; records pushed before the failure ride along
        """
        driver = driver or self.create_driver()
        log.info(f"Starting {self.brand} crawler")

        try:
            await driver.run(self.seed_urls(), self.handle_request)
        except Exception as e:
            records = driver.collect_all()
            log.error(f"{self.brand} crawler failed after {len(records)} products: {e}")
            raise CrawlRunError(str(e), brand=self.brand, records=records) from e

        records = driver.collect_all()
        log.info(f"{self.brand} crawler completed with {len(records)} products")
        return records
