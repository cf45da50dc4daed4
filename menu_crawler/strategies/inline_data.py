"""
Inline-data strategy

For sites where everything, nutrition included, is rendered on the listing
page. Categories are visited one after another on the same page instead of
being enqueued.
"""

from typing import List

from menu_crawler.core.logging import log
from menu_crawler.engine.base import BaseCrawler
from menu_crawler.engine.page import CrawlRequest, PageHandle, RunDriver
from menu_crawler.engine.pagination import wait_for_load
from menu_crawler.models.definition import CrawlerStrategy
from menu_crawler.models.product import DEFAULT_EXTERNAL_CATEGORY, CategoryInfo

ALL_ITEMS_CATEGORY = "All Items"


class InlineDataCrawler(BaseCrawler):
    """Crawler for inline-data and modal sites"""

    supported_strategies = (CrawlerStrategy.INLINE_DATA, CrawlerStrategy.MODAL)

    async def handle_main_page(self, page: PageHandle, request: CrawlRequest, driver: RunDriver) -> None:
        log.info(f"Processing {self.brand} main menu page")
        await wait_for_load(page)

        categories = await self.pipeline.extract_categories(page)
        if categories:
            await self.process_categories_sequentially(page, categories, driver)
        else:
            log.info("No categories found, processing current page")
            await self.process_current_page(page, ALL_ITEMS_CATEGORY, driver)

    async def process_categories_sequentially(
        self, page: PageHandle, categories: List[CategoryInfo], driver: RunDriver
    ) -> None:
        selected = self.limit_items(categories, "categories")
        log.info(f"Found {len(categories)} categories, processing {len(selected)}")

        for index, category in enumerate(selected, start=1):
            log.info(f"Processing category {index}/{len(selected)}: {category.name}")
            try:
                await page.goto(category.url)
                await wait_for_load(page)
                await self.process_current_page(page, category.name, driver)
            except Exception as e:
                log.error(f"Failed to process category {category.name}: {e}")

    async def handle_category_page(self, page: PageHandle, request: CrawlRequest, driver: RunDriver) -> None:
        category_name = request.user_data.get("categoryName") or DEFAULT_EXTERNAL_CATEGORY
        await self.process_current_page(page, category_name, driver)
