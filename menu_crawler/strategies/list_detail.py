"""
List-detail strategy

Phase 1 reads a listing page and enqueues one request per product detail
page, carrying the listing fields along. Phase 2 reads the detail page and
merges both into the final record.
"""

import re
from typing import List, Optional

from menu_crawler.core.logging import log
from menu_crawler.engine.base import BaseCrawler
from menu_crawler.engine.extraction import parse_price
from menu_crawler.engine.page import CrawlRequest, ElementHandle, PageHandle, RequestLabel, RunDriver
from menu_crawler.engine.pagination import wait_for_load
from menu_crawler.engine.primitives import build_url, get_attribute, get_image_url, get_text
from menu_crawler.models.definition import CrawlerStrategy, ExtractorContext
from menu_crawler.models.product import DEFAULT_EXTERNAL_CATEGORY, CamelModel, CategoryInfo, ExtractedProduct, Product
from menu_crawler.strategies.inline_data import ALL_ITEMS_CATEGORY

# goView('123'), goViewB(123), goDetail("abc") ...
ONCLICK_ID_PATTERN = re.compile(r"go\w*\(['\"]?(\w+)['\"]?\)", re.IGNORECASE)


class ListingInfo(CamelModel):
    """Listing-page fields carried to the detail request"""

    name: str
    name_en: Optional[str] = None
    image_url: str = ""
    detail_url: str
    external_id: Optional[str] = None


class DetailInfo(CamelModel):
    description: Optional[str] = None
    price: Optional[int] = None
    image_url: str = ""


class ListDetailCrawler(BaseCrawler):
    """Crawler for sites whose nutrition and price live on detail pages"""

    supported_strategies = (CrawlerStrategy.LIST_DETAIL,)

    @property
    def product_id_pattern(self) -> re.Pattern:
        return self.definition.patterns.get("product_id", ONCLICK_ID_PATTERN)

    async def handle_main_page(self, page: PageHandle, request: CrawlRequest, driver: RunDriver) -> None:
        log.info(f"Processing {self.brand} main menu page")
        await wait_for_load(page)

        categories = await self.pipeline.extract_categories(page)
        if categories:
            await self.enqueue_categories(categories, driver)
        else:
            log.info("No categories found, extracting products from current page")
            await self.process_current_page(page, ALL_ITEMS_CATEGORY, driver)

    async def enqueue_categories(self, categories: List[CategoryInfo], driver: RunDriver) -> None:
        selected = self.limit_items(categories, "categories")
        log.info(f"Found {len(categories)} categories, enqueueing {len(selected)}")

        requests = [
            CrawlRequest(
                url=category.url,
                label=RequestLabel.CATEGORY,
                user_data={"categoryName": category.name, "categoryId": category.id},
            )
            for category in selected
        ]
        await driver.enqueue(requests)
        log.info(f"Enqueued {len(requests)} category pages")

    # Phase 1

    async def process_listing(self, page: PageHandle, category_name: str, driver: RunDriver) -> int:
        """Enqueue a detail request for every listed product with a resolvable URL"""
        context = self.get_extractor_context(category_name, page.url)
        requests: List[CrawlRequest] = []

        for container in await self.find_product_containers(page):
            try:
                listing = await self.extract_listing_info(container, context)
            except Exception as e:
                log.debug(f"Failed to extract basic product info: {e}")
                continue

            if listing:
                requests.append(
                    CrawlRequest(
                        url=listing.detail_url,
                        label=RequestLabel.PRODUCT,
                        user_data={"categoryName": category_name, "basicInfo": listing.model_dump(by_alias=True)},
                    )
                )

        if requests:
            await driver.enqueue(requests)
            log.info(f"Enqueued {len(requests)} product detail pages from {category_name}")
        return len(requests)

    async def extract_listing_info(self, container: ElementHandle, context: ExtractorContext) -> Optional[ListingInfo]:
        """Name, image and detail URL of one listed product"""
        if self.definition.extract_product:
            result = await self.definition.extract_product(container, context)
            if not result:
                return None
            extracted = ExtractedProduct.model_validate(result)
            detail_url = extracted.external_url or await self.resolve_detail_url(container)
            if not detail_url:
                log.debug(f"No detail URL for product: {extracted.name}")
                return None
            return ListingInfo(
                name=extracted.name,
                name_en=extracted.name_en,
                image_url=extracted.image_url,
                detail_url=detail_url,
                external_id=extracted.external_id,
            )

        fields = self.definition.selectors.product_data
        name = await get_text(container.locator(fields.name).first)
        if not name:
            return None

        name_en = await get_text(container.locator(fields.name_en).first) if fields.name_en else ""
        image_url = await get_image_url(container.locator(fields.image).first, self.base_url)

        detail_url = await self.resolve_detail_url(container)
        if not detail_url:
            log.debug(f"No detail URL for product: {name}")
            return None

        return ListingInfo(name=name, name_en=name_en or None, image_url=image_url, detail_url=detail_url)

    async def resolve_detail_url(self, container: ElementHandle) -> Optional[str]:
        """Explicit link first, then the URL template plus a mined product id"""
        link_selector = self.definition.selectors.product_data.link
        if link_selector:
            href = await get_attribute(container.locator(link_selector).first, "href")
            if href:
                return build_url(self.base_url, href)

        template = self.definition.config.product_url_template
        if template:
            product_id = await self.extract_product_id(container)
            if product_id:
                return f"{template}{product_id}"
        return None

    async def extract_product_id(self, container: ElementHandle) -> Optional[str]:
        """Product id from the first link's data-id or its onclick handler"""
        link = container.locator("a").first

        data_id = await get_attribute(link, "data-id")
        if data_id:
            return data_id

        onclick = await get_attribute(link, "onclick")
        if onclick:
            match = self.product_id_pattern.search(onclick)
            if match:
                return match.group(1)
        return None

    # Phase 2

    async def handle_product_page(self, page: PageHandle, request: CrawlRequest, driver: RunDriver) -> None:
        basic_info = request.user_data.get("basicInfo")
        if not basic_info:
            log.warning(f"Product request without listing info: {request.url}")
            return

        listing = ListingInfo.model_validate(basic_info)
        category_name = request.user_data.get("categoryName") or DEFAULT_EXTERNAL_CATEGORY
        log.info(f"Processing product detail: {listing.name}")

        try:
            await wait_for_load(page)
            context = self.get_extractor_context(category_name, page.url)

            nutritions = await self.pipeline.extract_nutrition(page, context)
            details = await self.extract_additional_details(page)

            product = Product(
                name=listing.name,
                name_en=listing.name_en,
                description=details.description,
                price=details.price,
                external_image_url=listing.image_url or details.image_url,
                category=None,
                external_category=category_name,
                external_id=listing.external_id or f"{self.brand}_{listing.name}",
                external_url=page.url,
                nutritions=nutritions,
            )
            await driver.push_record(product.to_record())
            log.info(f"Extracted: {product.name}{' with nutrition' if nutritions else ''}")
        except Exception as e:
            log.error(f"Failed to process product {listing.name}: {e}")

    async def extract_additional_details(self, page: PageHandle) -> DetailInfo:
        """Description, price and image from the detail page when selectors exist"""
        fields = self.definition.selectors.product_data

        description = None
        if fields.description:
            description = await get_text(page.locator(fields.description).first) or None

        price = None
        if fields.price:
            price = parse_price(await get_text(page.locator(fields.price).first))

        image_url = await get_image_url(page.locator(fields.image).first, self.base_url)
        return DetailInfo(description=description, price=price, image_url=image_url)
