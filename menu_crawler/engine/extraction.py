"""
Default extraction pipeline

Three sub-pipelines (product, nutrition, category), each driven by the
definition's selectors and each replaceable through the definition's
optional override hook.
"""

import asyncio
import re
from typing import Any, List, Optional, Sequence, Union

from pydantic import ValidationError

from menu_crawler.core.logging import log
from menu_crawler.engine.page import ElementHandle, PageHandle
from menu_crawler.engine.primitives import build_url, get_attribute, get_image_url, get_text
from menu_crawler.models.definition import CrawlerDefinition, ExtractorContext
from menu_crawler.models.product import (
    DEFAULT_CATEGORY,
    DEFAULT_EXTERNAL_CATEGORY,
    CategoryInfo,
    ExtractedProduct,
    Nutritions,
    Product,
)

PRICE_PATTERN = re.compile(r"[\d,]+")


def parse_price(text: Optional[str]) -> Optional[int]:
    """First digit run of a price label, e.g. '4,500원' -> 4500"""
    if not text:
        return None
    match = PRICE_PATTERN.search(text)
    if not match:
        return None
    digits = match.group(0).replace(",", "")
    return int(digits) if digits else None


def make_external_id(brand: str, category_name: str, name: str) -> str:
    return f"{brand}_{category_name}_{name}"


class ExtractionPipeline:
    """Selector-driven extraction with per-site override hooks"""

    def __init__(self, definition: CrawlerDefinition):
        self.definition = definition

    @property
    def brand(self) -> str:
        return self.definition.config.brand

    @property
    def base_url(self) -> str:
        return self.definition.config.base_url

    async def find_elements(self, page: PageHandle, selectors: Union[str, Sequence[str]]) -> List[ElementHandle]:
        """Match the first selector that finds anything"""
        selector_list = [selectors] if isinstance(selectors, str) else list(selectors)

        for selector in selector_list:
            elements = page.locator(selector)
            count = await elements.count()
            if count > 0:
                log.info(f"Found {count} elements with selector: {selector}")
                return await elements.all()

        log.warning("No elements found with any selector")
        return []

    async def _optional_text(self, container: ElementHandle, selector: Optional[str]) -> Optional[str]:
        if not selector:
            return None
        return await get_text(container.locator(selector).first) or None

    # Product

    async def extract_product(self, container: ElementHandle, context: ExtractorContext) -> Optional[Product]:
        """
        Extract one product from a container element.

        Returns None when the item has no name or its extraction raised;
        a single bad item never aborts the page.
        """
        try:
            if self.definition.extract_product:
                return await self._extract_with_hook(container, context)
            return await self._extract_default(container, context)
        except Exception as e:
            log.debug(f"Failed to extract product: {e}")
            return None

    async def _extract_with_hook(self, container: ElementHandle, context: ExtractorContext) -> Optional[Product]:
        result = await self.definition.extract_product(container, context)
        if not result:
            return None

        extracted = ExtractedProduct.model_validate(result)
        nutritions = extracted.nutritions
        if nutritions is None and self.definition.extract_nutrition:
            nutritions = await self.extract_nutrition(container, context)

        return self.build_product(extracted.model_copy(update={"nutritions": nutritions}), context)

    async def _extract_default(self, container: ElementHandle, context: ExtractorContext) -> Optional[Product]:
        fields = self.definition.selectors.product_data

        name, name_en, description, image_url, price_text = await asyncio.gather(
            get_text(container.locator(fields.name).first),
            self._optional_text(container, fields.name_en),
            self._optional_text(container, fields.description),
            get_image_url(container.locator(fields.image).first, self.base_url),
            self._optional_text(container, fields.price),
        )

        if not name:
            return None

        nutritions = None
        if self.definition.selectors.nutrition:
            nutritions = await self.extract_nutrition(container, context)

        extracted = ExtractedProduct(
            name=name,
            name_en=name_en,
            description=description,
            image_url=image_url,
            price=parse_price(price_text),
            nutritions=nutritions,
        )
        return self.build_product(extracted, context)

    def build_product(self, data: ExtractedProduct, context: ExtractorContext) -> Product:
        category_name = context.category_name or DEFAULT_EXTERNAL_CATEGORY
        return Product(
            name=data.name,
            name_en=data.name_en,
            description=data.description,
            price=data.price or None,
            external_image_url=data.image_url,
            category=DEFAULT_CATEGORY,
            external_category=category_name,
            external_id=data.external_id or make_external_id(self.brand, category_name, data.name),
            external_url=data.external_url or context.page_url or "",
            nutritions=data.nutritions,
        )

    # Nutrition

    async def extract_nutrition(self, element: Any, context: ExtractorContext) -> Optional[Nutritions]:
        """Delegate to the site's nutrition hook; no built-in grammar"""
        if not self.definition.extract_nutrition:
            return None

        result = await self.definition.extract_nutrition(element, context)
        if not result:
            return None
        nutritions = Nutritions.model_validate(result)
        # Units without any value are not a nutrition block
        return nutritions if nutritions.has_values() else None

    # Categories

    async def extract_categories(self, page: PageHandle) -> List[CategoryInfo]:
        context = ExtractorContext(base_url=self.base_url)

        if self.definition.extract_categories:
            try:
                found = await self.definition.extract_categories(page, context)
            except Exception as e:
                log.error(f"Custom category extraction failed for {self.brand}: {e}")
                return []
            return self._valid_categories(found or [])

        selector = self.definition.selectors.category_links
        if not selector:
            return []

        categories: List[CategoryInfo] = []
        try:
            links = await page.locator(selector).all()
        except Exception as e:
            log.warning(f"Category links lookup failed: {e}")
            return []

        for link in links:
            name, href = await asyncio.gather(get_text(link), get_attribute(link, "href"))
            if name and href:
                categories.append(CategoryInfo(name=name, url=build_url(self.base_url, href)))

        return categories

    def _valid_categories(self, found: Sequence[Any]) -> List[CategoryInfo]:
        categories: List[CategoryInfo] = []
        for category in found:
            try:
                categories.append(CategoryInfo.model_validate(category))
            except ValidationError as e:
                log.warning(f"Skipping invalid category from {self.brand}: {category!r} ({e.error_count()} errors)")
        return categories
