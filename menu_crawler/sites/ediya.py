"""
Ediya Coffee

Single listing page with a "더보기" button; nutrition sits in each item's
hidden detail panel. Categories are filter checkboxes that map to query
strings on the same listing URL.
"""

import asyncio
import re
from typing import Any, Dict, List, Optional

from menu_crawler.core.logging import log
from menu_crawler.engine.primitives import get_attribute, get_image_url, get_text
from menu_crawler.models.definition import (
    CrawlerDefinition,
    CrawlerStrategy,
    ExtractorContext,
    PaginationSelectors,
    PaginationType,
    ProductDataSelectors,
    SelectorConfig,
    SiteConfig,
    define_crawler,
)
from menu_crawler.models.product import CategoryInfo, ExtractedProduct, Nutritions

BASE_URL = "https://ediya.com"
START_URL = "https://ediya.com/contents/drink.html"
CATEGORY_URL_TEMPLATE = "https://ediya.com/contents/drink.html?chked_val="

CATEGORY_LABELS = 'label:has(input[name="chkList"])'

GIFT_SUFFIX = re.compile(r"\s*선물하기\s*$")
SERVING_SIZE_ML = re.compile(r"(\d+(?:\.\d+)?)ml")
# "칼로리 (kcal)" -> dd "(125kcal)"
NUTRITION_VALUE = re.compile(r"\(([0-9.]+)(?:kcal|g|mg)\)")

# Label keyword -> (field, unit), checked in order
NUTRIENT_LABELS = (
    ("칼로리", "calories", "kcal"),
    ("당류", "sugar", "g"),
    ("단백질", "protein", "g"),
    ("포화지방", "saturated_fat", "g"),
    ("나트륨", "natrium", "mg"),
    ("카페인", "caffeine", "mg"),
)

SELECTORS = SelectorConfig(
    product_containers="#menu_ul > li",
    product_data=ProductDataSelectors(
        name=".menu_tt > a > span",
        name_en="div.detail_con > h2 > span",
        description=".detail_txt",
        image=":scope > a > img",
    ),
    nutrition=".pro_comp",
    pagination=PaginationSelectors(load_more='a:has-text("더보기")'),
)


async def extract_ediya_product(container, context: ExtractorContext) -> Optional[ExtractedProduct]:
    fields = SELECTORS.product_data
    name, name_en, description, image_url = await asyncio.gather(
        get_text(container.locator(fields.name).first),
        get_text(container.locator(fields.name_en).first),
        get_text(container.locator(fields.description).first),
        get_image_url(container.locator(fields.image).first, context.base_url),
    )

    name = GIFT_SUFFIX.sub("", name)
    if not name:
        return None

    return ExtractedProduct(
        name=name,
        name_en=name_en or None,
        description=description or None,
        image_url=image_url,
        price=None,
    )


async def extract_ediya_nutrition(element, context: ExtractorContext) -> Optional[Nutritions]:
    panel = element.locator(".pro_comp")
    if await panel.count() == 0:
        return None

    data: Dict[str, Any] = {}

    size_match = SERVING_SIZE_ML.search(await get_text(panel.locator(".pro_size").first))
    if size_match:
        data["serving_size"] = float(size_match.group(1))
        data["serving_size_unit"] = "ml"

    for item in await panel.locator(".pro_nutri dl").all():
        label = (await get_text(item.locator("dt").first)).lower()
        value_match = NUTRITION_VALUE.search(await get_text(item.locator("dd").first))
        if not (label and value_match):
            continue

        for keyword, field, unit in NUTRIENT_LABELS:
            if keyword in label:
                data[field] = float(value_match.group(1))
                data[f"{field}_unit"] = unit
                break

    return Nutritions(**data) if data else None


async def extract_ediya_categories(page, context: ExtractorContext) -> List[CategoryInfo]:
    categories = []
    for label in await page.locator(CATEGORY_LABELS).all():
        value = await get_attribute(label.locator('input[name="chkList"]').first, "value")
        name = await get_text(label)
        if value and name:
            categories.append(CategoryInfo(name=name, url=f"{CATEGORY_URL_TEMPLATE}{value},&skeyword=#blockcate", id=value))

    log.debug(f"Found {len(categories)} Ediya categories")
    return categories


ediya_definition: CrawlerDefinition = define_crawler(
    CrawlerDefinition(
        config=SiteConfig(brand="ediya", base_url=BASE_URL, start_url=START_URL),
        selectors=SELECTORS,
        strategy=CrawlerStrategy.INLINE_DATA,
        pagination=PaginationType.LOAD_MORE,
        options={
            "max_concurrency": 2,
            "max_requests_per_crawl": 50,
            "max_request_retries": 2,
            "request_handler_timeout_secs": 120,
        },
        extract_product=extract_ediya_product,
        extract_nutrition=extract_ediya_nutrition,
        extract_categories=extract_ediya_categories,
    )
)
