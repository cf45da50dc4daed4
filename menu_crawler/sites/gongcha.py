"""
Gong cha

Fixed category codes; each listing links to a detail page whose nutrition
table holds one row per size. The row with the most numeric cells wins.
"""

import re
from typing import Dict, List, Optional

from menu_crawler.engine.primitives import build_url, get_attribute, get_image_url, get_text
from menu_crawler.models.definition import (
    CrawlerDefinition,
    CrawlerStrategy,
    ExtractorContext,
    ProductDataSelectors,
    SelectorConfig,
    SiteConfig,
    define_crawler,
)
from menu_crawler.models.product import CategoryInfo, ExtractedProduct, Nutritions

BASE_URL = "https://www.gong-cha.co.kr"
START_URL = "https://www.gong-cha.co.kr/brand/menu/product?category=001001"

# (code, name, main category)
GONGCHA_CATEGORIES = (
    ("001001", "New 시즌 메뉴", "음료"),
    ("001002", "베스트셀러", "음료"),
    ("001006", "밀크티", "음료"),
    ("001010", "스무디", "음료"),
    ("001003", "오리지널 티", "음료"),
    ("001015", "프룻티&모어", "음료"),
    ("001011", "커피", "음료"),
    ("002001", "베이커리", "푸드"),
    ("002004", "스낵", "푸드"),
    ("002006", "아이스크림", "푸드"),
    ("003001", "비식품", "MD상품"),
    ("003002", "식품", "MD상품"),
)

NUTRITION_TABLE = ".table-list table"

DECIMAL = re.compile(r"^\d*\.?\d+$")
HEADER_UNIT = re.compile(r"\(([^)]+)\)")
WHITESPACE = re.compile(r"\s+")

# Field -> (header prefix, unit)
NUTRIENT_HEADERS = {
    "calories": ("열량", "kcal"),
    "natrium": ("나트륨", "mg"),
    "sugar": ("당류", "g"),
    "saturated_fat": ("포화지방", "g"),
    "protein": ("단백질", "g"),
    "caffeine": ("카페인", "mg"),
}
SERVING_SIZE_HEADER = "1회 제공량"

SELECTORS = SelectorConfig(
    product_containers='li:has(a[href*="detail"])',
    # Names come from the image alt text
    product_data=ProductDataSelectors(name="img", image="img", link='a[href*="detail"]'),
    nutrition=NUTRITION_TABLE,
)


def external_id_from_image(image_url: str) -> Optional[str]:
    """Image file name without extension ('.../GC_001.png' -> 'GC_001')"""
    if not image_url:
        return None
    stem = image_url.rstrip("/").split("/")[-1].split("?")[0]
    stem = re.sub(r"\.[^.]*$", "", stem)
    return stem or None


async def extract_gongcha_product(container, context: ExtractorContext) -> Optional[ExtractedProduct]:
    image = container.locator(SELECTORS.product_data.image).first
    name = (await get_attribute(image, "alt")).strip()
    if not name:
        return None

    image_url = await get_image_url(image, context.base_url)
    href = await get_attribute(container.locator(SELECTORS.product_data.link).first, "href")

    return ExtractedProduct(
        name=name,
        image_url=image_url,
        external_id=external_id_from_image(image_url),
        external_url=build_url(context.base_url, href) if href else None,
    )


def _row_mapping(row: List[str], headers: List[str]) -> Dict[str, str]:
    # Leading cells (size labels) span the first header; values start at the first number
    start = next((index for index, cell in enumerate(row) if DECIMAL.match(cell)), 0)
    return dict(zip(headers[1:], row[start:]))


def best_nutrition_row(rows: List[List[str]], headers: List[str]) -> Dict[str, str]:
    best: Dict[str, str] = {}
    best_score = 0
    for row in rows:
        if not row:
            continue
        mapping = _row_mapping(row, headers)
        score = sum(1 for value in mapping.values() if DECIMAL.match(value))
        if score > best_score:
            best, best_score = mapping, score
    return best


def _number(text: Optional[str]) -> Optional[float]:
    if not text or not DECIMAL.match(text.strip()):
        return None
    return float(text.strip())


def build_nutritions(row: Dict[str, str]) -> Optional[Nutritions]:
    data = {}
    for header, value in row.items():
        compact = header.replace(" ", "")
        number = _number(value)
        if number is None:
            continue

        if compact.startswith(SERVING_SIZE_HEADER.replace(" ", "")):
            unit_match = HEADER_UNIT.search(header)
            data["serving_size"] = number
            data["serving_size_unit"] = unit_match.group(1) if unit_match else "g"
            continue

        for field, (prefix, unit) in NUTRIENT_HEADERS.items():
            if compact.startswith(prefix):
                data[field] = number
                data[f"{field}_unit"] = unit
                break

    return Nutritions(**data) if data else None


async def extract_gongcha_nutrition(page, context: ExtractorContext) -> Optional[Nutritions]:
    table = page.locator(NUTRITION_TABLE).first
    if await table.count() == 0:
        return None

    headers = [WHITESPACE.sub(" ", await get_text(cell)) for cell in await table.locator("thead tr th").all()]
    rows = []
    for row in await table.locator("tbody tr").all():
        rows.append([await get_text(cell) for cell in await row.locator("td").all()])

    if not headers or not rows:
        return None
    return build_nutritions(best_nutrition_row(rows, headers))


async def extract_gongcha_categories(page, context: ExtractorContext) -> List[CategoryInfo]:
    return [
        CategoryInfo(name=name, url=f"{context.base_url}/brand/menu/product?category={code}", id=code)
        for code, name, _ in GONGCHA_CATEGORIES
    ]


gongcha_definition: CrawlerDefinition = define_crawler(
    CrawlerDefinition(
        config=SiteConfig(brand="gongcha", base_url=BASE_URL, start_url=START_URL),
        selectors=SELECTORS,
        strategy=CrawlerStrategy.LIST_DETAIL,
        options={
            "max_concurrency": 3,
            "max_requests_per_crawl": 150,
            "max_request_retries": 1,
            "request_handler_timeout_secs": 90,
            "launch_options": {
                "headless": True,
                "args": ["--no-sandbox", "--disable-setuid-sandbox", "--disable-web-security"],
            },
        },
        extract_product=extract_gongcha_product,
        extract_nutrition=extract_gongcha_nutrition,
        extract_categories=extract_gongcha_categories,
    )
)
