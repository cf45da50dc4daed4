"""
Nutrition extraction helpers

Building blocks for a definition's extract_nutrition hook: a regex grammar
for free text plus readers for <dl>, <table> and label/value list layouts.
Every reader returns None instead of raising.
"""

import re
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Sequence

from menu_crawler.core.logging import log
from menu_crawler.engine.page import ElementHandle
from menu_crawler.engine.primitives import get_text
from menu_crawler.models.definition import ExtractorContext
from menu_crawler.models.product import Nutritions

NutritionMethod = Literal["text", "dl", "table", "items", "custom"]
NutritionExtractor = Callable[[Any, ExtractorContext], Awaitable[Optional[Nutritions]]]

# Label keywords per Nutritions field. Compound labels (포화지방) come before
# the labels they contain (지방); the first match wins.
DEFAULT_KOREAN_LABELS: Dict[str, List[str]] = {
    "calories": ["열량", "칼로리", "kcal"],
    "saturated_fat": ["포화지방", "포화 지방"],
    "trans_fat": ["트랜스지방", "트랜스 지방"],
    "protein": ["단백질"],
    "fat": ["지방"],
    "carbohydrates": ["탄수화물"],
    "sugar": ["당류", "당"],
    "natrium": ["나트륨"],
    "cholesterol": ["콜레스테롤"],
    "caffeine": ["카페인"],
    "serving_size": ["1회 제공량", "용량", "내용량"],
}

FIELD_UNITS: Dict[str, str] = {
    "serving_size": "ml",
    "calories": "kcal",
    "carbohydrates": "g",
    "sugar": "g",
    "protein": "g",
    "fat": "g",
    "trans_fat": "g",
    "saturated_fat": "g",
    "natrium": "mg",
    "cholesterol": "mg",
    "caffeine": "mg",
}

NUTRITION_KEYWORDS = ("칼로리", "kcal", "단백질", "지방", "탄수화물", "당류", "나트륨", "카페인", "영양", "성분")

_AMOUNT = r"(\d+(?:\.\d+)?)(?:/\d+(?:\.\d+)?)?"
TEXT_PATTERNS: Dict[str, re.Pattern] = {
    "serving_size": re.compile(r"(\d+)\s*(ml|g|gram)", re.IGNORECASE),
    "calories": re.compile(r"(\d+(?:\.\d+)?)\s*(kcal|칼로리|열량)", re.IGNORECASE),
    "protein": re.compile(rf"단백질.*?{_AMOUNT}\s*(g|gram)?", re.IGNORECASE),
    "fat": re.compile(rf"지방.*?{_AMOUNT}\s*(g|gram)?", re.IGNORECASE),
    "carbohydrates": re.compile(rf"탄수화물.*?{_AMOUNT}\s*(g|gram)?", re.IGNORECASE),
    "sugar": re.compile(rf"당류.*?{_AMOUNT}\s*(g|gram|%)?", re.IGNORECASE),
    "natrium": re.compile(rf"나트륨.*?{_AMOUNT}\s*(mg|milligram)?", re.IGNORECASE),
    "caffeine": re.compile(rf"카페인.*?{_AMOUNT}\s*(mg|milligram)?", re.IGNORECASE),
}

# A text block only counts as nutrition when one of these was found
REQUIRED_TEXT_FIELDS = ("serving_size", "calories", "protein", "fat")

LEADING_NUMBER = re.compile(r"^[+-]?\d+(?:\.\d+)?")
SERVING_SIZE = re.compile(r"(\d+(?:\.\d+)?)\s*(ml|oz|g)\b", re.IGNORECASE)
ML_PER_OZ = 29.5735


def parse_numeric_value(text: Optional[str]) -> Optional[float]:
    """Leading number of a cell ('12.5g' -> 12.5); None for blanks and '-'"""
    if not text:
        return None
    cleaned = text.strip().replace(",", "")
    if not cleaned or cleaned == "-":
        return None
    match = LEADING_NUMBER.match(cleaned)
    return float(match.group(0)) if match else None


def parse_serving_size(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Serving size in ml or g; ounces are converted to ml"""
    if not text:
        return None
    match = SERVING_SIZE.search(text)
    if not match:
        return None

    value = float(match.group(1))
    unit = match.group(2).lower()
    if unit == "oz":
        return {"serving_size": float(round(value * ML_PER_OZ)), "serving_size_unit": "ml"}
    return {"serving_size": value, "serving_size_unit": unit}


def has_nutrition_keywords(text: str) -> bool:
    return any(keyword in text for keyword in NUTRITION_KEYWORDS)


def extract_nutrition_from_text(text: str) -> Optional[Nutritions]:
    """Apply the regex grammar to a free-text nutrition block"""
    values: Dict[str, Any] = {}
    matches: Dict[str, re.Match] = {}

    for field, pattern in TEXT_PATTERNS.items():
        match = pattern.search(text)
        if match:
            matches[field] = match
            values[field] = float(match.group(1))

    if not any(field in values for field in REQUIRED_TEXT_FIELDS):
        return None

    data: Dict[str, Any] = {}
    for field, value in values.items():
        data[field] = value
        data[f"{field}_unit"] = FIELD_UNITS[field]

    if "serving_size" in matches:
        data["serving_size_unit"] = "ml" if "ml" in matches["serving_size"].group(2).lower() else "g"

    return Nutritions(**data)


def map_label_to_field(label: str, label_mapping: Optional[Dict[str, Sequence[str]]] = None) -> Optional[str]:
    normalized = label.strip().lower()
    for field, keywords in (label_mapping or DEFAULT_KOREAN_LABELS).items():
        if any(keyword.lower() in normalized for keyword in keywords):
            return field
    return None


def _assign(data: Dict[str, Any], label: str, raw_value: str, label_mapping: Optional[Dict[str, Sequence[str]]]) -> None:
    field = map_label_to_field(label, label_mapping)
    if not field or field not in FIELD_UNITS:
        return
    value = parse_numeric_value(raw_value)
    if value is None:
        return
    data[field] = value
    data[f"{field}_unit"] = FIELD_UNITS[field]


def _to_nutritions(data: Dict[str, Any]) -> Optional[Nutritions]:
    return Nutritions(**data) if data else None


async def extract_from_dl_elements(
    container: ElementHandle,
    dl_selector: str = "dl",
    label_mapping: Optional[Dict[str, Sequence[str]]] = None,
) -> Optional[Nutritions]:
    """Read <dl><dt>label</dt><dd>value</dd></dl> pairs"""
    try:
        dl_elements = container.locator(dl_selector)
        count = await dl_elements.count()

        data: Dict[str, Any] = {}
        for index in range(count):
            dl = dl_elements.nth(index)
            label = await get_text(dl.locator("dt").first)
            value = await get_text(dl.locator("dd").first)
            if label and value:
                _assign(data, label, value, label_mapping)

        return _to_nutritions(data)
    except Exception as e:
        log.debug(f"Failed to extract nutrition from DL elements: {e}")
        return None


async def extract_from_table(
    container: ElementHandle,
    table_selector: str = "table",
    header_row: int = 0,
    data_row: int = 1,
    label_mapping: Optional[Dict[str, Sequence[str]]] = None,
) -> Optional[Nutritions]:
    """Read a header row of labels against one data row of values"""
    try:
        table = container.locator(table_selector).first
        rows = await table.locator("tr").all()
        if len(rows) <= max(header_row, data_row):
            return None

        headers = [await get_text(cell) for cell in await rows[header_row].locator("th, td").all()]
        values = [await get_text(cell) for cell in await rows[data_row].locator("td").all()]

        data: Dict[str, Any] = {}
        for label, value in zip(headers, values):
            _assign(data, label, value, label_mapping)

        return _to_nutritions(data)
    except Exception as e:
        log.debug(f"Failed to extract nutrition from table: {e}")
        return None


async def extract_from_items(
    container: ElementHandle,
    item_selector: str = "li",
    label_selector: str = "div:first-child",
    value_selector: str = "div:last-child",
    serving_size_selector: Optional[str] = None,
    label_mapping: Optional[Dict[str, Sequence[str]]] = None,
) -> Optional[Nutritions]:
    """Read list items that each hold one label and one value element"""
    try:
        data: Dict[str, Any] = {}

        if serving_size_selector:
            serving = parse_serving_size(await get_text(container.locator(serving_size_selector).first))
            if serving:
                data.update(serving)

        for item in await container.locator(item_selector).all():
            label = await get_text(item.locator(label_selector).first)
            value = await get_text(item.locator(value_selector).first)
            if label and value:
                _assign(data, label, value, label_mapping)

        return _to_nutritions(data)
    except Exception as e:
        log.debug(f"Failed to extract nutrition from items: {e}")
        return None


def create_nutrition_extractor(
    method: NutritionMethod,
    selector: Optional[str] = None,
    label_mapping: Optional[Dict[str, Sequence[str]]] = None,
    custom_extractor: Optional[NutritionExtractor] = None,
    **reader_options: Any,
) -> NutritionExtractor:
    """
    Build an extract_nutrition hook.

    Args:
        method: Reader to use ('text', 'dl', 'table', 'items' or 'custom')
        selector: Nutrition container, relative to the product element or page
        label_mapping: Field -> label keywords; Korean labels by default
        custom_extractor: Hook used as-is when method is 'custom'
        **reader_options: Passed through to the structured reader

    Returns:
        Async callable (element, context) -> Nutritions or None
    """

    async def extract(element: Any, context: ExtractorContext) -> Optional[Nutritions]:
        try:
            if method == "custom":
                return await custom_extractor(element, context) if custom_extractor else None

            if selector:
                container = element.locator(selector).first
            elif hasattr(element, "count"):
                container = element
            else:
                container = element.locator("body").first

            if await container.count() == 0:
                return None

            if method == "text":
                text = await get_text(container)
                return extract_nutrition_from_text(text) if text and has_nutrition_keywords(text) else None
            if method == "dl":
                return await extract_from_dl_elements(container, label_mapping=label_mapping, **reader_options)
            if method == "table":
                return await extract_from_table(container, label_mapping=label_mapping, **reader_options)
            if method == "items":
                return await extract_from_items(container, label_mapping=label_mapping, **reader_options)
            return None
        except Exception as e:
            log.debug(f"Nutrition extraction failed: {e}")
            return None

    return extract
