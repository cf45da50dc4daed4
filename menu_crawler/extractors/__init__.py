from menu_crawler.extractors.nutrition import (
    DEFAULT_KOREAN_LABELS,
    create_nutrition_extractor,
    extract_from_dl_elements,
    extract_from_items,
    extract_from_table,
    extract_nutrition_from_text,
    has_nutrition_keywords,
    map_label_to_field,
    parse_numeric_value,
    parse_serving_size,
)

__all__ = [
    "DEFAULT_KOREAN_LABELS",
    "create_nutrition_extractor",
    "extract_from_dl_elements",
    "extract_from_items",
    "extract_from_table",
    "extract_nutrition_from_text",
    "has_nutrition_keywords",
    "map_label_to_field",
    "parse_numeric_value",
    "parse_serving_size",
]
