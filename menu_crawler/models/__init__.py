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
from menu_crawler.models.options import CrawlerOptions, LaunchOptions, TestModeConfig, resolve_crawler_options
from menu_crawler.models.product import (
    DEFAULT_CATEGORY,
    DEFAULT_EXTERNAL_CATEGORY,
    CategoryInfo,
    ExtractedProduct,
    Nutritions,
    Product,
)

__all__ = [
    "CrawlerDefinition",
    "CrawlerStrategy",
    "ExtractorContext",
    "PaginationSelectors",
    "PaginationType",
    "ProductDataSelectors",
    "SelectorConfig",
    "SiteConfig",
    "define_crawler",
    "CrawlerOptions",
    "LaunchOptions",
    "TestModeConfig",
    "resolve_crawler_options",
    "DEFAULT_CATEGORY",
    "DEFAULT_EXTERNAL_CATEGORY",
    "CategoryInfo",
    "ExtractedProduct",
    "Nutritions",
    "Product",
]
