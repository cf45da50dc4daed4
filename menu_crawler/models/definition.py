"""
Crawler definition schemas

A definition is the declarative description of one brand's menu site:
where to start, which selectors locate products and categories, which
crawling strategy and pagination style apply, and optional override hooks
for the parts of a site the default pipeline cannot read.
"""

import re
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CrawlerStrategy(str, Enum):
    """Crawling shape of a site"""

    INLINE_DATA = "inline-data"
    LIST_DETAIL = "list-detail"
    MODAL = "modal"


class PaginationType(str, Enum):
    """How a listing page reveals more products"""

    NONE = "none"
    LOAD_MORE = "load-more"
    PAGE_NUMBERS = "page-numbers"
    NEXT_BUTTON = "next-button"


class SiteConfig(BaseModel):
    """Where a brand's menu lives"""

    model_config = ConfigDict(frozen=True)

    brand: str = Field(..., min_length=1)
    base_url: str
    start_url: str
    category_urls: List[str] = Field(default_factory=list)
    # Detail page URL prefix; the product id is appended
    product_url_template: Optional[str] = None


class ProductDataSelectors(BaseModel):
    """Field selectors, relative to a product container"""

    model_config = ConfigDict(frozen=True)

    name: str
    name_en: Optional[str] = None
    description: Optional[str] = None
    image: str = "img"
    price: Optional[str] = None
    link: Optional[str] = None


class PaginationSelectors(BaseModel):
    model_config = ConfigDict(frozen=True)

    load_more: Optional[str] = None
    next_button: Optional[str] = None
    page_links: Optional[str] = None


class SelectorConfig(BaseModel):
    """CSS selectors used by the default extraction pipeline"""

    model_config = ConfigDict(frozen=True)

    product_containers: Union[str, List[str]]
    product_data: ProductDataSelectors
    nutrition: Optional[Union[str, List[str]]] = None
    category_links: Optional[str] = None
    pagination: PaginationSelectors = Field(default_factory=PaginationSelectors)

    def container_selectors(self) -> List[str]:
        if isinstance(self.product_containers, str):
            return [self.product_containers]
        return list(self.product_containers)


class ExtractorContext(BaseModel):
    """Per-page context handed to extractors"""

    model_config = ConfigDict(frozen=True)

    base_url: str
    category_name: Optional[str] = None
    page_url: Optional[str] = None


# Override hooks. Each receives (element or page, ExtractorContext):
#   extract_product(container, ctx)   -> ExtractedProduct | dict | None
#   extract_nutrition(element, ctx)   -> Nutritions | None
#   extract_categories(page, ctx)     -> list[CategoryInfo | dict]
# custom_handler(HandlerContext) replaces request routing entirely.
ExtractorHook = Callable[..., Awaitable[Any]]


class CrawlerDefinition(BaseModel):
    """Immutable configuration bundle for one brand"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    config: SiteConfig
    selectors: SelectorConfig
    strategy: CrawlerStrategy
    pagination: PaginationType = PaginationType.NONE
    patterns: Dict[str, re.Pattern] = Field(default_factory=dict)
    # Partial CrawlerOptions overrides
    options: Dict[str, Any] = Field(default_factory=dict)

    extract_product: Optional[ExtractorHook] = None
    extract_nutrition: Optional[ExtractorHook] = None
    extract_categories: Optional[ExtractorHook] = None
    custom_handler: Optional[ExtractorHook] = None

    @property
    def brand(self) -> str:
        return self.config.brand


def define_crawler(definition: CrawlerDefinition) -> CrawlerDefinition:
    """Declare a crawler definition (passthrough kept for shape discipline)"""
    return definition
