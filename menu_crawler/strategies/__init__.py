"""
Crawling strategies and strategy selection
"""

from typing import Dict, Optional, Type

from menu_crawler.core.exceptions import UnknownStrategyError
from menu_crawler.engine.base import BaseCrawler
from menu_crawler.models.definition import CrawlerDefinition, CrawlerStrategy
from menu_crawler.models.options import TestModeConfig
from menu_crawler.strategies.inline_data import InlineDataCrawler
from menu_crawler.strategies.list_detail import ListDetailCrawler

# Modal sites render detail views over the listing, so they crawl inline
STRATEGY_CRAWLERS: Dict[CrawlerStrategy, Type[BaseCrawler]] = {
    CrawlerStrategy.INLINE_DATA: InlineDataCrawler,
    CrawlerStrategy.MODAL: InlineDataCrawler,
    CrawlerStrategy.LIST_DETAIL: ListDetailCrawler,
}


def create_crawler(definition: CrawlerDefinition, test_mode: Optional[TestModeConfig] = None) -> BaseCrawler:
    """Instantiate the crawler class for a definition's strategy"""
    crawler_class = STRATEGY_CRAWLERS.get(definition.strategy)
    if crawler_class is None:
        raise UnknownStrategyError(
            f"No crawler for strategy '{definition.strategy}'", brand=definition.brand, strategy=definition.strategy
        )
    return crawler_class(definition, test_mode=test_mode)


__all__ = [
    "STRATEGY_CRAWLERS",
    "InlineDataCrawler",
    "ListDetailCrawler",
    "create_crawler",
]
