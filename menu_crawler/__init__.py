"""
menu-crawler - definition-driven cafe menu crawlers
"""

from menu_crawler.engine import BaseCrawler
from menu_crawler.models import CrawlerDefinition, Product, define_crawler
from menu_crawler.registry import Registry
from menu_crawler.strategies import InlineDataCrawler, ListDetailCrawler, create_crawler

__version__ = "0.1.0"

__all__ = [
    "BaseCrawler",
    "CrawlerDefinition",
    "InlineDataCrawler",
    "ListDetailCrawler",
    "Product",
    "Registry",
    "create_crawler",
    "define_crawler",
]
