from menu_crawler.core.config import Settings, get_settings
from menu_crawler.core.exceptions import (
    CrawlerError,
    CrawlerNotFoundError,
    CrawlRunError,
    DefinitionLoadError,
    UnknownStrategyError,
)
from menu_crawler.core.logging import log, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "CrawlerError",
    "CrawlerNotFoundError",
    "CrawlRunError",
    "DefinitionLoadError",
    "UnknownStrategyError",
    "log",
    "setup_logging",
]
