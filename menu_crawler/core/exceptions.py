"""
Custom exceptions for the crawler engine
"""

from typing import Any, Dict, List, Optional


class CrawlerError(Exception):
    """Base exception for crawler errors"""

    detail: str = "Crawler error"

    def __init__(self, detail: Optional[str] = None, **kwargs):
        super().__init__(detail or self.detail)
        self.detail = detail or self.detail
        # Store any additional context
        self.context = kwargs


class CrawlerNotFoundError(CrawlerError):
    """No crawler registered for a brand"""

    detail = "Crawler not found"


class UnknownStrategyError(CrawlerError):
    """Definition declares a strategy with no implementation"""

    detail = "Unknown crawler strategy"


class DefinitionLoadError(CrawlerError):
    """Site definition file could not be parsed or validated"""

    detail = "Invalid crawler definition"


class CrawlRunError(CrawlerError):
    """A brand's run stopped early; carries the records gathered before the failure"""

    detail = "Crawler run failed"

    @property
    def records(self) -> List[Dict[str, Any]]:
        return self.context.get("records", [])
