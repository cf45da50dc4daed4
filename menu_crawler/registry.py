"""
Crawler registry

Maps brand names to crawler factories and runs them one at a time or all
together. Each registry is an ordinary object; build one per process (or
per test).
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from menu_crawler.core.exceptions import CrawlerNotFoundError, CrawlRunError
from menu_crawler.core.logging import log
from menu_crawler.engine.base import BaseCrawler
from menu_crawler.engine.page import RunDriver
from menu_crawler.models.definition import CrawlerDefinition
from menu_crawler.models.options import TestModeConfig
from menu_crawler.strategies import create_crawler

CrawlerFactory = Callable[[], BaseCrawler]
DriverFactory = Callable[[str], Optional[RunDriver]]


@dataclass
class BrandRunResult:
    """Outcome of one brand's run"""

    brand: str
    records: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Registry:
    """Brand name -> crawler factory"""

    def __init__(self):
        self._factories: Dict[str, CrawlerFactory] = {}

    def register(self, brand: str, factory: CrawlerFactory) -> None:
        """Register a factory; a second registration for a brand replaces the first"""
        if brand in self._factories:
            log.warning(f"Crawler '{brand}' is already registered, overwriting...")
        self._factories[brand] = factory
        log.debug(f"Registered crawler: {brand}")

    def register_definition(self, definition: CrawlerDefinition, test_mode: Optional[TestModeConfig] = None) -> None:
        """Register a definition under its brand using strategy selection"""
        self.register(definition.brand, lambda: create_crawler(definition, test_mode=test_mode))

    def get(self, brand: str) -> Optional[BaseCrawler]:
        factory = self._factories.get(brand)
        if factory is None:
            log.error(f"Crawler '{brand}' not found in registry")
            return None
        return factory()

    def has(self, brand: str) -> bool:
        return brand in self._factories

    def list_brands(self) -> List[str]:
        return list(self._factories)

    async def run(self, brand: str, driver: Optional[RunDriver] = None) -> List[Dict[str, Any]]:
        """
        Run one brand's crawler.

        Raises:
            CrawlerNotFoundError: No crawler registered for the brand
            CrawlRunError: The crawl itself failed
        """
        crawler = self.get(brand)
        if crawler is None:
            raise CrawlerNotFoundError(f"Crawler '{brand}' not found", brand=brand, available=self.list_brands())
        return await crawler.run(driver)

    async def _run_isolated(self, brand: str, driver_factory: Optional[DriverFactory]) -> BrandRunResult:
        try:
            driver = driver_factory(brand) if driver_factory else None
            records = await self.run(brand, driver)
        except CrawlRunError as e:
            log.exception(f"Crawler '{brand}' failed: {e}")
            return BrandRunResult(brand=brand, records=e.records, error=str(e))
        except Exception as e:
            log.exception(f"Crawler '{brand}' failed: {e}")
            return BrandRunResult(brand=brand, error=str(e))
        return BrandRunResult(brand=brand, records=records)

    async def run_all(
        self, sequential: bool = False, driver_factory: Optional[DriverFactory] = None
    ) -> List[BrandRunResult]:
        """
        Run every registered crawler; a failing brand never stops the others.

        Args:
            sequential: Run brands one after another instead of concurrently
            driver_factory: Optional brand -> run driver hook

        Returns:
            One result per brand, in registration order
        """
        brands = self.list_brands()
        log.info(f"Running {len(brands)} crawlers...")

        if sequential:
            results = []
            for brand in brands:
                results.append(await self._run_isolated(brand, driver_factory))
            return results

        return list(await asyncio.gather(*(self._run_isolated(brand, driver_factory) for brand in brands)))
