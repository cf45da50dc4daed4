"""
Test the crawler registry
"""

import pytest

from menu_crawler.core.exceptions import CrawlerNotFoundError
from menu_crawler.registry import BrandRunResult, Registry
from menu_crawler.strategies import InlineDataCrawler

BASE = "https://cafe.example.com"
MENU = '<ul><li class="item"><p class="title">Latte</p></li><li class="item"><p class="title">Tea</p></li></ul>'


@pytest.fixture
def registry(make_definition, full_mode):
    registry = Registry()
    registry.register_definition(make_definition(), test_mode=full_mode)
    return registry


def test_register_and_lookup(registry):
    assert registry.has("testcafe")
    assert not registry.has("missing")
    assert registry.list_brands() == ["testcafe"]
    assert isinstance(registry.get("testcafe"), InlineDataCrawler)


def test_get_returns_fresh_crawlers(registry):
    assert registry.get("testcafe") is not registry.get("testcafe")


def test_get_missing_logs_error(registry, log_messages):
    assert registry.get("missing") is None
    assert "Crawler 'missing' not found in registry" in log_messages


def test_duplicate_registration_replaces(registry, make_definition, log_messages):
    marker = []

    def factory():
        marker.append(True)
        return InlineDataCrawler(make_definition())

    registry.register("testcafe", factory)
    registry.get("testcafe")

    assert marker == [True]
    assert registry.list_brands() == ["testcafe"]
    assert any("already registered, overwriting" in message for message in log_messages)


@pytest.mark.asyncio
async def test_run_unknown_brand(registry):
    with pytest.raises(CrawlerNotFoundError) as exc_info:
        await registry.run("missing")

    assert exc_info.value.context == {"brand": "missing", "available": ["testcafe"]}


@pytest.mark.asyncio
async def test_run_brand(registry, make_driver):
    records = await registry.run("testcafe", make_driver({f"{BASE}/menu": MENU}))
    assert [record["name"] for record in records] == ["Latte", "Tea"]


def three_brand_registry(make_definition, full_mode):
    registry = Registry()
    for brand in ("alpha", "broken", "gamma"):
        registry.register_definition(make_definition(config={"brand": brand}), test_mode=full_mode)

    def explode():
        raise RuntimeError("browser crashed")

    registry.register("broken", explode)
    return registry


@pytest.mark.asyncio
@pytest.mark.parametrize("sequential", [True, False])
async def test_run_all_isolates_failures(sequential, make_definition, make_driver, full_mode):
    registry = three_brand_registry(make_definition, full_mode)

    results = await registry.run_all(
        sequential=sequential, driver_factory=lambda brand: make_driver({f"{BASE}/menu": MENU})
    )

    assert [result.brand for result in results] == ["alpha", "broken", "gamma"]
    assert [result.ok for result in results] == [True, False, True]
    assert results[1] == BrandRunResult(brand="broken", error="browser crashed")
    assert [record["externalId"] for record in results[2].records] == ["gamma_All Items_Latte", "gamma_All Items_Tea"]


@pytest.mark.asyncio
async def test_run_all_driver_failure(make_definition, make_driver, full_mode):
    class FailingDriver:
        async def run(self, requests, handler):
            raise ConnectionError("browser launch failed")

        def collect_all(self):
            return []

    registry = Registry()
    registry.register_definition(make_definition(), test_mode=full_mode)

    [result] = await registry.run_all(driver_factory=lambda brand: FailingDriver())

    assert not result.ok
    assert result.records == []
    assert result.error == "browser launch failed"


@pytest.mark.asyncio
@pytest.mark.parametrize("sequential", [True, False])
async def test_run_all_driver_factory_failure(sequential, make_definition, make_driver, full_mode):
    registry = Registry()
    for brand in ("alpha", "beta", "gamma"):
        registry.register_definition(make_definition(config={"brand": brand}), test_mode=full_mode)

    def driver_factory(brand):
        if brand == "beta":
            raise RuntimeError("browser launch failed")
        return make_driver({f"{BASE}/menu": MENU})

    results = await registry.run_all(sequential=sequential, driver_factory=driver_factory)

    assert [result.ok for result in results] == [True, False, True]
    assert results[1] == BrandRunResult(brand="beta", error="browser launch failed")
    assert len(results[2].records) == 2


@pytest.mark.asyncio
async def test_run_all_keeps_records_gathered_before_failure(make_definition, full_mode):
    class CrashingDriver:
        def __init__(self):
            self.records = []

        async def run(self, requests, handler):
            self.records.append({"name": "Latte"})
            raise ConnectionError("browser crashed")

        def collect_all(self):
            return list(self.records)

    registry = Registry()
    registry.register_definition(make_definition(), test_mode=full_mode)

    [result] = await registry.run_all(driver_factory=lambda brand: CrashingDriver())

    assert not result.ok
    assert result.error == "browser crashed"
    assert result.records == [{"name": "Latte"}]
