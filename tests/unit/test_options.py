"""
Test settings, test-mode profiles and run option resolution
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from menu_crawler.core.config import Settings, get_settings
from menu_crawler.models.options import (
    CrawlerOptions,
    LaunchOptions,
    TestModeConfig,
    resolve_crawler_options,
)


def test_settings_defaults():
    settings = Settings()

    assert settings.test_mode is False
    assert settings.max_products == 3
    assert settings.max_requests == 10
    assert settings.log_level == "INFO"
    assert settings.output_dir == Path("crawler-outputs")
    assert settings.sites_dir is None


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CRAWLER_TEST_MODE", "1")
    monkeypatch.setenv("CRAWLER_MAX_PRODUCTS", "7")
    monkeypatch.setenv("CRAWLER_OUTPUT_DIR", str(tmp_path))

    settings = get_settings()

    assert settings.test_mode is True
    assert settings.max_products == 7
    assert settings.output_dir == tmp_path
    assert get_settings() is settings


def test_test_mode_disabled_is_unbounded():
    assert TestModeConfig.from_settings(Settings()) == TestModeConfig()
    assert TestModeConfig().max_products is None


def test_test_mode_from_settings():
    config = TestModeConfig.from_settings(Settings(test_mode=True, max_products=5, max_requests=20))

    assert config.enabled is True
    assert config.max_products == 5
    assert config.max_requests == 20
    assert config.max_categories == 1


def test_test_mode_config_is_frozen():
    config = TestModeConfig(enabled=True)
    with pytest.raises(ValidationError):
        config.max_products = 1


def test_resolve_defaults():
    options = resolve_crawler_options()

    assert options == CrawlerOptions()
    assert options.max_concurrency == 3
    assert options.max_requests_per_crawl == 100
    assert options.max_request_retries == 2
    assert options.request_handler_timeout_secs == 60
    assert options.launch_options == LaunchOptions()
    assert options.launch_options.headless is True


def test_resolve_merges_overrides():
    options = resolve_crawler_options(
        {"max_request_retries": 0, "launch_options": {"headless": False, "args": []}}
    )

    assert options.max_request_retries == 0
    assert options.max_concurrency == 3
    assert options.launch_options.headless is False
    assert options.launch_options.args == []


def test_resolve_rejects_invalid_values():
    with pytest.raises(ValidationError):
        resolve_crawler_options({"max_concurrency": 0})


@pytest.mark.parametrize(
    "custom, expected",
    [
        ({}, (2, 10, 30)),
        ({"max_concurrency": 1, "max_requests_per_crawl": 4, "request_handler_timeout_secs": 10}, (1, 4, 10)),
        ({"max_concurrency": 8, "max_requests_per_crawl": 500, "request_handler_timeout_secs": 120}, (2, 10, 30)),
    ],
)
def test_test_mode_only_tightens(custom, expected, limited_mode):
    options = resolve_crawler_options(custom, limited_mode)

    assert (
        options.max_concurrency,
        options.max_requests_per_crawl,
        options.request_handler_timeout_secs,
    ) == expected


def test_test_mode_without_request_cap(full_mode):
    options = resolve_crawler_options({}, TestModeConfig(enabled=True))

    assert options.max_requests_per_crawl == 100
    assert options.max_concurrency == 2
    assert resolve_crawler_options({"max_concurrency": 9}, full_mode).max_concurrency == 9
