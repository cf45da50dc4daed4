"""
Run options and test-mode limits
"""

from typing import Any, ClassVar, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from menu_crawler.core.config import Settings, get_settings

# Test mode never crawls more than one category
TEST_MODE_MAX_CATEGORIES = 1

TEST_MODE_MAX_CONCURRENCY = 2
TEST_MODE_HANDLER_TIMEOUT_SECS = 30


class LaunchOptions(BaseModel):
    headless: bool = True
    args: List[str] = Field(default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"])


class CrawlerOptions(BaseModel):
    """Tunables handed to the run driver"""

    max_concurrency: int = Field(default=3, ge=1)
    max_requests_per_crawl: int = Field(default=100, ge=1)
    max_request_retries: int = Field(default=2, ge=0)
    request_handler_timeout_secs: float = Field(default=60, gt=0)
    launch_options: LaunchOptions = Field(default_factory=LaunchOptions)


class TestModeConfig(BaseModel):
    """Reduced-scope run profile; None means unbounded"""

    __test__: ClassVar[bool] = False

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    max_products: Optional[int] = None
    max_requests: Optional[int] = None
    max_categories: Optional[int] = None

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TestModeConfig":
        settings = settings or get_settings()
        if not settings.test_mode:
            return cls()
        return cls(
            enabled=True,
            max_products=settings.max_products,
            max_requests=settings.max_requests,
            max_categories=TEST_MODE_MAX_CATEGORIES,
        )


def resolve_crawler_options(
    custom: Optional[Mapping[str, Any]] = None, test_mode: Optional[TestModeConfig] = None
) -> CrawlerOptions:
    """Merge definition overrides onto defaults; test mode only tightens"""
    merged: Dict[str, Any] = CrawlerOptions().model_dump()
    merged.update(custom or {})
    options = CrawlerOptions.model_validate(merged)

    if not (test_mode and test_mode.enabled):
        return options

    max_requests = options.max_requests_per_crawl
    if test_mode.max_requests is not None:
        max_requests = min(max_requests, test_mode.max_requests)

    return options.model_copy(
        update={
            "max_concurrency": min(options.max_concurrency, TEST_MODE_MAX_CONCURRENCY),
            "max_requests_per_crawl": max_requests,
            "request_handler_timeout_secs": min(
                options.request_handler_timeout_secs, TEST_MODE_HANDLER_TIMEOUT_SECS
            ),
        }
    )
