from menu_crawler.engine.base import BaseCrawler, HandlerContext
from menu_crawler.engine.extraction import ExtractionPipeline, parse_price
from menu_crawler.engine.page import CrawlRequest, ElementHandle, PageHandle, RequestLabel, RunDriver, to_request
from menu_crawler.engine.pagination import click_load_more, click_next_button, wait_for_load
from menu_crawler.engine.primitives import build_url, get_attribute, get_image_url, get_text

__all__ = [
    "BaseCrawler",
    "HandlerContext",
    "ExtractionPipeline",
    "parse_price",
    "CrawlRequest",
    "ElementHandle",
    "PageHandle",
    "RequestLabel",
    "RunDriver",
    "to_request",
    "click_load_more",
    "click_next_button",
    "wait_for_load",
    "build_url",
    "get_attribute",
    "get_image_url",
    "get_text",
]
