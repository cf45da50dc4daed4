"""
Built-in site definitions
"""

from pathlib import Path
from typing import List, Optional

from menu_crawler.core.config import Settings, get_settings
from menu_crawler.loader import load_definition_file, load_definitions
from menu_crawler.models.definition import CrawlerDefinition
from menu_crawler.models.options import TestModeConfig
from menu_crawler.registry import Registry
from menu_crawler.sites.ediya import ediya_definition
from menu_crawler.sites.gongcha import gongcha_definition

DEFINITIONS_DIR = Path(__file__).parent / "definitions"


def builtin_definitions() -> List[CrawlerDefinition]:
    return [
        load_definition_file(DEFINITIONS_DIR / "paik.yaml"),
        ediya_definition,
        gongcha_definition,
    ]


def build_registry(settings: Optional[Settings] = None) -> Registry:
    """Registry with every built-in brand plus definitions from CRAWLER_SITES_DIR"""
    settings = settings or get_settings()
    test_mode = TestModeConfig.from_settings(settings)

    registry = Registry()
    for definition in builtin_definitions():
        registry.register_definition(definition, test_mode=test_mode)

    if settings.sites_dir:
        for definition in load_definitions(settings.sites_dir):
            registry.register_definition(definition, test_mode=test_mode)

    return registry


__all__ = ["DEFINITIONS_DIR", "build_registry", "builtin_definitions", "ediya_definition", "gongcha_definition"]
