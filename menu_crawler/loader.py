"""
Crawler definition loader
Reads YAML site definitions so simple sites need no Python at all
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError

from menu_crawler.core.exceptions import DefinitionLoadError
from menu_crawler.core.logging import log
from menu_crawler.extractors.nutrition import create_nutrition_extractor
from menu_crawler.models.definition import CrawlerDefinition

DEFINITION_SUFFIXES = (".yaml", ".yml")


def _compile_patterns(raw: Dict[str, str], path: Path) -> Dict[str, re.Pattern]:
    patterns = {}
    for name, expression in (raw or {}).items():
        try:
            patterns[name] = re.compile(expression, re.IGNORECASE)
        except re.error as e:
            raise DefinitionLoadError(f"Invalid pattern '{name}' in {path}: {e}", path=str(path)) from e
    return patterns


def parse_definition(data: Dict[str, Any], path: Union[str, Path] = "<memory>") -> CrawlerDefinition:
    """Validate a raw definition mapping"""
    path = Path(path)
    if not isinstance(data, dict):
        raise DefinitionLoadError(f"Definition must be a mapping: {path}", path=str(path))

    data = dict(data)
    nutrition = data.pop("nutrition_extractor", None)
    data["patterns"] = _compile_patterns(data.get("patterns"), path)

    if nutrition:
        try:
            data["extract_nutrition"] = create_nutrition_extractor(**nutrition)
        except TypeError as e:
            raise DefinitionLoadError(f"Invalid nutrition_extractor in {path}: {e}", path=str(path)) from e

    try:
        return CrawlerDefinition.model_validate(data)
    except ValidationError as e:
        raise DefinitionLoadError(f"Invalid definition {path}: {e}", path=str(path)) from e


def load_definition_file(path: Union[str, Path]) -> CrawlerDefinition:
    """
    Load one YAML site definition

    Raises:
        DefinitionLoadError: File is unreadable, not YAML or fails validation
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise DefinitionLoadError(f"Cannot read definition {path}: {e}", path=str(path)) from e

    definition = parse_definition(data, path)
    log.debug(f"Loaded definition for {definition.brand} from {path}")
    return definition


def load_definitions(directory: Union[str, Path]) -> List[CrawlerDefinition]:
    """Load every definition in a directory, skipping invalid files"""
    directory = Path(directory)
    if not directory.is_dir():
        log.warning(f"Definitions directory not found: {directory}")
        return []

    definitions = []
    for path in sorted(directory.iterdir()):
        if path.suffix not in DEFINITION_SUFFIXES:
            continue
        try:
            definitions.append(load_definition_file(path))
        except DefinitionLoadError as e:
            log.error(f"Skipping {path.name}: {e.detail}")

    log.info(f"Loaded {len(definitions)} definitions from {directory}")
    return definitions
