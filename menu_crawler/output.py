"""
JSON output for crawl results
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from menu_crawler.core.logging import log


def output_filename(brand: str, day: Optional[date] = None) -> str:
    return f"{brand}-products-{(day or date.today()).isoformat()}.json"


def write_products_json(
    products: List[Dict[str, Any]], brand: str, output_dir: Union[str, Path], day: Optional[date] = None
) -> Optional[Path]:
    """
    Write a brand's records to <output_dir>/<brand>-products-<date>.json

    Returns:
        Path written, or None when there was nothing to write
    """
    if not products:
        log.warning(f"No products extracted for {brand}")
        return None

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    path = output_dir / output_filename(brand, day)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(products, f, ensure_ascii=False, indent=2)

    log.info(f"Saved {len(products)} products to {path.name}")
    return path
