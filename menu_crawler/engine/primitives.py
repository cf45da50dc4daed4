"""
Defensive single-field readers

Each reader takes a single-element locator and a fallback and never raises:
a missing node, detached frame or timeout degrades to the fallback.
"""

from menu_crawler.core.logging import log
from menu_crawler.engine.page import ElementHandle


def build_url(base_url: str, path: str) -> str:
    """Resolve a site path against the base URL"""
    if path.startswith("http"):
        return path

    # Exactly one slash between base and path
    base = base_url.rstrip("/")
    if path.startswith("/"):
        return f"{base}/{path.lstrip('/')}"
    return f"{base}/{path}"


async def get_text(locator: ElementHandle, fallback: str = "") -> str:
    """Stripped text content, or fallback"""
    try:
        text = await locator.text_content()
    except Exception as e:
        log.debug(f"Text read failed, using fallback: {e}")
        return fallback
    return (text or "").strip() or fallback


async def get_attribute(locator: ElementHandle, name: str, fallback: str = "") -> str:
    """Attribute value, or fallback"""
    try:
        value = await locator.get_attribute(name)
    except Exception as e:
        log.debug(f"Attribute '{name}' read failed, using fallback: {e}")
        return fallback
    return value or fallback


async def get_image_url(locator: ElementHandle, base_url: str, fallback: str = "") -> str:
    """Image src resolved against the base URL"""
    src = await get_attribute(locator, "src")
    return build_url(base_url, src) if src else fallback
