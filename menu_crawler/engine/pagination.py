"""
Bounded pagination drivers
"""

from typing import Optional

from menu_crawler.core.logging import log
from menu_crawler.engine.page import PageHandle

MAX_PAGINATION_CLICKS = 20
TEST_MODE_PAGINATION_CLICKS = 1
LOAD_MORE_SETTLE_MS = 1000
LOAD_TIMEOUT_MS = 15_000


def max_pagination_clicks(test_mode_enabled: bool) -> int:
    return TEST_MODE_PAGINATION_CLICKS if test_mode_enabled else MAX_PAGINATION_CLICKS


async def wait_for_load(page: PageHandle, timeout_ms: float = LOAD_TIMEOUT_MS) -> None:
    """Wait for DOM content; on timeout continue with whatever rendered"""
    try:
        await page.wait_for_load_state("domcontentloaded", timeout=timeout_ms)
    except Exception:
        log.warning(f"Page load timeout after {timeout_ms}ms, continuing anyway")


async def click_load_more(
    page: PageHandle,
    selector: Optional[str],
    max_clicks: int = MAX_PAGINATION_CLICKS,
    settle_ms: float = LOAD_MORE_SETTLE_MS,
) -> int:
    """
    Click a "load more" control until it disappears, a click fails or the
    bound is reached.

    Returns:
        Number of successful clicks
    """
    if not selector:
        return 0

    clicks = 0
    while clicks < max_clicks:
        button = page.locator(selector).first
        try:
            visible = await button.is_visible()
        except Exception:
            visible = False

        if not visible:
            break

        try:
            await button.click()
            await page.wait_for_timeout(settle_ms)
        except Exception as e:
            log.debug(f"Load more click failed: {e}")
            break

        clicks += 1
        log.info(f'Clicked "Load More" ({clicks})')

    return clicks


async def click_next_button(page: PageHandle, selector: Optional[str]) -> bool:
    """Advance exactly one page; False when the control is absent or disabled"""
    if not selector:
        return False

    button = page.locator(selector).first
    try:
        visible = await button.is_visible()
    except Exception:
        visible = False
    try:
        enabled = await button.is_enabled()
    except Exception:
        enabled = False

    if not (visible and enabled):
        return False

    try:
        await button.click()
    except Exception as e:
        log.debug(f"Next button click failed: {e}")
        return False

    await wait_for_load(page)
    return True
