"""
Test load-more and next-button drivers
"""

import pytest

from menu_crawler.engine.pagination import (
    MAX_PAGINATION_CLICKS,
    click_load_more,
    click_next_button,
    max_pagination_clicks,
)

LOAD_MORE_HTML = """
<ul id="menu"><li>1</li></ul>
<a class="more" href="#">더보기</a>
"""


def append_item(page, tag):
    menu = page.soup.select_one("#menu")
    item = page.soup.new_tag("li")
    item.string = str(len(menu.find_all("li")) + 1)
    menu.append(item)


def test_max_pagination_clicks():
    assert max_pagination_clicks(True) == 1
    assert max_pagination_clicks(False) == MAX_PAGINATION_CLICKS == 20


@pytest.mark.asyncio
async def test_load_more_stops_at_bound(make_page):
    """An always-visible button is clicked exactly max_clicks times"""
    page = make_page(LOAD_MORE_HTML, on_click=append_item)

    clicks = await click_load_more(page, "a.more", max_clicks=20)

    assert clicks == 20
    assert page.clicks == 20
    assert len(page.soup.select("#menu li")) == 21


@pytest.mark.asyncio
async def test_load_more_test_mode_bound(make_page):
    page = make_page(LOAD_MORE_HTML, on_click=append_item)
    assert await click_load_more(page, "a.more", max_clicks=max_pagination_clicks(True)) == 1
    assert page.clicks == 1


@pytest.mark.asyncio
async def test_load_more_stops_when_button_hidden(make_page):
    def reveal_then_hide(page, tag):
        append_item(page, tag)
        if page.clicks >= 3:
            tag["style"] = "display: none"

    page = make_page(LOAD_MORE_HTML, on_click=reveal_then_hide)

    assert await click_load_more(page, "a.more") == 3


@pytest.mark.asyncio
async def test_load_more_stops_on_click_failure(make_page):
    def broken(page, tag):
        raise RuntimeError("element detached")

    page = make_page(LOAD_MORE_HTML, on_click=broken)

    assert await click_load_more(page, "a.more") == 0


@pytest.mark.asyncio
async def test_load_more_without_selector_is_noop(make_page):
    page = make_page(LOAD_MORE_HTML, on_click=append_item)
    assert await click_load_more(page, None) == 0
    assert page.clicks == 0


@pytest.mark.asyncio
async def test_load_more_absent_button(make_page):
    page = make_page("<ul id='menu'></ul>")
    assert await click_load_more(page, "a.more") == 0


@pytest.mark.asyncio
async def test_next_button_clicks_once(make_page):
    page = make_page("<a class='next'>다음</a>")
    assert await click_next_button(page, "a.next") is True
    assert page.clicks == 1


@pytest.mark.asyncio
async def test_next_button_disabled(make_page):
    page = make_page("<button class='next' disabled>다음</button>")
    assert await click_next_button(page, "button.next") is False
    assert page.clicks == 0


@pytest.mark.asyncio
async def test_next_button_hidden_or_missing(make_page):
    page = make_page("<a class='next' hidden>다음</a>")
    assert await click_next_button(page, "a.next") is False
    assert await click_next_button(page, "a.other") is False
    assert await click_next_button(page, None) is False
