from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from elementquery.core.by import By
from elementquery.core.errors import ProtocolError
from elementquery.drivers.playwright import PlaywrightDriver, resolve_selector


@pytest.mark.parametrize(
    "by,expected",
    [
        (By.css("div.item > a"), "div.item > a"),
        (By.tag("li"), "li"),
        (By.xpath("//a[@href]"), "xpath=//a[@href]"),
        (By.id("searchInput"), '[id="searchInput"]'),
        (By.name("q"), '[name="q"]'),
        (By.class_name("btn"), '[class~="btn"]'),
        (By.link_text("Main page"), "xpath=//a[normalize-space(.)='Main page']"),
        (By.partial_link_text("Main"), "xpath=//a[contains(normalize-space(.), 'Main')]"),
        (By.text("Log in"), "text=Log in"),
    ],
)
def test_resolve_selector(by, expected):
    assert resolve_selector(by) == expected


def test_resolve_selector_escapes_quotes():
    assert resolve_selector(By.id('a"b')) == '[id="a\\"b"]'
    assert resolve_selector(By.link_text("it's \"here\"")) == (
        "xpath=//a[normalize-space(.)=concat('it', \"'\", 's \"here\"')]"
    )


@pytest.mark.asyncio
async def test_find_elements_on_page_and_scope():
    h1, h2 = MagicMock(), MagicMock()
    page = MagicMock()
    page.query_selector_all = AsyncMock(return_value=[h1, h2])
    scope = MagicMock()
    scope.query_selector_all = AsyncMock(return_value=[h2])
    drv = PlaywrightDriver(page)

    assert await drv.find_elements(By.id("searchInput")) == [h1, h2]
    page.query_selector_all.assert_awaited_once_with('[id="searchInput"]')
    assert await drv.find_elements(By.css("a"), scope) == [h2]
    scope.query_selector_all.assert_awaited_once_with("a")


@pytest.mark.asyncio
async def test_find_element_returns_none_when_missing():
    page = MagicMock()
    page.query_selector = AsyncMock(return_value=None)
    assert await PlaywrightDriver(page).find_element(By.css("#nope")) is None


@pytest.mark.asyncio
async def test_client_errors_become_protocol_errors():
    page = MagicMock()
    page.query_selector_all = AsyncMock(side_effect=PlaywrightError("Target closed"))

    with pytest.raises(ProtocolError) as ei:
        await PlaywrightDriver(page).find_elements(By.css("a"))
    assert isinstance(ei.value.__cause__, PlaywrightError)


@pytest.mark.asyncio
async def test_element_state_reads():
    handle = MagicMock()
    handle.inner_text = AsyncMock(return_value="Search")
    handle.get_attribute = AsyncMock(return_value="q")
    handle.is_visible = AsyncMock(return_value=True)
    handle.is_enabled = AsyncMock(return_value=False)
    drv = PlaywrightDriver(MagicMock())

    assert await drv.text(handle) == "Search"
    assert await drv.get_attribute(handle, "name") == "q"
    assert await drv.is_displayed(handle) is True
    assert await drv.is_clickable(handle) is False


@pytest.mark.asyncio
async def test_get_property_reads_in_page_without_a_js_handle():
    handle = MagicMock()
    handle.evaluate = AsyncMock(return_value=True)
    handle.get_property = AsyncMock()

    assert await PlaywrightDriver(MagicMock()).get_property(handle, "checked") is True
    handle.evaluate.assert_awaited_once_with("(el, n) => el[n]", "checked")
    handle.get_property.assert_not_awaited()


@pytest.mark.asyncio
async def test_release_disposes_every_handle():
    h1, h2 = MagicMock(), MagicMock()
    h1.dispose = AsyncMock(side_effect=PlaywrightError("Target closed"))
    h2.dispose = AsyncMock()

    await PlaywrightDriver(MagicMock()).release([h1, h2])

    h1.dispose.assert_awaited_once()
    h2.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_is_present_is_false_for_dead_handles():
    handle = MagicMock()
    handle.evaluate = AsyncMock(side_effect=PlaywrightError("Execution context was destroyed"))
    assert await PlaywrightDriver(MagicMock()).is_present(handle) is False

    handle.evaluate = AsyncMock(return_value=False)
    assert await PlaywrightDriver(MagicMock()).is_present(handle) is False
