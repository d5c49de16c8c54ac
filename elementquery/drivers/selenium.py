# elementquery/drivers/selenium.py
from __future__ import annotations

"""Selenium adapter
-------------------
Implements the `WebDriver` protocol over a (blocking) Selenium WebDriver.
Each call runs on a worker thread via `asyncio.to_thread` so the event loop
keeps serving other queries. Requires the `selenium` extra.
"""

import asyncio
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from selenium.common.exceptions import (
    NoSuchElementException,
    StaleElementReferenceException,
    WebDriverException,
)
from selenium.webdriver.common.by import By as SeleniumBy
from selenium.webdriver.remote.webdriver import WebDriver as RemoteWebDriver
from selenium.webdriver.remote.webelement import WebElement as RemoteWebElement

from elementquery.core.by import By, SelectorStrategy, xpath_literal
from elementquery.core.errors import ProtocolError
from elementquery.utils.logger import get_logger

log = get_logger(__name__)

T = TypeVar("T")

_LOCATORS = {
    SelectorStrategy.css: SeleniumBy.CSS_SELECTOR,
    SelectorStrategy.xpath: SeleniumBy.XPATH,
    SelectorStrategy.id: SeleniumBy.ID,
    SelectorStrategy.name_: SeleniumBy.NAME,
    SelectorStrategy.tag: SeleniumBy.TAG_NAME,
    SelectorStrategy.class_name: SeleniumBy.CLASS_NAME,
    SelectorStrategy.link_text: SeleniumBy.LINK_TEXT,
    SelectorStrategy.partial_link_text: SeleniumBy.PARTIAL_LINK_TEXT,
}


def resolve_locator(by: By) -> tuple[str, str]:
    """Convert a By into Selenium's (strategy, value) locator tuple."""
    if by.strategy == SelectorStrategy.text:
        return SeleniumBy.XPATH, f".//*[contains(text(), {xpath_literal(by.value)})]"
    return _LOCATORS[by.strategy], by.value


@contextmanager
def _protocol_errors(action: str) -> Iterator[None]:
    try:
        yield
    except WebDriverException as e:
        raise ProtocolError(f"{action} failed: {e.msg or e.__class__.__name__}") from e


class SeleniumDriver:
    """WebDriver backed by a Selenium remote/local driver instance."""

    def __init__(self, driver: RemoteWebDriver) -> None:
        self.driver = driver

    async def _run(self, action: str, fn: Callable[..., T], *args: Any) -> T:
        with _protocol_errors(action):
            return await asyncio.to_thread(fn, *args)

    # ---------- Lookup ----------

    async def find_elements(self, by: By, scope: Optional[RemoteWebElement] = None) -> list[RemoteWebElement]:
        root = scope if scope is not None else self.driver
        handles = await self._run(f"find_elements({by})", root.find_elements, *resolve_locator(by))
        log.debug(f"{by} -> {len(handles)} element(s)")
        return list(handles)

    async def find_element(self, by: By, scope: Optional[RemoteWebElement] = None) -> Optional[RemoteWebElement]:
        root = scope if scope is not None else self.driver
        locator = resolve_locator(by)

        def _find() -> Optional[RemoteWebElement]:
            try:
                return root.find_element(*locator)
            except NoSuchElementException:
                return None

        return await self._run(f"find_element({by})", _find)

    # ---------- Element state ----------

    async def text(self, handle: RemoteWebElement) -> str:
        return await self._run("text", lambda: handle.text)

    async def get_attribute(self, handle: RemoteWebElement, name: str) -> Optional[str]:
        return await self._run(f"get_attribute({name!r})", handle.get_attribute, name)

    async def get_property(self, handle: RemoteWebElement, name: str) -> Any:
        return await self._run(f"get_property({name!r})", handle.get_property, name)

    async def get_css_property(self, handle: RemoteWebElement, name: str) -> str:
        return await self._run(f"get_css_property({name!r})", handle.value_of_css_property, name)

    async def tag_name(self, handle: RemoteWebElement) -> str:
        return await self._run("tag_name", lambda: handle.tag_name.lower())

    async def has_class(self, handle: RemoteWebElement, name: str) -> bool:
        classes = await self.get_attribute(handle, "class")
        return name in (classes or "").split()

    async def is_enabled(self, handle: RemoteWebElement) -> bool:
        return await self._run("is_enabled", handle.is_enabled)

    async def is_displayed(self, handle: RemoteWebElement) -> bool:
        return await self._run("is_displayed", handle.is_displayed)

    async def is_selected(self, handle: RemoteWebElement) -> bool:
        return await self._run("is_selected", handle.is_selected)

    async def is_clickable(self, handle: RemoteWebElement) -> bool:
        return await self.is_displayed(handle) and await self.is_enabled(handle)

    async def is_present(self, handle: RemoteWebElement) -> bool:
        def _probe() -> bool:
            try:
                handle.is_enabled()
                return True
            except StaleElementReferenceException:
                return False

        return await self._run("is_present", _probe)

    async def release(self, handles: list[RemoteWebElement]) -> None:
        """Selenium element references hold no client-side resources."""
        return None


__all__ = ["SeleniumDriver", "resolve_locator"]
