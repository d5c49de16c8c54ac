# elementquery/drivers/playwright.py
from __future__ import annotations

"""Playwright adapter
---------------------
Implements the `WebDriver` protocol on top of a `playwright.async_api.Page`.
Handles are Playwright `ElementHandle`s; every client failure surfaces as
`ProtocolError` with the Playwright error chained.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from elementquery.core.by import By, SelectorStrategy, xpath_literal
from elementquery.core.errors import ProtocolError
from elementquery.utils.logger import get_logger

log = get_logger(__name__)


def _css_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def resolve_selector(by: By) -> str:
    """
    Convert a By into a Playwright selector string.

    - css / tag            → used verbatim
    - xpath                → "xpath=..." (a leading // is relative when scoped)
    - id / name / class    → attribute CSS selectors, so any value is safe
    - link_text / partial  → XPath over <a> normalized text
    - text                 → Playwright's text engine (case-insensitive substring)
    """
    s, v = by.strategy, by.value
    if s in (SelectorStrategy.css, SelectorStrategy.tag):
        return v
    if s == SelectorStrategy.xpath:
        return f"xpath={v}"
    if s == SelectorStrategy.id:
        return f"[id={_css_string(v)}]"
    if s == SelectorStrategy.name_:
        return f"[name={_css_string(v)}]"
    if s == SelectorStrategy.class_name:
        return f"[class~={_css_string(v)}]"
    if s == SelectorStrategy.link_text:
        return f"xpath=//a[normalize-space(.)={xpath_literal(v)}]"
    if s == SelectorStrategy.partial_link_text:
        return f"xpath=//a[contains(normalize-space(.), {xpath_literal(v)})]"
    return f"text={v}"


@contextmanager
def _protocol_errors(action: str) -> Iterator[None]:
    try:
        yield
    except PlaywrightError as e:
        raise ProtocolError(f"{action} failed: {e}") from e


class PlaywrightDriver:
    """WebDriver backed by a Playwright async Page."""

    def __init__(self, page: Page) -> None:
        self.page = page

    # ---------- Lookup ----------

    async def find_elements(self, by: By, scope: Optional[ElementHandle] = None) -> list[ElementHandle]:
        selector = resolve_selector(by)
        with _protocol_errors(f"find_elements({by})"):
            root = scope if scope is not None else self.page
            handles = await root.query_selector_all(selector)
        log.debug(f"{by} -> {len(handles)} element(s)")
        return handles

    async def find_element(self, by: By, scope: Optional[ElementHandle] = None) -> Optional[ElementHandle]:
        selector = resolve_selector(by)
        with _protocol_errors(f"find_element({by})"):
            root = scope if scope is not None else self.page
            return await root.query_selector(selector)

    # ---------- Element state ----------

    async def text(self, handle: ElementHandle) -> str:
        with _protocol_errors("text"):
            return await handle.inner_text()

    async def get_attribute(self, handle: ElementHandle, name: str) -> Optional[str]:
        with _protocol_errors(f"get_attribute({name!r})"):
            return await handle.get_attribute(name)

    async def get_property(self, handle: ElementHandle, name: str) -> Any:
        with _protocol_errors(f"get_property({name!r})"):
            # evaluate() serializes in-page, so no JSHandle is left behind
            return await handle.evaluate("(el, n) => el[n]", name)

    async def get_css_property(self, handle: ElementHandle, name: str) -> str:
        with _protocol_errors(f"get_css_property({name!r})"):
            return await handle.evaluate(
                "(el, name) => getComputedStyle(el).getPropertyValue(name)", name
            )

    async def tag_name(self, handle: ElementHandle) -> str:
        with _protocol_errors("tag_name"):
            return await handle.evaluate("el => el.tagName.toLowerCase()")

    async def has_class(self, handle: ElementHandle, name: str) -> bool:
        with _protocol_errors(f"has_class({name!r})"):
            return bool(await handle.evaluate("(el, c) => el.classList.contains(c)", name))

    async def is_enabled(self, handle: ElementHandle) -> bool:
        with _protocol_errors("is_enabled"):
            return await handle.is_enabled()

    async def is_displayed(self, handle: ElementHandle) -> bool:
        with _protocol_errors("is_displayed"):
            return await handle.is_visible()

    async def is_selected(self, handle: ElementHandle) -> bool:
        with _protocol_errors("is_selected"):
            return bool(await handle.evaluate("el => !!(el.selected || el.checked)"))

    async def is_clickable(self, handle: ElementHandle) -> bool:
        return await self.is_displayed(handle) and await self.is_enabled(handle)

    async def is_present(self, handle: ElementHandle) -> bool:
        try:
            return bool(await handle.evaluate("el => el.isConnected"))
        except PlaywrightError as e:
            # Handle belongs to a destroyed execution context (navigation)
            log.debug(f"Treating handle as detached: {e}")
            return False

    async def release(self, handles: list[ElementHandle]) -> None:
        for handle in handles:
            try:
                await handle.dispose()
            except PlaywrightError as e:
                # Already gone with its execution context
                log.debug(f"Could not dispose handle: {e}")


__all__ = ["PlaywrightDriver", "resolve_selector"]
