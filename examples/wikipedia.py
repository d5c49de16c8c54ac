# examples/wikipedia.py
"""
Search Wikipedia with a query that falls back between selectors, then wait
for the results heading.

Run: python examples/wikipedia.py   (after `playwright install chromium`)
"""

from __future__ import annotations

import asyncio

from playwright.async_api import async_playwright

from elementquery import By, ElementPoller, QuerySession, StringMatch
from elementquery.drivers.playwright import PlaywrightDriver


async def main() -> None:
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        page = await browser.new_page()
        await page.goto("https://en.wikipedia.org")

        session = QuerySession(PlaywrightDriver(page))
        session.set_default_poller(ElementPoller.timeout_with_interval(10_000, 500))

        # The first selector never matches; the second one does
        search = await (
            session.query(By.css("thiswont.match"))
            .or_(By.id("searchInput"))
            .and_displayed()
            .first()
        )
        await search.wait("search box never became clickable").until().clickable()

        await page.fill("#searchInput", "selenium")
        await page.keyboard.press("Enter")

        heading = await session.query(By.id("firstHeading")).first()
        await heading.wait("results heading never showed").until().has_text(
            StringMatch("selenium").partial().case_insensitive()
        )
        print(await heading.text())

        await browser.close()


if __name__ == "__main__":
    asyncio.run(main())
