"""Browser-backed scraper for adoption listing pages."""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, List
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import AppConfig
from .models import NAME_NOT_FOUND, URL_NOT_FOUND, Listing, SiteConfig

logger = logging.getLogger(__name__)

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]
NON_RENDERED_TAGS = ["script", "style", "template", "noscript"]
HIDDEN_STYLE = re.compile(r"(display\s*:\s*none|visibility\s*:\s*hidden)", re.IGNORECASE)


class ObservationError(RuntimeError):
    """Raised when a listing page could not be loaded or never rendered."""


@dataclass
class PlaywrightObserver:
    """Loads listing pages in headless Chromium and extracts listings."""

    headless: bool = True
    navigation_timeout_ms: int = 60000
    selector_timeout_ms: int = 30000
    user_agent: str | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "PlaywrightObserver":
        return cls(
            headless=config.headless,
            navigation_timeout_ms=config.navigation_timeout_ms,
            selector_timeout_ms=config.selector_timeout_ms,
            user_agent=config.user_agent,
        )

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """Yield a fresh page; the browser is closed on every exit path."""
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self.headless, args=BROWSER_ARGS)
            try:
                context = await browser.new_context(
                    user_agent=self.user_agent,
                    ignore_https_errors=True,
                )
                page = await context.new_page()
                yield page
            finally:
                await browser.close()
                logger.debug("Browser closed")

    async def observe(self, page: Page, site: SiteConfig) -> List[Listing]:
        """Navigate to the site and return the listings currently shown."""
        logger.info("Navigating to %s", site.url)
        try:
            await page.goto(site.url, timeout=self.navigation_timeout_ms)
            await page.wait_for_selector(
                site.list_item_selector,
                state="attached",
                timeout=self.selector_timeout_ms,
            )
        except PlaywrightTimeoutError as exc:
            raise ObservationError(
                f"Timed out loading {site.url} (waiting for {site.list_item_selector!r}): {exc}"
            ) from exc

        listings = parse_listings(await page.content(), site, base_url=page.url)
        logger.info("Scraped %d listings from %s", len(listings), site.name)
        return listings


def parse_listings(html_text: str, site: SiteConfig, base_url: str) -> List[Listing]:
    """Extract listings from rendered HTML using the site's selectors."""
    soup = BeautifulSoup(html_text, "html.parser")
    listings: List[Listing] = []
    for item in soup.select(site.list_item_selector):
        name_el = item.select_one(site.name_selector)
        url_el = item.select_one(site.url_selector)

        name = _rendered_text(name_el) if name_el else NAME_NOT_FOUND
        href = (url_el.get("href") or "").strip() if url_el else ""
        url = urljoin(base_url, href) if href else URL_NOT_FOUND
        listings.append(Listing(name=name, url=url))
    return listings


def _rendered_text(element: Tag) -> str:
    """Approximate innerText: skip hidden descendants, collapse whitespace."""
    for child in element.find_all(True):
        if child.decomposed:
            continue
        if (
            child.name in NON_RENDERED_TAGS
            or child.has_attr("hidden")
            or HIDDEN_STYLE.search(child.get("style", ""))
        ):
            child.decompose()
    for br in element.find_all("br"):
        br.replace_with("\n")
    return " ".join(element.get_text().split())
