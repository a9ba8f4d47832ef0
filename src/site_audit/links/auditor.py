"""Reachability and format checks for outbound links."""
from __future__ import annotations

import logging
from typing import AsyncIterator, Iterable, Optional

import httpx
from playwright.async_api import Page

from site_audit.config.settings import Settings
from site_audit.core.observers import PageObserver
from site_audit.links.catalog import REDIRECT_TOLERANT, LinkEntry
from site_audit.models import ProbeResult

logger = logging.getLogger(__name__)

APP_STORE_DOMAIN = "apps.apple.com"
DEPRECATED_APP_STORE_DOMAIN = "itunes.apple.com"

STORE_LINK_SELECTORS = {
    "apple": f'a[href*="{DEPRECATED_APP_STORE_DOMAIN}"], a[href*="{APP_STORE_DOMAIN}"]',
    "google": 'a[href*="play.google.com"]',
}

FOOTER_SELECTOR = "footer"
FOOTER_LINK_SELECTOR = 'a[href^="http"]'
VOID_LINK_SELECTOR = 'a[href="javascript:void(0)"]'


def check_app_store_link_format(href: str) -> bool:
    """True when ``href`` points at the current App Store domain and not the retired one."""
    return APP_STORE_DOMAIN in href and DEPRECATED_APP_STORE_DOMAIN not in href


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=settings.http_timeout_s,
        headers=settings.http_headers(),
    )


class LinkAuditor:
    """Probes links over HTTP and inspects link markup on rendered pages."""

    def __init__(self, client: httpx.AsyncClient, *, footer_limit: int = 20) -> None:
        self._client = client
        self.footer_limit = footer_limit

    async def check_link(self, entry: LinkEntry) -> ProbeResult:
        logger.debug("GET %s (%s)", entry.url, entry.name)
        try:
            response = await self._client.get(entry.url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Link %s unreachable: %s", entry.url, exc)
            return ProbeResult(entry, None, False, f"{entry.url} - Error: {exc}")
        status = response.status_code
        if status in entry.expected_status:
            logger.info("Link %s returned %s", entry.url, status)
            return ProbeResult(entry, status, True, f"{entry.url} - Status: {status}")
        logger.warning(
            "Link %s returned %s (expected %s)", entry.url, status, entry.expected_status.describe()
        )
        return ProbeResult(
            entry,
            status,
            False,
            f"{entry.url} - Status: {status} (expected {entry.expected_status.describe()})",
        )

    async def audit(self, entries: Iterable[LinkEntry]) -> list[str]:
        """Probe every entry and return one failure message per broken link."""
        failures: list[str] = []
        for entry in entries:
            result = await self.check_link(entry)
            if not result.passed:
                failures.append(f"{entry.name}: {result.detail}")
        return failures

    async def audit_hrefs(self, hrefs: AsyncIterator[str]) -> list[str]:
        """Probe discovered hrefs, tolerating redirects."""
        failures: list[str] = []
        async for href in hrefs:
            try:
                entry = LinkEntry(name=href, url=href, expected_status=REDIRECT_TOLERANT)
            except ValueError as exc:
                logger.warning("Skipping malformed link %s: %s", href, exc)
                failures.append(f"{href} - Error: {exc}")
                continue
            result = await self.check_link(entry)
            if not result.passed:
                failures.append(result.detail)
        return failures

    async def discover_footer_links(self, page: Page, limit: Optional[int] = None) -> AsyncIterator[str]:
        """Yield ``http`` hrefs found inside the footer, bounded to the first ``limit`` anchors."""
        bound = self.footer_limit if limit is None else limit
        links = page.locator(FOOTER_SELECTOR).locator(FOOTER_LINK_SELECTOR)
        count = await links.count()
        logger.info("Found %s footer links; probing up to %s", count, bound)
        for index in range(min(count, bound)):
            href = await links.nth(index).get_attribute("href")
            if not href or "javascript:" in href:
                continue
            yield href

    async def find_store_link(self, page: Page, store: str) -> Optional[str]:
        try:
            selector = STORE_LINK_SELECTORS[store]
        except KeyError as exc:
            raise ValueError(f"Unknown app store '{store}'") from exc
        link = page.locator(selector).first
        if not await link.count():
            logger.info("No %s store link present on %s", store, page.url)
            return None
        return await link.get_attribute("href")

    async def check_no_console_errors(self, page: Page, ignore: Iterable[str] = ()) -> list[str]:
        """Reload ``page`` and return console errors that match none of ``ignore``."""
        ignored = tuple(ignore)
        async with PageObserver(page) as observer:
            await page.reload()
            await page.wait_for_load_state("networkidle")
        critical = [
            message for message in observer.console_errors if not any(term in message for term in ignored)
        ]
        if critical:
            logger.warning("Console reported %s critical errors", len(critical))
        return critical

    async def check_void_links(self, page: Page) -> list[str]:
        """Every ``javascript:void(0)`` anchor must expose an onclick handler or an aria-label."""
        links = page.locator(VOID_LINK_SELECTOR)
        count = await links.count()
        if count:
            logger.warning(
                "Found %s javascript:void(0) links - consider adding ARIA labels for accessibility", count
            )
        failures: list[str] = []
        for index in range(count):
            link = links.nth(index)
            has_onclick = await link.evaluate("el => el.hasAttribute('onclick')")
            has_aria_label = await link.evaluate("el => el.hasAttribute('aria-label')")
            if not (has_onclick or has_aria_label):
                failures.append(f"Void link #{index} has neither onclick nor aria-label")
        return failures
