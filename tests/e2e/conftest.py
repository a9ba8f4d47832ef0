"""Fixtures for live scenarios against the site under test.

Each scenario gets its own browser context; nothing is shared between tests
except the resolved settings.
"""
from __future__ import annotations

from typing import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from playwright.async_api import Page

from site_audit.config.run_config import load_settings
from site_audit.config.settings import Settings
from site_audit.core.browser import BrowserSession, ensure_close_context
from site_audit.core.logging import configure_logging
from site_audit.links import LinkAuditor, LinkCatalog, build_http_client, load_catalog
from site_audit.search import InputFuzzHarness


@pytest.fixture(scope="session")
def settings() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_level, settings.log_dir, settings.log_file)
    return settings


@pytest.fixture(scope="session")
def link_catalog(settings: Settings) -> LinkCatalog:
    return load_catalog(settings.link_catalog_path)


@pytest_asyncio.fixture
async def browser_session(settings: Settings) -> AsyncIterator[BrowserSession]:
    async with BrowserSession(settings) as session:
        yield session


@pytest_asyncio.fixture
async def page(browser_session: BrowserSession) -> AsyncIterator[Page]:
    context = await browser_session.new_context()
    try:
        yield await context.new_page()
    finally:
        await ensure_close_context(context)


@pytest_asyncio.fixture
async def home_page(page: Page, settings: Settings) -> Page:
    await page.goto(settings.base_url)
    return page


@pytest_asyncio.fixture
async def http_client(settings: Settings) -> AsyncIterator[httpx.AsyncClient]:
    async with build_http_client(settings) as client:
        yield client


@pytest.fixture
def link_auditor(http_client: httpx.AsyncClient, settings: Settings) -> LinkAuditor:
    return LinkAuditor(http_client, footer_limit=settings.footer_link_limit)


@pytest_asyncio.fixture
async def store_finder(page: Page, settings: Settings) -> InputFuzzHarness:
    harness = InputFuzzHarness(page, settings)
    await harness.open()
    return harness
