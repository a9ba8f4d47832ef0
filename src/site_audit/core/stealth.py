"""Optional bot-detection evasions for the site under test.

Some storefronts serve a challenge page to obvious automation; playwright-stealth
patches the usual tells. See: https://github.com/mattwmaster58/playwright_stealth
"""
from __future__ import annotations

from contextlib import AbstractAsyncContextManager

from playwright.async_api import BrowserContext, async_playwright
from playwright_stealth import ALL_EVASIONS_DISABLED_KWARGS, Stealth


class StealthManager:
    """Toggles playwright-stealth for an audit session."""

    def __init__(self, enabled: bool, *, user_agent: str | None = None) -> None:
        self.enabled = enabled
        overrides: dict[str, object] = {}
        if enabled and user_agent:
            overrides["navigator_user_agent_override"] = user_agent
        self._stealth = Stealth(**({} if enabled else ALL_EVASIONS_DISABLED_KWARGS), **overrides)

    def wrap_playwright(self) -> AbstractAsyncContextManager:
        """Return the context manager to acquire Playwright."""
        if not self.enabled:
            return async_playwright()
        return self._stealth.use_async(async_playwright())

    async def apply(self, context: BrowserContext) -> None:
        if not self.enabled:
            return
        await self._stealth.apply_stealth_async(context)
