from __future__ import annotations

import inspect
import re
from typing import Any, Callable

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from site_audit.config.settings import Settings
from site_audit.search.selectors import StoreFinderSelectors


class _ConsoleMessage:
    def __init__(self, text: str, type: str = "error") -> None:
        self.text = text
        self.type = type


class _Dialog:
    def __init__(self, message: str, type: str = "alert") -> None:
        self.message = message
        self.type = type
        self.dismissed = False

    async def dismiss(self) -> None:
        self.dismissed = True


class _EventPage:
    """Minimal event emitter mirroring Page.on/remove_listener."""

    def __init__(self) -> None:
        self.listeners: dict[str, list[Callable[[Any], Any]]] = {}
        self.url = "https://www.dominos.com.au/store-finder/"

    def on(self, event: str, handler: Callable[[Any], Any]) -> None:
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable[[Any], Any]) -> None:
        self.listeners[event].remove(handler)

    async def emit(self, event: str, payload: Any) -> None:
        for handler in list(self.listeners.get(event, [])):
            result = handler(payload)
            if inspect.isawaitable(result):
                await result

    async def console_error(self, text: str) -> None:
        await self.emit("console", _ConsoleMessage(text))

    async def console_log(self, text: str) -> None:
        await self.emit("console", _ConsoleMessage(text, type="log"))

    async def alert(self, message: str) -> _Dialog:
        dialog = _Dialog(message)
        await self.emit("dialog", dialog)
        return dialog


class _Flag:
    def __init__(self, visible: Callable[[], bool]) -> None:
        self._visible = visible

    @property
    def first(self) -> "_Flag":
        return self

    async def is_visible(self) -> bool:
        return self._visible()


class _SearchBox:
    def __init__(self, page: "FakeStoreFinderPage", *, accessible: bool) -> None:
        self.page = page
        self.accessible = accessible

    @property
    def first(self) -> "_SearchBox":
        return self

    async def count(self) -> int:
        return 1 if self.accessible else 0

    async def clear(self) -> None:
        self.page.value = ""

    async def fill(self, value: str) -> None:
        await self.page.set_value(value)

    async def press_sequentially(self, text: str, delay: float = 0) -> None:
        self.page.keystroke_delays.append(delay)
        for char in text:
            await self.page.set_value(self.page.value + char)

    async def input_value(self) -> str:
        return self.page.value


class _ClearButton:
    def __init__(self, page: "FakeStoreFinderPage", *, accessible: bool) -> None:
        self.page = page
        self.accessible = accessible

    @property
    def first(self) -> "_ClearButton":
        return self

    async def count(self) -> int:
        return 1 if self.accessible else 0

    async def wait_for(self, state: str = "visible", timeout: float | None = None) -> None:
        if not (self.page.has_clear_button and self.page.value):
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for clear button")

    async def click(self) -> None:
        self.page.value = ""


class _SuggestionItems:
    def __init__(self, page: "FakeStoreFinderPage", pattern: re.Pattern[str] | None = None) -> None:
        self.page = page
        self.pattern = pattern

    def filter(self, has_text: re.Pattern[str] | str | None = None) -> "_SuggestionItems":
        pattern = re.compile(has_text) if isinstance(has_text, str) else has_text
        return _SuggestionItems(self.page, pattern)

    async def count(self) -> int:
        items = self.page.visible_suggestions()
        if self.pattern is None:
            return len(items)
        return sum(1 for item in items if self.pattern.search(item))


class FakeStoreFinderPage(_EventPage):
    """Scriptable stand-in for the store-finder page."""

    def __init__(
        self,
        *,
        suggestions: dict[str, list[str]] | None = None,
        no_results_for: set[str] | None = None,
        accessible: bool = True,
        has_clear_button: bool = True,
        dialog_triggers: set[str] | None = None,
        console_on_input: dict[str, str] | None = None,
        html: str = "<html><body></body></html>",
        trim_input: bool = False,
    ) -> None:
        super().__init__()
        self.value = ""
        self.suggestions = suggestions or {}
        self.no_results_for = no_results_for or set()
        self.has_clear_button = has_clear_button
        self.dialog_triggers = dialog_triggers or set()
        self.console_on_input = console_on_input or {}
        self.html = html
        self.trim_input = trim_input
        self.crashed = False
        self.visited: list[str] = []
        self.keystroke_delays: list[float] = []
        self._accessible = accessible

    async def set_value(self, value: str) -> None:
        self.value = value.strip() if self.trim_input else value
        if value in self.dialog_triggers:
            await self.alert(value)
        if value in self.console_on_input:
            await self.console_error(self.console_on_input[value])

    def visible_suggestions(self) -> list[str]:
        return self.suggestions.get(self.value, [])

    async def goto(self, url: str, **_kwargs: Any) -> None:
        self.visited.append(url)
        self.url = url

    async def wait_for_load_state(self, _state: str = "load") -> None:
        return None

    async def content(self) -> str:
        return self.html

    def get_by_role(self, role: str, name: str | None = None, **_kwargs: Any) -> Any:
        if role == StoreFinderSelectors.search_box_role:
            return _SearchBox(self, accessible=self._accessible)
        if role == StoreFinderSelectors.clear_button_role:
            return _ClearButton(self, accessible=self._accessible)
        if role == StoreFinderSelectors.suggestion_item_role:
            return _SuggestionItems(self)
        raise AssertionError(f"unexpected role {role}")

    def get_by_text(self, text: str | re.Pattern[str], **_kwargs: Any) -> _Flag:
        if isinstance(text, str):
            return _Flag(lambda: bool(self.visible_suggestions()) and text == StoreFinderSelectors.suggestions_text)
        return _Flag(
            lambda: self.value in self.no_results_for and bool(text.search("NO STORE FOUND FOR SEARCH TERM"))
        )

    def locator(self, selector: str) -> Any:
        if selector == StoreFinderSelectors.root:
            return _Flag(lambda: not self.crashed)
        if selector == StoreFinderSelectors.search_box_fallback:
            return _SearchBox(self, accessible=True)
        if selector == StoreFinderSelectors.clear_button_fallback:
            return _ClearButton(self, accessible=True)
        raise AssertionError(f"unexpected selector {selector}")


@pytest.fixture
def fast_settings() -> Settings:
    return Settings(
        settle_timeout_ms=40,
        suggestion_timeout_ms=60,
        clear_button_timeout_ms=20,
        poll_interval_ms=5,
        keystroke_delay_ms=0,
    )


@pytest.fixture
def event_page() -> _EventPage:
    return _EventPage()


@pytest.fixture
def store_finder_page() -> Callable[..., FakeStoreFinderPage]:
    return FakeStoreFinderPage
