"""Drive the store-finder search box through fuzz payloads and judge how the page copes."""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Iterable, Optional, Sequence

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from site_audit.config.settings import Settings
from site_audit.core.observers import PageObserver
from site_audit.models import DialogEvent, DomSnapshot, ProbeResult, UiState
from site_audit.search.payloads import SQL_ERROR_MARKERS, VALID_POSTCODE, Expectation, FuzzCase, InputMode
from site_audit.search.selectors import StoreFinderSelectors

logger = logging.getLogger(__name__)

# Side-channel evidence can arrive after the UI settles, so these wait out the full budget.
_FULL_WINDOW_EXPECTATIONS = {Expectation.NO_SCRIPT_EXECUTION, Expectation.NO_SQL_ERROR_TEXT}
_STATE_EXPECTATIONS = {
    Expectation.SHOWS_SUGGESTIONS: UiState.SUGGESTIONS,
    Expectation.SHOWS_NO_RESULTS: UiState.NO_RESULTS,
}


class CaseState(str, Enum):
    IDLE = "idle"
    FILLED = "filled"
    SETTLED = "settled"
    ASSERTED = "asserted"


async def submit(locator: Locator, payload: str, mode: InputMode, *, delay_ms: int = 100) -> None:
    """Clear ``locator`` then enter ``payload`` in one go or one key at a time."""
    await locator.clear()
    if mode is InputMode.KEYSTROKE:
        await locator.press_sequentially(payload, delay=delay_ms)
    else:
        await locator.fill(payload)


def find_leaks(messages: Iterable[str], banned: Iterable[str]) -> list[str]:
    terms = [term.lower() for term in banned]
    return [message for message in messages if any(term in message.lower() for term in terms)]


def assert_no_leakage(messages: Iterable[str], banned: Iterable[str]) -> bool:
    return not find_leaks(messages, banned)


def assert_no_script_execution(dialogs: Sequence[DialogEvent]) -> bool:
    return not dialogs


class InputFuzzHarness:
    """Owns one page and walks each case through idle, filled, settled and asserted."""

    def __init__(self, page: Page, settings: Settings, selectors: type[StoreFinderSelectors] = StoreFinderSelectors) -> None:
        self.page = page
        self.settings = settings
        self.selectors = selectors
        self.state = CaseState.IDLE
        self._submitted_at: Optional[float] = None

    async def open(self) -> None:
        url = self.settings.store_finder_url()
        logger.info("Opening store finder at %s", url)
        await self.page.goto(url)
        await self.page.wait_for_load_state("networkidle")
        self.state = CaseState.IDLE

    async def search_box(self) -> Locator:
        locator = self.page.get_by_role(self.selectors.search_box_role, name=self.selectors.search_box_name)
        if await locator.count():
            return locator
        logger.warning(
            "Search box has no accessible name; falling back to %s", self.selectors.search_box_fallback
        )
        return self.page.locator(self.selectors.search_box_fallback).first

    async def clear_button(self) -> Locator:
        locator = self.page.get_by_role(self.selectors.clear_button_role, name=self.selectors.clear_button_name)
        if await locator.count():
            return locator
        return self.page.locator(self.selectors.clear_button_fallback).first

    async def submit(self, payload: str, mode: InputMode = InputMode.BULK_FILL) -> None:
        box = await self.search_box()
        self._submitted_at = asyncio.get_running_loop().time()
        await submit(box, payload, mode, delay_ms=self.settings.keystroke_delay_ms)
        self.state = CaseState.FILLED

    async def reset(self) -> None:
        box = await self.search_box()
        await box.clear()
        self._submitted_at = None
        self.state = CaseState.IDLE

    async def await_stable_state(self, timeout_ms: Optional[int] = None, *, wait_full: bool = False) -> DomSnapshot:
        """Poll until a recognised state shows or ``timeout_ms`` elapses; never raises on timeout."""
        budget_ms = timeout_ms if timeout_ms is not None else self.settings.settle_timeout_ms
        loop = asyncio.get_running_loop()
        started = loop.time()
        deadline = started + budget_ms / 1000
        poll_s = self.settings.poll_interval_ms / 1000
        state: Optional[UiState] = None
        while True:
            state = await self._visible_state()
            now = loop.time()
            if (state is not None and not wait_full) or now >= deadline:
                break
            await asyncio.sleep(min(poll_s, deadline - now))
        finished = loop.time()
        origin = self._submitted_at if self._submitted_at is not None else started
        suggestion_count = await self._suggestion_count() if state is UiState.SUGGESTIONS else 0
        box = await self.search_box()
        snapshot = DomSnapshot(
            state=state,
            input_value=await box.input_value(),
            url=self.page.url,
            elapsed_ms=(finished - origin) * 1000,
            suggestion_count=suggestion_count,
        )
        if state is None:
            logger.info("No recognised UI state within %sms", budget_ms)
        else:
            logger.info("Observed %s after %.0fms", state.value, snapshot.elapsed_ms)
        if self.state is CaseState.FILLED:
            self.state = CaseState.SETTLED
        return snapshot

    async def assert_no_crash(self) -> bool:
        return await self.page.locator(self.selectors.root).is_visible()

    async def assert_clear_affordance(self, value: str = VALID_POSTCODE) -> bool:
        """Fill ``value``; the clear control must appear and empty the box when clicked."""
        if not value:
            raise ValueError("Clear affordance needs a non-empty value")
        await self.submit(value)
        button = await self.clear_button()
        try:
            await button.wait_for(state="visible", timeout=self.settings.clear_button_timeout_ms)
        except PlaywrightTimeoutError:
            logger.warning("Clear control did not appear within %sms", self.settings.clear_button_timeout_ms)
            return False
        await button.click()
        box = await self.search_box()
        remaining = await box.input_value()
        self.state = CaseState.ASSERTED
        return remaining == ""

    async def run_case(self, case: FuzzCase, observer: PageObserver) -> ProbeResult:
        logger.info("Running fuzz case %s (%s, %s)", case.name, case.expectation.value, case.mode.value)
        await self.reset()
        observer.reset()
        await self.submit(case.payload, case.mode)
        snapshot = await self.await_stable_state(
            self._timeout_for(case),
            wait_full=case.expectation in _FULL_WINDOW_EXPECTATIONS,
        )
        passed, detail = await self._evaluate(case, snapshot, observer)
        self.state = CaseState.ASSERTED
        if not passed:
            logger.warning("Fuzz case %s failed: %s", case.name, detail)
        return ProbeResult(case, snapshot, passed, detail)

    async def probe_leakage(self, payloads: Iterable[str], observer: PageObserver) -> ProbeResult:
        """Submit each payload in turn and scan collected console errors for banned terms."""
        observer.reset()
        submitted = 0
        for payload in payloads:
            await self.submit(payload)
            await self.await_stable_state(self.settings.settle_timeout_ms, wait_full=True)
            submitted += 1
        self.state = CaseState.ASSERTED
        leaks = find_leaks(observer.console_errors, self.settings.banned_substrings)
        dialogs = observer.dialogs
        if leaks:
            detail = f"Sensitive console output: {leaks}"
        elif dialogs:
            detail = f"{len(dialogs)} dialog(s) fired: {[event.message for event in dialogs]}"
        else:
            detail = f"{submitted} payloads, {len(observer.console_errors)} console errors, none sensitive"
        return ProbeResult("console_leakage", None, not leaks and assert_no_script_execution(dialogs), detail)

    def _timeout_for(self, case: FuzzCase) -> int:
        if case.expectation in _STATE_EXPECTATIONS or case.mode is InputMode.KEYSTROKE:
            return self.settings.suggestion_timeout_ms
        return self.settings.settle_timeout_ms

    async def _evaluate(self, case: FuzzCase, snapshot: DomSnapshot, observer: PageObserver) -> tuple[bool, str]:
        expectation = case.expectation
        if case.exploratory:
            logger.info(
                "Exploratory case %s settled with state=%s", case.name, snapshot.state.value if snapshot.state else None
            )

        if expectation is Expectation.NO_CRASH:
            if not await self.assert_no_crash():
                return False, "Page root no longer visible"
            path = self.settings.store_finder_path.strip("/")
            if path and path not in snapshot.url:
                return False, f"Navigated away from store finder to {snapshot.url}"
            return True, f"Page intact (state={snapshot.state.value if snapshot.state else 'none'})"

        if expectation is Expectation.NO_SQL_ERROR_TEXT:
            content = (await self.page.content()).lower()
            markers = [marker for marker in SQL_ERROR_MARKERS if marker in content]
            if markers:
                return False, f"Page shows database error text: {markers}"
            leaks = find_leaks(observer.console_errors, self.settings.banned_substrings)
            if leaks:
                return False, f"Sensitive console output: {leaks}"
            return True, "No database error text"

        if expectation is Expectation.NO_SCRIPT_EXECUTION:
            if assert_no_script_execution(observer.dialogs):
                return True, "No dialog fired"
            return False, f"{len(observer.dialogs)} dialog(s) fired: {[event.message for event in observer.dialogs]}"

        if expectation in _STATE_EXPECTATIONS:
            wanted = _STATE_EXPECTATIONS[expectation]
            if snapshot.state is wanted:
                if wanted is UiState.SUGGESTIONS and snapshot.suggestion_count == 0:
                    if case.exploratory:
                        return True, "suggestions shown without street entries (exploratory)"
                    return False, (
                        f"Suggestions shown after {snapshot.elapsed_ms:.0f}ms"
                        f" but none match {self.selectors.suggestion_item_pattern.pattern}"
                    )
                return True, (
                    f"{wanted.value} after {snapshot.elapsed_ms:.0f}ms"
                    f" ({snapshot.suggestion_count} street suggestions)"
                )
            if case.exploratory:
                return True, f"{wanted.value} not observed (exploratory)"
            observed = snapshot.state.value if snapshot.state else "nothing"
            return False, f"Expected {wanted.value}, observed {observed} within {snapshot.elapsed_ms:.0f}ms"

        if expectation is Expectation.CLEARS_ON_WHITESPACE:
            trimmed = snapshot.input_value.strip()
            if trimmed:
                return False, f"Whitespace input left {trimmed!r}"
            return True, f"Input value {snapshot.input_value!r} trims to empty"

        raise ValueError(f"Unsupported expectation {expectation}")

    async def _visible_state(self) -> Optional[UiState]:
        if await self.page.get_by_text(self.selectors.suggestions_text).first.is_visible():
            return UiState.SUGGESTIONS
        if await self.page.get_by_text(self.selectors.no_results_pattern).first.is_visible():
            return UiState.NO_RESULTS
        return None

    async def _suggestion_count(self) -> int:
        items = self.page.get_by_role(self.selectors.suggestion_item_role).filter(
            has_text=self.selectors.suggestion_item_pattern
        )
        return await items.count()
