"""Scoped listeners for the browser's console and dialog event streams."""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Optional, Type

from playwright.async_api import ConsoleMessage, Dialog, Page

from site_audit.models import DialogEvent

logger = logging.getLogger(__name__)


class PageObserver:
    """Collects console errors and dialogs raised while the block runs.

    Listeners are attached on ``__aenter__`` and detached on ``__aexit__``; any dialog
    is dismissed as soon as it fires so a stray ``alert()`` never blocks the page.
    """

    def __init__(self, page: Page) -> None:
        self.page = page
        self.console_errors: list[str] = []
        self.dialogs: list[DialogEvent] = []
        self._attached = False

    async def __aenter__(self) -> "PageObserver":
        self.page.on("console", self._on_console)
        self.page.on("dialog", self._on_dialog)
        self._attached = True
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.detach()

    def detach(self) -> None:
        if not self._attached:
            return
        self.page.remove_listener("console", self._on_console)
        self.page.remove_listener("dialog", self._on_dialog)
        self._attached = False

    @property
    def attached(self) -> bool:
        return self._attached

    def reset(self) -> None:
        self.console_errors.clear()
        self.dialogs.clear()

    def _on_console(self, message: ConsoleMessage) -> None:
        if message.type != "error":
            return
        logger.debug("Console error: %s", message.text)
        self.console_errors.append(message.text)

    async def _on_dialog(self, dialog: Dialog) -> None:
        event = DialogEvent(type=dialog.type, message=dialog.message)
        self.dialogs.append(event)
        logger.warning("Dismissing unexpected %s dialog: %s", event.type, event.message)
        await dialog.dismiss()
