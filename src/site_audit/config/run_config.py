"""User-friendly run profile loader for audit runs."""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Iterable, Optional, TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:  # pragma: no cover
    from site_audit.config.settings import Settings

logger = logging.getLogger(__name__)


def _coerce_string_list(value: object) -> Optional[list[str]]:
    if value is None:
        return None
    if value in ("", ()):
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, Iterable):
        result: list[str] = []
        for item in value:
            text = str(item).strip()
            if text:
                result.append(text)
        return result
    raise TypeError("Expected string or list of strings")


class BrowserSection(BaseModel):
    """Browser/runtime overrides decoded from the run profile."""

    base_url: Optional[str] = None
    headless: Optional[bool] = None
    slow_mo_ms: Optional[int] = Field(default=None, ge=0)
    viewport_width: Optional[int] = Field(default=None, ge=0)
    viewport_height: Optional[int] = Field(default=None, ge=0)
    user_agent: Optional[str] = None
    stealth_enabled: Optional[bool] = None
    log_level: Optional[str] = None
    log_file: Optional[str] = None


class TimeoutSection(BaseModel):
    """Wait budgets, all in milliseconds."""

    settle_ms: Optional[int] = Field(default=None, ge=1)
    suggestion_ms: Optional[int] = Field(default=None, ge=1)
    clear_button_ms: Optional[int] = Field(default=None, ge=1)
    keystroke_delay_ms: Optional[int] = Field(default=None, ge=0)
    poll_interval_ms: Optional[int] = Field(default=None, ge=1)


class LinksSection(BaseModel):
    footer_limit: Optional[int] = Field(default=None, ge=1)
    catalog_path: Optional[str] = None
    console_ignore: Optional[list[str]] = None

    @field_validator("console_ignore", mode="before")
    @classmethod
    def _coerce_console_ignore(cls, value: object) -> Optional[list[str]]:
        return _coerce_string_list(value)


class FuzzSection(BaseModel):
    banned_substrings: Optional[list[str]] = None

    @field_validator("banned_substrings", mode="before")
    @classmethod
    def _coerce_banned(cls, value: object) -> Optional[list[str]]:
        return _coerce_string_list(value)


class RunConfig(BaseModel):
    """Top-level configuration decoded from TOML."""

    profile: str = Field(default="default", description="Human label used for logging")
    title: Optional[str] = None
    notes: Optional[str] = None
    browser: BrowserSection = Field(default_factory=BrowserSection)
    timeouts: TimeoutSection = Field(default_factory=TimeoutSection)
    links: LinksSection = Field(default_factory=LinksSection)
    fuzz: FuzzSection = Field(default_factory=FuzzSection)

    @classmethod
    def load(cls, path: Path) -> "RunConfig":
        """Load a profile from a TOML file."""
        data = tomllib.loads(path.read_text())
        return cls.model_validate(data)

    # Public API -----------------------------------------------------------------

    def apply_to(self, settings: "Settings", *, base_dir: Optional[Path] = None) -> None:
        """Apply overrides to an existing Settings instance."""
        self._apply_browser(settings)
        self._apply_timeouts(settings)
        self._apply_links(settings, base_dir)
        self._apply_fuzz(settings)

    # Internal helpers -----------------------------------------------------------

    def _apply_browser(self, settings: "Settings") -> None:
        browser = self.browser
        if browser.base_url:
            settings.base_url = browser.base_url
        if browser.headless is not None:
            settings.headless = browser.headless
        if browser.slow_mo_ms is not None:
            settings.slow_mo_ms = browser.slow_mo_ms
        if browser.viewport_width is not None:
            settings.viewport_width = browser.viewport_width
        if browser.viewport_height is not None:
            settings.viewport_height = browser.viewport_height
        if browser.user_agent:
            settings.user_agent = browser.user_agent
        if browser.stealth_enabled is not None:
            settings.stealth_enabled = browser.stealth_enabled
        if browser.log_level:
            settings.log_level = browser.log_level
        if browser.log_file:
            settings.log_file = browser.log_file

    def _apply_timeouts(self, settings: "Settings") -> None:
        timeouts = self.timeouts
        if timeouts.settle_ms is not None:
            settings.settle_timeout_ms = timeouts.settle_ms
        if timeouts.suggestion_ms is not None:
            settings.suggestion_timeout_ms = timeouts.suggestion_ms
        if timeouts.clear_button_ms is not None:
            settings.clear_button_timeout_ms = timeouts.clear_button_ms
        if timeouts.keystroke_delay_ms is not None:
            settings.keystroke_delay_ms = timeouts.keystroke_delay_ms
        if timeouts.poll_interval_ms is not None:
            settings.poll_interval_ms = timeouts.poll_interval_ms

    def _apply_links(self, settings: "Settings", base_dir: Optional[Path]) -> None:
        links = self.links
        if links.footer_limit is not None:
            settings.footer_link_limit = links.footer_limit
        if links.catalog_path:
            settings.link_catalog_path = _resolve_path(links.catalog_path, base_dir)
        if links.console_ignore is not None:
            settings.console_ignore = tuple(links.console_ignore)

    def _apply_fuzz(self, settings: "Settings") -> None:
        if self.fuzz.banned_substrings is not None:
            settings.banned_substrings = tuple(self.fuzz.banned_substrings)


def _resolve_path(raw: str, base_dir: Optional[Path]) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute() and base_dir:
        return (base_dir / path).resolve()
    return path


def load_settings(config_path: Optional[Path] = None) -> "Settings":
    """Build Settings from the environment, then apply a run profile when one is available."""
    from site_audit.config.settings import Settings

    settings = Settings()
    path = config_path or settings.run_config_path
    if path is None:
        default_path = Path("config/run_config.toml")
        if default_path.exists():
            path = default_path
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Run config not found: {path}")
        run_config = RunConfig.load(path)
        run_config.apply_to(settings, base_dir=path.parent)
        suffix = f" ({run_config.title})" if run_config.title else ""
        logger.info("Loaded run profile '%s'%s from %s", run_config.profile, suffix, path)
        if run_config.notes:
            logger.info("Profile notes: %s", run_config.notes)
    return settings


__all__ = ["RunConfig", "load_settings"]
