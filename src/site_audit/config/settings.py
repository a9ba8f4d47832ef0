"""Runtime configuration for the site audit.

Relies on pydantic-settings so that environment variables (prefixed with ``AUDIT_``)
can override defaults. See `config/run_config.example.toml` for per-run profiles.
"""
from __future__ import annotations

from pathlib import Path
from typing import Annotated, Iterable, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_CONSOLE_IGNORE: tuple[str, ...] = (
    "Application Insights",
    "Attribution Reporting",
)

DEFAULT_BANNED_SUBSTRINGS: tuple[str, ...] = (
    "database",
    "sql",
    "password",
    "secret",
    "token",
)


def _split_csv(value: object, field_name: str) -> Tuple[str, ...]:
    if value is None or value == "":
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(item).strip() for item in value if str(item).strip())
    if isinstance(value, str):
        parts: Iterable[str] = (part.strip() for part in value.split(","))
        return tuple(part for part in parts if part)
    raise TypeError(f"{field_name} must be provided as a comma-separated string or list")


class Settings(BaseSettings):
    """Captures runtime configuration for the audit."""

    base_url: str = Field(
        default="https://www.dominos.com.au",
        description="Site under test; relative navigations resolve against it",
    )
    store_finder_path: str = Field(default="/store-finder/", description="Path of the store-finder page")
    headless: bool = True
    slow_mo_ms: int = Field(default=0, description="Slow-mo delay in milliseconds")
    viewport_width: int = 1280
    viewport_height: int = 720
    user_agent: Optional[str] = Field(
        default=None, description="User agent for browser contexts and HTTP probes"
    )
    locale: Optional[str] = Field(default="en-AU")
    default_timeout_ms: int = Field(default=15000)
    navigation_timeout_ms: int = Field(default=30000)

    http_timeout_s: float = Field(default=20.0, description="Per-request timeout for link probes")
    footer_link_limit: int = Field(default=20, description="Maximum footer links probed per run")
    console_ignore: Annotated[Tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_CONSOLE_IGNORE,
        description="Console error substrings treated as non-critical",
    )
    link_catalog_path: Optional[Path] = Field(
        default=None, description="Optional JSON file extending the built-in link catalog"
    )

    settle_timeout_ms: int = Field(
        default=2000, description="Upper bound for the page to settle after an input"
    )
    suggestion_timeout_ms: int = Field(
        default=5000, description="Upper bound for autocomplete suggestions to appear"
    )
    clear_button_timeout_ms: int = Field(
        default=2000, description="Upper bound for the clear control to become visible"
    )
    keystroke_delay_ms: int = Field(default=100, description="Delay between typed characters")
    poll_interval_ms: int = Field(default=100, description="Interval between DOM state checks")
    banned_substrings: Annotated[Tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_BANNED_SUBSTRINGS,
        description="Console terms that indicate sensitive information leakage",
    )

    stealth_enabled: bool = Field(
        default=False, description="Apply playwright-stealth evasions to browser contexts"
    )
    run_config_path: Optional[Path] = Field(
        default=None, description="TOML run profile applied on top of environment settings"
    )
    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"))
    log_file: str = Field(default="audit.log", description="File name of the run log inside log_dir")

    model_config = SettingsConfigDict(
        env_prefix="AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    @field_validator("link_catalog_path", "run_config_path", mode="before")
    def _expand_optional_path(cls, value: str | Path | None) -> Optional[Path]:
        if value in (None, ""):
            return None
        return Path(value).expanduser()

    @field_validator("log_dir", mode="before")
    def _expand_log_dir(cls, value: str | Path) -> Path:  # noqa: D401
        if isinstance(value, Path):
            return value
        return Path(value).expanduser()

    @field_validator("console_ignore", mode="before")
    def _parse_console_ignore(cls, value: object) -> Tuple[str, ...]:
        return _split_csv(value, "console_ignore")

    @field_validator("banned_substrings", mode="before")
    def _parse_banned_substrings(cls, value: object) -> Tuple[str, ...]:
        return tuple(term.lower() for term in _split_csv(value, "banned_substrings"))

    @field_validator(
        "settle_timeout_ms",
        "suggestion_timeout_ms",
        "clear_button_timeout_ms",
        "poll_interval_ms",
        "footer_link_limit",
    )
    def _validate_positive(cls, value: int, info) -> int:
        if value <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return value

    @field_validator("keystroke_delay_ms", "slow_mo_ms")
    def _validate_non_negative(cls, value: int, info) -> int:
        if value < 0:
            raise ValueError(f"{info.field_name} must not be negative")
        return value

    def store_finder_url(self) -> str:
        return self.base_url.rstrip("/") + "/" + self.store_finder_path.lstrip("/")

    def viewport(self) -> dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}

    def ensure_directories(self) -> None:
        """Create directories that must exist at runtime."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def chromium_launch_args(self) -> dict[str, object]:
        launch_args: dict[str, object] = {
            "headless": self.headless,
        }
        if self.slow_mo_ms:
            launch_args["slow_mo"] = self.slow_mo_ms
        return launch_args

    def context_options(self) -> dict[str, object]:
        options: dict[str, object] = {
            "base_url": self.base_url,
            "viewport": self.viewport(),
        }
        if self.user_agent:
            options["user_agent"] = self.user_agent
        if self.locale:
            options["locale"] = self.locale
        return options

    def http_headers(self) -> dict[str, str]:
        headers = {"Accept": "text/html,application/xhtml+xml,*/*;q=0.8"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers
