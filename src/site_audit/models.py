"""Shared data models for link and input probes."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:  # pragma: no cover
    from site_audit.links.catalog import LinkEntry
    from site_audit.search.payloads import FuzzCase


class UiState(str, Enum):
    """Recognised store-finder states after an input settles."""

    SUGGESTIONS = "suggestions"
    NO_RESULTS = "no_results"


@dataclass(frozen=True)
class DomSnapshot:
    """What the page looked like when waiting stopped."""

    state: Optional[UiState]
    input_value: str
    url: str
    elapsed_ms: float
    suggestion_count: int = 0

    @property
    def settled(self) -> bool:
        return self.state is not None


@dataclass(frozen=True)
class DialogEvent:
    """A native dialog (alert/confirm/prompt) raised by the page."""

    type: str
    message: str


Observed = Union[int, DomSnapshot, None]


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single reachability or UI-state check."""

    target: Union["LinkEntry", "FuzzCase", str]
    observed: Observed
    passed: bool
    detail: str = ""

    def __str__(self) -> str:
        verdict = "PASS" if self.passed else "FAIL"
        name = getattr(self.target, "name", self.target)
        return f"[{verdict}] {name}: {self.detail}" if self.detail else f"[{verdict}] {name}"
