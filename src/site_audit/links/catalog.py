"""Static link catalogs and helpers to extend them from disk."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional
from urllib.parse import urlparse


@dataclass(frozen=True)
class StatusRange:
    """Acceptable HTTP statuses, ``minimum`` inclusive and ``maximum`` exclusive."""

    minimum: int
    maximum: int

    def __post_init__(self) -> None:
        if self.minimum >= self.maximum:
            raise ValueError(f"Empty status range [{self.minimum}, {self.maximum})")

    def __contains__(self, status: object) -> bool:
        return isinstance(status, int) and self.minimum <= status < self.maximum

    def describe(self) -> str:
        if self.maximum - self.minimum == 1:
            return str(self.minimum)
        return f"{self.minimum}-{self.maximum - 1}"


EXACT_OK = StatusRange(200, 201)
REDIRECT_TOLERANT = StatusRange(200, 400)

_NAMED_RANGES = {
    "exact": EXACT_OK,
    "ok": EXACT_OK,
    "redirect": REDIRECT_TOLERANT,
    "redirect_tolerant": REDIRECT_TOLERANT,
}


def is_absolute_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


@dataclass(frozen=True)
class LinkEntry:
    """Represents one outbound link and the statuses it may answer with."""

    name: str
    url: str
    expected_status: StatusRange = EXACT_OK

    def __post_init__(self) -> None:
        if not is_absolute_http_url(self.url):
            raise ValueError(f"Link '{self.name}' must use an absolute http(s) URL, got {self.url!r}")


NAVIGATION_LINKS: tuple[LinkEntry, ...] = (
    LinkEntry("Menu", "https://www.dominos.com.au/menu/"),
    LinkEntry("Offers", "https://www.dominos.com.au/offers/"),
    LinkEntry("Store Finder", "https://www.dominos.com.au/store-finder/"),
    LinkEntry("App", "https://www.dominos.com.au/app"),
)

SOCIAL_LINKS: tuple[LinkEntry, ...] = (
    LinkEntry("Facebook", "https://www.facebook.com/DominosAustralia", REDIRECT_TOLERANT),
    LinkEntry("YouTube", "https://www.youtube.com/user/DominosAustralia", REDIRECT_TOLERANT),
    LinkEntry("Twitter", "https://twitter.com/dominos_au", REDIRECT_TOLERANT),
    LinkEntry("Instagram", "https://www.instagram.com/dominos_au", REDIRECT_TOLERANT),
)

PARTNER_LINKS: tuple[LinkEntry, ...] = (
    LinkEntry("Jobs", "https://jobs.dominos.com.au/"),
    LinkEntry("Franchise", "https://www.dominosfranchise.com.au/"),
    LinkEntry("Investor", "https://www.dominospizzaenterprises.com/"),
)


class LinkCatalog:
    """Immutable mapping of group name to link entries."""

    def __init__(self, groups: Mapping[str, Iterable[LinkEntry]], *, source: Optional[Path] = None) -> None:
        self._groups: dict[str, tuple[LinkEntry, ...]] = {name: tuple(entries) for name, entries in groups.items()}
        self._source = source

    @property
    def source(self) -> Optional[Path]:
        return self._source

    def groups(self) -> list[str]:
        return list(self._groups)

    def get(self, group: str) -> tuple[LinkEntry, ...]:
        try:
            return self._groups[group]
        except KeyError as exc:
            known = ", ".join(sorted(self._groups))
            raise KeyError(f"Link group '{group}' not found. Known groups: {known}") from exc

    def entries(self) -> Iterable[LinkEntry]:
        for entries in self._groups.values():
            yield from entries

    def merged(self, other: "LinkCatalog") -> "LinkCatalog":
        """Return a catalog where groups from ``other`` replace groups of the same name."""
        return LinkCatalog({**self._groups, **other._groups}, source=other.source or self.source)

    @classmethod
    def default(cls) -> "LinkCatalog":
        return cls(
            {
                "navigation": NAVIGATION_LINKS,
                "social": SOCIAL_LINKS,
                "partner": PARTNER_LINKS,
            }
        )

    @classmethod
    def load(cls, path: Path) -> "LinkCatalog":
        """Read groups from JSON shaped as ``{"groups": {"name": [{"name", "url", "status"}]}}``."""
        if not path.exists():
            raise FileNotFoundError(f"Link catalog not found at {path}")
        data = json.loads(path.read_text())
        groups: dict[str, list[LinkEntry]] = {}
        for group, entries in data.get("groups", {}).items():
            groups[group] = [
                LinkEntry(
                    name=entry.get("name", entry["url"]),
                    url=entry["url"],
                    expected_status=_parse_status(entry.get("status", "exact")),
                )
                for entry in entries
            ]
        return cls(groups, source=path)


def _parse_status(raw: object) -> StatusRange:
    if isinstance(raw, str):
        try:
            return _NAMED_RANGES[raw.lower()]
        except KeyError as exc:
            raise ValueError(f"Unknown status policy '{raw}'") from exc
    if isinstance(raw, int):
        return StatusRange(raw, raw + 1)
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        return StatusRange(int(raw[0]), int(raw[1]))
    raise ValueError(f"Status must be a policy name, a code or a [min, max) pair, got {raw!r}")


def load_catalog(path: Optional[Path]) -> LinkCatalog:
    catalog = LinkCatalog.default()
    if path is None:
        return catalog
    return catalog.merged(LinkCatalog.load(path))
