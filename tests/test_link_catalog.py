from __future__ import annotations

import json

import pytest

from site_audit.links import EXACT_OK, REDIRECT_TOLERANT, LinkCatalog, LinkEntry, StatusRange, load_catalog


def test_status_ranges_are_half_open():
    assert 200 in EXACT_OK
    assert 201 not in EXACT_OK
    assert 399 in REDIRECT_TOLERANT
    assert 400 not in REDIRECT_TOLERANT
    assert 199 not in REDIRECT_TOLERANT
    assert EXACT_OK.describe() == "200"
    assert REDIRECT_TOLERANT.describe() == "200-399"
    with pytest.raises(ValueError):
        StatusRange(400, 200)


@pytest.mark.parametrize("url", ["/menu/", "www.dominos.com.au/menu", "ftp://dominos.com.au/", "javascript:void(0)"])
def test_link_entry_rejects_non_absolute_urls(url: str):
    with pytest.raises(ValueError, match="absolute"):
        LinkEntry("Broken", url)


def test_default_catalog_groups_and_policies():
    catalog = LinkCatalog.default()
    assert catalog.groups() == ["navigation", "social", "partner"]
    assert all(entry.expected_status == EXACT_OK for entry in catalog.get("navigation"))
    assert all(entry.expected_status == EXACT_OK for entry in catalog.get("partner"))
    assert all(entry.expected_status == REDIRECT_TOLERANT for entry in catalog.get("social"))
    assert {entry.name for entry in catalog.get("social")} == {"Facebook", "YouTube", "Twitter", "Instagram"}
    with pytest.raises(KeyError, match="Known groups"):
        catalog.get("missing")


def test_load_catalog_merges_groups_from_json(tmp_path):
    path = tmp_path / "links.json"
    path.write_text(
        json.dumps(
            {
                "groups": {
                    "partner": [{"name": "Jobs", "url": "https://jobs.dominos.com.au/"}],
                    "corporate": [
                        {"name": "Careers", "url": "https://www.dominos.com.au/careers", "status": [200, 400]},
                        {"url": "https://www.dominos.com.au/contact", "status": "redirect"},
                        {"name": "Legacy", "url": "https://www.dominos.com.au/legacy", "status": 301},
                    ],
                }
            }
        )
    )

    catalog = load_catalog(path)

    assert catalog.source == path
    assert [entry.name for entry in catalog.get("partner")] == ["Jobs"]
    assert len(catalog.get("navigation")) == 4
    careers, contact, legacy = catalog.get("corporate")
    assert careers.expected_status == REDIRECT_TOLERANT
    assert contact.name == "https://www.dominos.com.au/contact"
    assert contact.expected_status == REDIRECT_TOLERANT
    assert legacy.expected_status == StatusRange(301, 302)


def test_load_catalog_without_path_returns_defaults():
    catalog = load_catalog(None)
    assert catalog.source is None
    assert len(list(catalog.entries())) == 11


def test_load_catalog_rejects_unknown_policy(tmp_path):
    path = tmp_path / "links.json"
    path.write_text(json.dumps({"groups": {"x": [{"url": "https://example.com/", "status": "sometimes"}]}}))
    with pytest.raises(ValueError, match="Unknown status policy"):
        LinkCatalog.load(path)


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        LinkCatalog.load(tmp_path / "absent.json")
