"""Centralised locators for the store-finder page.

Role-based locators come first; the CSS fallbacks are used only when the page
ships without accessible names.
"""
from __future__ import annotations

import re


class StoreFinderSelectors:
    root = "body"
    search_box_role = "textbox"
    search_box_name = "Enter postcode, suburb or store name"
    search_box_fallback = "input[placeholder*='postcode' i]"
    suggestions_text = "Address Suggestion"
    suggestion_item_role = "listitem"
    suggestion_item_pattern = re.compile(r"Street|Avenue|Parade")
    no_results_pattern = re.compile(r"no store found", re.IGNORECASE)
    clear_button_role = "img"
    clear_button_name = "Clear search"
    clear_button_fallback = "[aria-label='Clear search']"
