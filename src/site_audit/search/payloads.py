"""Fuzz payload catalog for the store-finder search box."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class InputMode(str, Enum):
    BULK_FILL = "bulk_fill"
    KEYSTROKE = "keystroke"


class Expectation(str, Enum):
    NO_CRASH = "no_crash"
    NO_SQL_ERROR_TEXT = "no_sql_error_text"
    NO_SCRIPT_EXECUTION = "no_script_execution"
    SHOWS_NO_RESULTS = "shows_no_results"
    SHOWS_SUGGESTIONS = "shows_suggestions"
    CLEARS_ON_WHITESPACE = "clears_on_whitespace"


@dataclass(frozen=True)
class FuzzCase:
    """One payload and the single DOM observation that decides it.

    ``exploratory`` cases log a missing UI state instead of failing on it.
    """

    name: str
    payload: str
    expectation: Expectation
    mode: InputMode = InputMode.BULK_FILL
    exploratory: bool = False


VALID_POSTCODE = "2000"

# Markers of a backend error page rendered into the DOM.
SQL_ERROR_MARKERS: tuple[str, ...] = ("syntax error", "sql error")

FUZZ_CASES: tuple[FuzzCase, ...] = (
    FuzzCase("valid_postcode", VALID_POSTCODE, Expectation.SHOWS_SUGGESTIONS, InputMode.KEYSTROKE),
    FuzzCase("special_characters", "!@#$%^&*()", Expectation.NO_CRASH),
    FuzzCase("sql_injection", "' OR '1'='1", Expectation.NO_SQL_ERROR_TEXT),
    FuzzCase("sql_injection_no_results", "' OR '1'='1", Expectation.SHOWS_NO_RESULTS),
    FuzzCase("script_tag", '<script>alert("XSS")</script>', Expectation.NO_SCRIPT_EXECUTION),
    FuzzCase("long_string", "a" * 500, Expectation.NO_CRASH),
    FuzzCase("whitespace_only", "     ", Expectation.CLEARS_ON_WHITESPACE),
    FuzzCase("partial_postcode", "123", Expectation.NO_CRASH, InputMode.KEYSTROKE, exploratory=True),
    FuzzCase("unicode_emoji", "\U0001F355\U0001F600Test", Expectation.NO_CRASH),
)

LEAKAGE_PAYLOADS: tuple[str, ...] = (
    "'; DROP TABLE stores; --",
    "<img src=x onerror=alert('XSS')>",
    "../../../etc/passwd",
    "{{7*7}}",
)

FUZZ_CATALOG: dict[str, FuzzCase] = {case.name: case for case in FUZZ_CASES}


def get_case(name: str) -> FuzzCase:
    try:
        return FUZZ_CATALOG[name]
    except KeyError as exc:
        known = ", ".join(sorted(FUZZ_CATALOG))
        raise KeyError(f"Fuzz case '{name}' not found. Known cases: {known}") from exc
