"""Store-finder input fuzzing."""

from .harness import (
    CaseState,
    InputFuzzHarness,
    assert_no_leakage,
    assert_no_script_execution,
    find_leaks,
    submit,
)
from .payloads import FUZZ_CASES, FUZZ_CATALOG, LEAKAGE_PAYLOADS, Expectation, FuzzCase, InputMode, get_case

__all__ = [
    "CaseState",
    "Expectation",
    "FUZZ_CASES",
    "FUZZ_CATALOG",
    "FuzzCase",
    "InputFuzzHarness",
    "InputMode",
    "LEAKAGE_PAYLOADS",
    "assert_no_leakage",
    "assert_no_script_execution",
    "find_leaks",
    "get_case",
    "submit",
]
