"""Harness line classification.

A line is a function test result when it names a registry function and
carries a result keyword or status glyph. Detection is a substring heuristic
over free text, not a grammar.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

from ..registry import FunctionRegistry, default_registry
from ..schemas.events import (
    RESULT_KEYWORDS,
    SKIP_PATTERNS,
    STATUS_GLYPHS,
    VERDICT_RULES,
    LogEntry,
    Verdict,
    strip_glyphs,
)


@dataclass(frozen=True, slots=True)
class Classification:
    """Answer for a single line."""

    function_name: str | None
    is_result: bool
    verdict: Verdict


def _name_pattern(name: str) -> re.Pattern[str]:
    """Compile the sub-patterns that locate ``name`` inside a normalized line.

    Exact, leading token, trailing token, whitespace-embedded, single or
    double quoted, call syntax and member access.
    """
    e = re.escape(name)
    alternatives = [
        rf"^{e}$",
        rf"^{e}\s",
        rf"\s{e}$",
        rf"\s{e}\s",
        rf"'{e}'",
        rf'"{e}"',
        rf"{e}\(",
        rf"{e}\.",
    ]
    return re.compile("|".join(alternatives))


@lru_cache(maxsize=8)
def _compiled_patterns(registry: FunctionRegistry) -> tuple[tuple[str, re.Pattern[str]], ...]:
    return tuple((name, _name_pattern(name)) for name in registry.ordered)


def normalize_message(message: str) -> str:
    """Strip status glyphs, trim whitespace and lower-case for matching."""
    return strip_glyphs(message).strip().lower()


def extract_function_name(
    message: str,
    registry: FunctionRegistry = default_registry,
) -> str | None:
    """Return the registry function named in ``message``.

    Names are tried longest first, then lexicographically, so the result is
    deterministic when several names match one line.

    Args:
        message: Raw harness line
        registry: Known function names

    Returns:
        Lower-cased function name or None if no match
    """
    if not isinstance(message, str):
        return None

    clean = normalize_message(message)
    if not clean:
        return None

    for name, pattern in _compiled_patterns(registry):
        if name in clean and pattern.search(clean):
            return name

    return None


def _has_result_marker(message: str) -> bool:
    lower = message.lower()
    if any(keyword in lower for keyword in RESULT_KEYWORDS):
        return True
    return any(glyph in message for glyph in STATUS_GLYPHS)


def _is_skipped(message: str) -> bool:
    lower = message.lower()
    return any(pattern in lower for pattern in SKIP_PATTERNS)


def is_function_test_result(
    message: str,
    registry: FunctionRegistry = default_registry,
) -> bool:
    """Check whether ``message`` reports a verdict for a known function."""
    if not isinstance(message, str):
        return False

    if _is_skipped(message):
        return False

    if extract_function_name(message, registry) is None:
        return False

    return _has_result_marker(message)


def assign_verdict(message: str, is_result: bool, function_name: str | None) -> Verdict:
    """Pick the verdict for a line.

    Only function test results get anything other than Info.
    """
    if not is_result or function_name is None:
        return Verdict.INFO

    lower = message.lower()
    for verdict, glyphs, keywords in VERDICT_RULES:
        if any(glyph in message for glyph in glyphs):
            return verdict
        if any(keyword in lower for keyword in keywords):
            return verdict

    return Verdict.INFO


def classify_message(
    message: str,
    registry: FunctionRegistry = default_registry,
) -> Classification:
    """Classify one harness line."""
    if not isinstance(message, str):
        return Classification(function_name=None, is_result=False, verdict=Verdict.INFO)

    function_name = extract_function_name(message, registry)
    is_result = (
        function_name is not None
        and not _is_skipped(message)
        and _has_result_marker(message)
    )
    return Classification(
        function_name=function_name,
        is_result=is_result,
        verdict=assign_verdict(message, is_result, function_name),
    )


def make_filter(term: str) -> Callable[[LogEntry], bool]:
    """Build a case-insensitive substring predicate over raw log messages.

    An empty term matches every entry.
    """
    needle = (term or "").lower()

    def predicate(entry: LogEntry) -> bool:
        return not needle or needle in entry.raw_message.lower()

    return predicate
