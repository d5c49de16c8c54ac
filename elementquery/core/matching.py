# elementquery/core/matching.py
from __future__ import annotations

"""Text matching
----------------
Needles decide whether a string read from the page (text, attribute, property)
is the one a filter is looking for. Plain strings match exactly, compiled
regexes match with `search`, and `StringMatch` covers the partial /
case-insensitive / whole-word variants.
"""

import re
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class Needle(Protocol):
    def is_match(self, haystack: str) -> bool:
        ...


@dataclass(frozen=True)
class StringMatch:
    """Configurable string matcher.

    Example:
        StringMatch("Never Gonna Give You Up").partial().case_insensitive()
    """

    needle: str
    match_partial: bool = False
    ignore_case: bool = False
    whole_word: bool = False

    def partial(self) -> "StringMatch":
        return replace(self, match_partial=True)

    def case_insensitive(self) -> "StringMatch":
        return replace(self, ignore_case=True)

    def word(self) -> "StringMatch":
        """Match the needle as a whole word anywhere in the haystack."""
        return replace(self, whole_word=True, match_partial=True)

    def is_match(self, haystack: str) -> bool:
        if self.whole_word:
            flags = re.IGNORECASE if self.ignore_case else 0
            return re.search(rf"\b{re.escape(self.needle)}\b", haystack, flags) is not None

        needle, hay = self.needle, haystack
        if self.ignore_case:
            needle, hay = needle.casefold(), hay.casefold()
        return needle in hay if self.match_partial else needle == hay

    def __str__(self) -> str:
        mods = [m for m, on in (("partial", self.match_partial),
                                ("nocase", self.ignore_case),
                                ("word", self.whole_word)) if on]
        return repr(self.needle) + (f" ({', '.join(mods)})" if mods else "")


@dataclass(frozen=True)
class RegexMatch:
    pattern: re.Pattern

    def is_match(self, haystack: str) -> bool:
        return self.pattern.search(haystack) is not None

    def __str__(self) -> str:
        return f"/{self.pattern.pattern}/"


@dataclass(frozen=True)
class CallableMatch:
    fn: Callable[[str], Any]

    def is_match(self, haystack: str) -> bool:
        return bool(self.fn(haystack))

    def __str__(self) -> str:
        return getattr(self.fn, "__name__", "<callable>")


def as_needle(value: Any) -> Needle:
    """Coerce str / compiled regex / Needle / callable into a Needle."""
    if isinstance(value, str):
        return StringMatch(value)
    if isinstance(value, re.Pattern):
        return RegexMatch(value)
    if isinstance(value, Needle):
        return value
    if callable(value):
        return CallableMatch(value)
    raise TypeError(f"Cannot match text against {type(value).__name__!s}: {value!r}")


def matches(needle: Needle, haystack: Optional[Any]) -> bool:
    """Apply a needle to a page value; missing values never match."""
    if haystack is None:
        return False
    if isinstance(haystack, bool):
        # DOM properties come back as JSON values; match them the way JS prints them
        haystack = "true" if haystack else "false"
    return needle.is_match(haystack if isinstance(haystack, str) else str(haystack))


__all__ = ["Needle", "StringMatch", "RegexMatch", "CallableMatch", "as_needle", "matches"]
