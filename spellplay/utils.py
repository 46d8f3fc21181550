"""Utility functions for spellplay application."""

from datetime import datetime

from .interfaces import Clock


def normalize(text: str) -> str:
    """Normalize text for answer comparison (trimmed, case-folded)."""
    return (text or '').strip().casefold()


def matches(expected: str, answer: str) -> bool:
    """Check if two strings match ignoring case and surrounding whitespace."""
    return normalize(expected) == normalize(answer)


def split_into_words(text: str) -> list[str]:
    """Split pasted text into words, dropping empty entries."""
    return [w.strip() for w in (text or '').split() if w.strip()]


def common_prefix_length(typed: str, target: str) -> int:
    """Length of the longest case-insensitive common prefix of typed and target."""
    length = 0
    for typed_char, target_char in zip(typed, target):
        if typed_char.casefold() != target_char.casefold():
            break
        length += 1
    return length


class SystemClock(Clock):
    """Wall clock used outside of tests."""

    def now(self) -> datetime:
        return datetime.now()
