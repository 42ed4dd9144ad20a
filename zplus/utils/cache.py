"""
Compiled-pattern caching for the moderation filter.

Every filter and detect call matches each banned word as an escaped,
case-insensitive regex. Word lists change rarely, so compiled patterns are
kept in a bounded LRU cache shared by all filters in the process.
"""

from __future__ import annotations
from cachetools import LRUCache
from typing import Iterable, Optional
import re
import threading

# Cache configuration constants
PATTERN_CACHE_MAX_ENTRIES = 2048
ALTERNATION_CACHE_MAX_ENTRIES = 16

# Key format: the raw banned word
_word_patterns: LRUCache = LRUCache(maxsize=PATTERN_CACHE_MAX_ENTRIES)
# Key format: tuple of words, longest first
_alternation_patterns: LRUCache = LRUCache(maxsize=ALTERNATION_CACHE_MAX_ENTRIES)
_cache_lock = threading.Lock()


def word_pattern(word: str) -> re.Pattern:
    """
    Return a compiled case-insensitive pattern matching ``word`` literally.

    Regex metacharacters in the word are escaped, so "c++" or "(spam)" match
    themselves.
    """
    with _cache_lock:
        pattern = _word_patterns.get(word)
        if pattern is not None:
            return pattern

    pattern = re.compile(re.escape(word), re.IGNORECASE)

    with _cache_lock:
        _word_patterns[word] = pattern

    return pattern


def alternation_pattern(words: Iterable[str]) -> Optional[re.Pattern]:
    """
    Return one pattern matching any of ``words``, preferring longer words.

    Returns None when no non-empty words are given.
    """
    ordered = tuple(sorted((w for w in words if w), key=len, reverse=True))
    if not ordered:
        return None

    with _cache_lock:
        pattern = _alternation_patterns.get(ordered)
        if pattern is not None:
            return pattern

    pattern = re.compile("|".join(re.escape(w) for w in ordered), re.IGNORECASE)

    with _cache_lock:
        _alternation_patterns[ordered] = pattern

    return pattern


def clear_pattern_cache() -> None:
    """
    Clear all compiled patterns.

    Useful for:
    - Testing
    - Releasing memory after a large import
    """
    with _cache_lock:
        _word_patterns.clear()
        _alternation_patterns.clear()
