"""
Data sanitization helpers for privacy-safe logging.

Functions here shorten user-submitted content so it can be written to logs
without copying whole posts or messages into them.
"""

from __future__ import annotations

PREVIEW_LENGTH = 40


def preview_text(text: str | None, limit: int = PREVIEW_LENGTH) -> str:
    """Shorten text for safe logging (e.g., 'Buy cheap watches at…' + length).

    Keeps the first ``limit`` characters and the total length so operators can
    correlate log entries without the full content.
    """
    if not text:
        return "''"
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return repr(flat)
    return f"{flat[:limit]!r}… ({len(text)} chars)"
