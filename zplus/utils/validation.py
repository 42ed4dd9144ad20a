"""
Request payload validation for the moderation API.

Each helper returns (payload, error_message) so routes can reply 400 with the
message when validation fails. Text is never trimmed or rewritten here:
moderation must see exactly what the user submitted.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
from flask import current_app

_DEFAULT_MAX_TEXT_LEN = 20000
_DEFAULT_MAX_REPLACEMENT_LEN = 16


def _max_text_len() -> int:
    return current_app.config.get("MODERATION_MAX_TEXT_LENGTH", _DEFAULT_MAX_TEXT_LEN)


def _max_replacement_len() -> int:
    return current_app.config.get("MODERATION_MAX_REPLACEMENT_LENGTH", _DEFAULT_MAX_REPLACEMENT_LEN)


def validate_text_payload(data: Any) -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Validates a detect/filter/moderate body and returns (payload, error_message).
    On success, payload has:
      - text (string, possibly empty; null is allowed and passed through)
      - replacement (string or None for the configured default)
    """
    if not isinstance(data, dict):
        return {}, "Request body must be a JSON object."

    text = data.get("text")
    if text is not None and not isinstance(text, str):
        return {}, "Text must be a string."
    if text and len(text) > _max_text_len():
        return {}, f"Text must be under {_max_text_len()} characters."

    replacement = data.get("replacement")
    if replacement is not None:
        if not isinstance(replacement, str):
            return {}, "Replacement must be a string."
        if len(replacement) > _max_replacement_len():
            return {}, f"Replacement must be at most {_max_replacement_len()} characters."

    return {"text": text, "replacement": replacement}, None


def validate_word_payload(data: Any) -> Tuple[Dict[str, Any], Optional[str]]:
    """Validates an add-word body. Blank words are left for the filter to reject."""
    if not isinstance(data, dict):
        return {}, "Request body must be a JSON object."

    word = data.get("word")
    if not isinstance(word, str):
        return {}, "Word must be a string."

    return {"word": word}, None


def validate_batch_payload(data: Any) -> Tuple[Dict[str, List[Any]], Optional[str]]:
    """Validates a batch-add body: {"words": [...]}. Entries are checked by the filter."""
    if not isinstance(data, dict):
        return {}, "Request body must be a JSON object."

    words = data.get("words")
    if not isinstance(words, list):
        return {}, "Words must be a list."

    return {"words": words}, None
