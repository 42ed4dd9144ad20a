"""
JSON endpoints for the sensitive-word filter.

Endpoints (mounted under /api/v1/moderation):
- /words: list, add, clear
- /words/<word>: remove one word
- /words/batch: add many words
- /words/export, /words/import: JSON array round trip
- /detect, /filter, /moderate: check user text
"""

from __future__ import annotations
from flask import Blueprint, Response, current_app, jsonify, request
from ..extensions import limiter
from ..services.moderation import get_filter
from ..utils.auth import require_admin_token
from ..utils.errors import GENERIC_MESSAGES, STATUS_CODES, sanitize_error
from ..utils.validation import validate_batch_payload, validate_text_payload, validate_word_payload


moderation_bp = Blueprint("moderation", __name__)


def _moderate_limit() -> str:
    return current_app.config.get("RATELIMIT_MODERATE", "60 per minute")


def _result_response(result, success_status: int = 200):
    """Serialize an OperationResult, mapping its error code to an HTTP status."""
    if result.success:
        return jsonify(result.to_dict()), success_status
    return jsonify(result.to_dict()), STATUS_CODES.get(result.error, 400)


def _invalid(message: str):
    return jsonify({"success": False, "error": "validation", "message": message}), 400


def _storage_failure(error: Exception, log_prefix: str):
    message = sanitize_error(error, "storage", log_prefix)
    return jsonify({"success": False, "error": "storage", "message": message}), 500


@moderation_bp.before_request
def _enforce_ajax_for_mutations():
    """Enforce X-Requested-With header on all state-changing requests.

    Custom headers cannot be set by cross-origin requests without CORS and HTML
    forms cannot set them at all, so this blocks cross-site form posts.
    """
    if request.method in ("POST", "PUT", "DELETE", "PATCH"):
        if request.headers.get("X-Requested-With") != "XMLHttpRequest":
            return jsonify({
                "success": False,
                "error": "permission",
                "message": "Invalid request. Please refresh the page and try again."
            }), 403


@moderation_bp.errorhandler(429)
def _rate_limited(_error):
    return jsonify({"success": False, "error": "rate_limit", "message": GENERIC_MESSAGES["rate_limit"]}), 429


# ---------------------------------------------------------------------------
# Word list
# ---------------------------------------------------------------------------

@moderation_bp.route("/words", methods=["GET"])
def list_words():
    """
    Returns the current word list.

    Returns:
        {"words": ["...", ...], "count": n}
    """
    try:
        words = get_filter().list_words()
    except Exception as e:
        return _storage_failure(e, "Failed to list sensitive words")
    return jsonify({"words": words, "count": len(words)})


@moderation_bp.route("/words", methods=["POST"])
@require_admin_token
def add_word():
    """
    Adds one word.

    Request body (JSON):
        {"word": "spam"}

    Returns 201 on success, 400 for a blank word, 409 for a duplicate.
    """
    payload, error = validate_word_payload(request.get_json(silent=True))
    if error:
        return _invalid(error)

    try:
        result = get_filter().add_word(payload["word"])
    except Exception as e:
        return _storage_failure(e, "Failed to add sensitive word")
    return _result_response(result, success_status=201)


@moderation_bp.route("/words/<path:word>", methods=["DELETE"])
@require_admin_token
def remove_word(word: str):
    """Removes one word (exact, case-sensitive). 404 if it is not listed."""
    try:
        result = get_filter().remove_word(word)
    except Exception as e:
        return _storage_failure(e, "Failed to remove sensitive word")
    return _result_response(result)


@moderation_bp.route("/words/batch", methods=["POST"])
@require_admin_token
def add_words_batch():
    """
    Adds many words; blanks and duplicates are skipped, never rejected.

    Request body (JSON):
        {"words": ["spam", "scam", ""]}

    Returns:
        {"success": true, "added": 2, "skipped": 1, "skipped_words": [""], "message": "..."}
    """
    payload, error = validate_batch_payload(request.get_json(silent=True))
    if error:
        return _invalid(error)

    try:
        result = get_filter().add_words_batch(payload["words"])
    except Exception as e:
        return _storage_failure(e, "Failed to add sensitive word batch")
    return jsonify(result.to_dict())


@moderation_bp.route("/words", methods=["DELETE"])
@require_admin_token
def clear_words():
    """Empties the word list."""
    try:
        result = get_filter().clear_words()
    except Exception as e:
        return _storage_failure(e, "Failed to clear sensitive words")
    return _result_response(result)


@moderation_bp.route("/words/export", methods=["GET"])
def export_words():
    """Downloads the word list as a JSON array file."""
    try:
        body = get_filter().export_words()
    except Exception as e:
        return _storage_failure(e, "Failed to export sensitive words")
    return Response(
        body,
        mimetype="application/json",
        headers={"Content-Disposition": 'attachment; filename="sensitive_words.json"'},
    )


@moderation_bp.route("/words/import", methods=["POST"])
@require_admin_token
def import_words():
    """
    Replaces the word list with the JSON array in the raw request body.

    Returns:
        {"success": true, "count": n, "message": "..."} or 400 with error "format"
    """
    body = request.get_data(cache=False)
    try:
        result = get_filter().import_words(body)
    except Exception as e:
        return _storage_failure(e, "Failed to import sensitive words")
    return _result_response(result)


# ---------------------------------------------------------------------------
# Text checks
# ---------------------------------------------------------------------------

@moderation_bp.route("/detect", methods=["POST"])
@limiter.limit(_moderate_limit)
def detect():
    """
    Request body (JSON):
        {"text": "..."}

    Returns:
        {"matched": bool, "found_words": [...]}
    """
    payload, error = validate_text_payload(request.get_json(silent=True))
    if error:
        return _invalid(error)

    try:
        result = get_filter().detect(payload["text"])
    except Exception as e:
        return _storage_failure(e, "Failed to detect sensitive words")
    return jsonify(result.to_dict())


@moderation_bp.route("/filter", methods=["POST"])
@limiter.limit(_moderate_limit)
def filter_text():
    """
    Request body (JSON):
        {"text": "...", "replacement": "***"}

    Returns:
        {"filtered_text": "..."}
    """
    payload, error = validate_text_payload(request.get_json(silent=True))
    if error:
        return _invalid(error)

    try:
        filtered = get_filter().filter(payload["text"], payload["replacement"])
    except Exception as e:
        return _storage_failure(e, "Failed to filter text")
    return jsonify({"filtered_text": filtered})


@moderation_bp.route("/moderate", methods=["POST"])
@limiter.limit(_moderate_limit)
def moderate():
    """
    Detects and filters in one call. Post and message facades use
    filtered_text for storage and found_words for UI warnings.

    Returns:
        {"original_text": "...", "filtered_text": "...", "matched": bool, "found_words": [...]}
    """
    payload, error = validate_text_payload(request.get_json(silent=True))
    if error:
        return _invalid(error)

    try:
        outcome = get_filter().moderate(payload["text"], payload["replacement"])
    except Exception as e:
        return _storage_failure(e, "Failed to moderate text")
    return jsonify(outcome.to_dict())
