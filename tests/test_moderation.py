"""Tests for the sensitive-word filter service."""

from __future__ import annotations

import json

import pytest

from zplus.services.moderation import (
    DEFAULT_SENSITIVE_WORDS,
    STORAGE_KEY,
    ContentModerationFilter,
)
from zplus.utils.errors import DuplicateError, FormatError, ModerationError


# ---------------------------------------------------------------------------
# Word list lifecycle
# ---------------------------------------------------------------------------

def test_first_access_seeds_default_words(moderation, store):
    assert store.get(STORAGE_KEY) is None

    words = moderation.list_words()

    assert words == DEFAULT_SENSITIVE_WORDS
    assert len(words) == 20
    assert json.loads(store.get(STORAGE_KEY)) == DEFAULT_SENSITIVE_WORDS


def test_cleared_list_is_not_reseeded(moderation):
    moderation.list_words()

    result = moderation.clear_words()

    assert result.success
    assert moderation.list_words() == []
    assert moderation.list_words() == []


def test_add_word_appears_exactly_once(empty_moderation):
    first = empty_moderation.add_word("spam")
    second = empty_moderation.add_word("spam")

    assert first.success and first.error is None
    assert not second.success
    assert second.error == "duplicate"
    assert empty_moderation.list_words().count("spam") == 1


def test_add_word_trims_before_storing(empty_moderation):
    assert empty_moderation.add_word("  spam \t").success
    assert empty_moderation.list_words() == ["spam"]
    assert empty_moderation.add_word("spam ").error == "duplicate"


@pytest.mark.parametrize("word", ["", "   ", "\n\t", None, 42])
def test_add_word_rejects_blank_or_non_string(empty_moderation, word):
    result = empty_moderation.add_word(word)

    assert not result.success
    assert result.error == "validation"
    assert empty_moderation.list_words() == []


def test_duplicate_check_is_case_sensitive(empty_moderation):
    empty_moderation.add_word("spam")

    assert empty_moderation.add_word("SPAM").success
    assert empty_moderation.list_words() == ["spam", "SPAM"]


def test_remove_word(empty_moderation):
    empty_moderation.add_word("spam")
    empty_moderation.add_word("scam")

    result = empty_moderation.remove_word("spam")

    assert result.success
    assert empty_moderation.list_words() == ["scam"]


def test_remove_absent_word_is_not_found(empty_moderation):
    empty_moderation.add_word("Spam")

    result = empty_moderation.remove_word("spam")

    assert not result.success
    assert result.error == "not_found"
    assert empty_moderation.list_words() == ["Spam"]


def test_batch_add_reports_partial_success(empty_moderation):
    empty_moderation.add_word("spam")

    result = empty_moderation.add_words_batch(["scam", "  ", "spam", " scam ", 42, "ham "])

    assert result.success
    assert result.added == 2
    assert result.skipped == 4
    assert result.skipped_words == ["  ", "spam", " scam ", 42]
    assert empty_moderation.list_words() == ["spam", "scam", "ham"]
    assert result.to_dict()["message"] == "Added 2 sensitive words, skipped 4"


def test_result_raise_for_error(empty_moderation):
    empty_moderation.add_word("spam")
    empty_moderation.add_word("ham").raise_for_error()

    with pytest.raises(DuplicateError) as excinfo:
        empty_moderation.add_word("spam").raise_for_error()

    assert isinstance(excinfo.value, ModerationError)
    assert excinfo.value.code == "duplicate"


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------

def test_export_is_json_array_of_current_list(moderation):
    exported = moderation.export_words()

    assert json.loads(exported) == DEFAULT_SENSITIVE_WORDS
    assert "违法" in exported


def test_import_replaces_list_and_collapses_duplicates(moderation):
    result = moderation.import_words('["a"," ","b","b"]')

    assert result.success
    assert result.count == 2
    assert moderation.list_words() == ["a", "b"]


def test_import_drops_non_strings_and_trims(moderation):
    result = moderation.import_words(b'[" spam ", 3, null, "", {"x": 1}, "scam"]')

    assert result.count == 2
    assert moderation.list_words() == ["spam", "scam"]


@pytest.mark.parametrize("payload", ["not json", '{"words": ["a"]}', '"spam"', "", None])
def test_import_rejects_non_array_and_keeps_list(moderation, payload):
    before = moderation.list_words()

    result = moderation.import_words(payload)

    assert not result.success
    assert result.error == "format"
    assert moderation.list_words() == before
    with pytest.raises(FormatError):
        result.raise_for_error()


def test_exported_list_imports_into_another_store(moderation):
    moderation.add_word("c++")
    target = ContentModerationFilter(store=type(moderation.store)(), defaults=[])

    result = target.import_words(moderation.export_words())

    assert result.count == 21
    assert target.list_words() == moderation.list_words()


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", ["", None])
def test_detect_empty_text_never_matches(moderation, text):
    result = moderation.detect(text)

    assert result.matched is False
    assert result.found_words == []


def test_detect_is_case_insensitive(empty_moderation):
    empty_moderation.add_word("spam")

    result = empty_moderation.detect("This is SPAM")

    assert result.matched is True
    assert result.found_words == ["spam"]


def test_detect_reports_in_list_order_once_each(empty_moderation):
    empty_moderation.add_words_batch(["alpha", "beta"])

    result = empty_moderation.detect("beta beta then alpha")

    assert result.found_words == ["alpha", "beta"]


def test_detect_matches_substrings(moderation):
    result = moderation.detect("这是一个钓鱼网站，还有病毒木马")

    assert result.found_words == ["钓鱼网站", "病毒", "木马"]


def test_detect_escapes_pattern_characters(empty_moderation):
    empty_moderation.add_word("a.b")

    assert not empty_moderation.detect("axb").matched
    assert empty_moderation.detect("A.B").matched


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", ["", None])
def test_filter_returns_empty_text_unchanged(moderation, text):
    assert moderation.filter(text) is text


def test_filter_is_noop_with_empty_list(empty_moderation):
    assert empty_moderation.filter("破解黑客工具") == "破解黑客工具"


def test_filter_is_noop_without_matches(moderation):
    text = "Nothing to see here."
    assert moderation.filter(text) == text


def test_filter_replaces_every_occurrence_case_insensitively(empty_moderation):
    empty_moderation.add_word("spam")

    assert empty_moderation.filter("Spam, SPAM and spam") == "***, *** and ***"


def test_filter_replaces_longest_words_first(empty_moderation):
    empty_moderation.import_words('["黑客", "破解黑客"]')

    filtered = empty_moderation.filter("破解黑客工具")

    assert filtered == "***工具"
    assert filtered.count("***") == 1


def test_filter_longest_first_regardless_of_list_order(empty_moderation):
    empty_moderation.import_words('["攻击", "人身攻击"]')

    assert empty_moderation.filter("禁止人身攻击和攻击") == "禁止***和***"


def test_filter_is_idempotent(moderation):
    text = "这里有赌博和诈骗信息，还有黑客破解教程"

    once = moderation.filter(text)

    assert once == "这里有***和***信息，还有******教程"
    assert moderation.filter(once) == once


def test_filter_escapes_words_and_keeps_replacement_literal(empty_moderation):
    empty_moderation.add_words_batch(["c++", "(spam)"])

    assert empty_moderation.filter("I like c++ and (SPAM)!") == "I like *** and ***!"
    assert empty_moderation.filter("c++", replacement=r"\1") == r"\1"


def test_filter_uses_configured_replacement(store):
    moderation = ContentModerationFilter(store, defaults=["spam"], replacement="[removed]")

    assert moderation.filter("spam here") == "[removed] here"
    assert moderation.filter("spam here", replacement="#") == "# here"


# ---------------------------------------------------------------------------
# Moderation outcome
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", [
    "完全正常的内容",
    "这里有赌博",
    "黑客和破解",
    "VIRUS 病毒",
    "a",
])
def test_moderate_agrees_with_filter(moderation, text):
    outcome = moderation.moderate(text)

    assert outcome.original_text == text
    assert outcome.filtered_text == moderation.filter(text)
    assert outcome.found_words == moderation.detect(text).found_words
    assert outcome.matched == (outcome.filtered_text != outcome.original_text)


def test_moderate_empty_text(moderation):
    outcome = moderation.moderate("")

    assert outcome.to_dict() == {
        "original_text": "",
        "filtered_text": "",
        "matched": False,
        "found_words": [],
    }


def test_moderate_with_custom_replacement(moderation):
    outcome = moderation.moderate("远离毒品", replacement="[屏蔽]")

    assert outcome.filtered_text == "远离[屏蔽]"
    assert outcome.found_words == ["毒品"]


# ---------------------------------------------------------------------------
# Combined pattern and stored data
# ---------------------------------------------------------------------------

def test_word_pattern_prefers_longer_words(empty_moderation):
    assert empty_moderation.word_pattern() is None

    empty_moderation.import_words('["黑客", "破解黑客", "a+b"]')
    pattern = empty_moderation.word_pattern()

    assert pattern.findall("破解黑客 A+B aab") == ["破解黑客", "A+B"]


@pytest.mark.parametrize("raw", ["{not json", '"spam"', '{"a": 1}'])
def test_corrupt_stored_list_reads_as_empty(store, raw):
    store.set(STORAGE_KEY, raw)
    moderation = ContentModerationFilter(store)

    assert moderation.list_words() == []
    assert moderation.detect("赌博").matched is False
    assert store.get(STORAGE_KEY) == raw


def test_custom_storage_key_is_isolated(store):
    posts = ContentModerationFilter(store, key="post_words", defaults=["spam"])
    messages = ContentModerationFilter(store, key="message_words", defaults=[])

    posts.add_word("scam")

    assert posts.list_words() == ["spam", "scam"]
    assert messages.list_words() == []


def test_moderate_word_equal_to_replacement_matches_without_change(store):
    moderation = ContentModerationFilter(store, defaults=["***"])

    outcome = moderation.moderate("a *** b")

    assert outcome.matched is True
    assert outcome.found_words == ["***"]
    assert outcome.filtered_text == outcome.original_text == "a *** b"
    assert moderation.moderate("a *** b", replacement="#").filtered_text == "a # b"
