"""
Sensitive-word moderation for user-submitted text.

Keeps the banned-word list in a key-value store (one JSON array under a
well-known key) and offers detection and substitution over arbitrary text.
Matching is case-insensitive and substring based, not word-boundary based:
"spam" matches inside "SPAMMER". Longer words are substituted before shorter
ones so a phrase like "人身攻击" is replaced whole before "攻击" could split it.

Operations never raise for expected failures; they return an OperationResult
whose ``error`` is one of "validation", "duplicate", "not_found", "format".
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional
import json
import re
from flask import current_app
from zplus.services.kv_store import KeyValueStore, get_store
from zplus.utils.cache import alternation_pattern, word_pattern
from zplus.utils.errors import (
    ERROR_CLASSES,
    DuplicateError,
    FormatError,
    ModerationError,
    NotFoundError,
    ValidationError,
    log_info,
    log_warning,
)
from zplus.utils.sanitize import preview_text

STORAGE_KEY = "z_sensitive_words"
DEFAULT_REPLACEMENT = "***"

# Seeded into the store the first time the list is read
DEFAULT_SENSITIVE_WORDS = [
    "违法",
    "违规",
    "色情",
    "低俗",
    "暴力",
    "恐怖",
    "赌博",
    "诈骗",
    "毒品",
    "政治",
    "反共",
    "邪教",
    "辱骂",
    "人身攻击",
    "垃圾广告",
    "钓鱼网站",
    "病毒",
    "木马",
    "黑客",
    "破解",
]


@dataclass
class OperationResult:
    """Outcome of a word-list mutation."""

    success: bool
    message: str
    error: Optional[str] = None
    count: Optional[int] = None

    @classmethod
    def ok(cls, message: str, count: Optional[int] = None) -> "OperationResult":
        return cls(success=True, message=message, count=count)

    @classmethod
    def failure(cls, error: ModerationError) -> "OperationResult":
        return cls(success=False, message=error.message, error=error.code)

    def raise_for_error(self) -> None:
        """Raise the matching ModerationError subclass if this result failed."""
        if self.error:
            raise ERROR_CLASSES[self.error](self.message)

    def to_dict(self) -> Dict[str, Any]:
        data = {"success": self.success, "message": self.message}
        if self.error:
            data["error"] = self.error
        if self.count is not None:
            data["count"] = self.count
        return data


@dataclass
class BatchResult:
    """Outcome of add_words_batch. Batches always succeed, possibly partially."""

    added: int = 0
    skipped: int = 0
    skipped_words: List[Any] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return True

    @property
    def message(self) -> str:
        return f"Added {self.added} sensitive words, skipped {self.skipped}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "added": self.added,
            "skipped": self.skipped,
            "skipped_words": list(self.skipped_words),
        }


@dataclass(frozen=True)
class DetectionResult:
    matched: bool
    found_words: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ModerationOutcome:
    original_text: Optional[str]
    filtered_text: Optional[str]
    matched: bool
    found_words: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _normalize_word(word: Any) -> str:
    """Trim a candidate word, raising ValidationError if nothing is left."""
    trimmed = word.strip() if isinstance(word, str) else ""
    if not trimmed:
        raise ValidationError("Sensitive word cannot be empty")
    return trimmed


def _detect(words: Iterable[str], text: str) -> DetectionResult:
    found: List[str] = []
    for word in words:
        if word and word not in found and word_pattern(word).search(text):
            found.append(word)
    return DetectionResult(matched=bool(found), found_words=found)


def _filter(words: Iterable[str], text: str, replacement: str) -> str:
    # sorted() is stable, so equal-length words keep list order
    for word in sorted(words, key=len, reverse=True):
        if not word:
            continue
        # A callable replacement keeps backslashes in the token literal
        text = word_pattern(word).sub(lambda _match: replacement, text)
    return text


class ContentModerationFilter:
    """
    Banned-word list plus detection and substitution over text.

    Every operation is one read-modify-write against the store; concurrent
    writers are not coordinated and the last write wins.

    Usage:
        >>> moderation = ContentModerationFilter(MemoryStore())
        >>> moderation.add_word("spam").success
        True
        >>> moderation.filter("This is SPAM")
        'This is ***'
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = STORAGE_KEY,
        defaults: Optional[Iterable[str]] = None,
        replacement: str = DEFAULT_REPLACEMENT,
    ):
        self.store = store
        self.key = key
        self.defaults = list(DEFAULT_SENSITIVE_WORDS if defaults is None else defaults)
        self.replacement = replacement

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def _load(self) -> List[str]:
        raw = self.store.get(self.key)
        if raw is None:
            words = list(self.defaults)
            self._save(words)
            return words

        try:
            words = json.loads(raw)
        except ValueError:
            log_warning("Stored word list is not valid JSON; treating it as empty", key=self.key)
            return []

        if not isinstance(words, list):
            log_warning("Stored word list is not a JSON array; treating it as empty", key=self.key)
            return []

        return [w for w in words if isinstance(w, str)]

    def _save(self, words: List[str]) -> None:
        self.store.set(self.key, json.dumps(words, ensure_ascii=False))

    # ------------------------------------------------------------------
    # Word list management
    # ------------------------------------------------------------------

    def list_words(self) -> List[str]:
        """Return the current list, seeding the defaults on first access."""
        return self._load()

    def add_word(self, word: str) -> OperationResult:
        """Append ``word`` (trimmed). Duplicate check is case-sensitive."""
        try:
            words = self._load()
            trimmed = _normalize_word(word)
            if trimmed in words:
                raise DuplicateError("Sensitive word already exists")
        except ModerationError as e:
            log_info("Sensitive word rejected", reason=e.code, word=preview_text(word if isinstance(word, str) else None))
            return OperationResult.failure(e)

        words.append(trimmed)
        self._save(words)
        log_info("Sensitive word added", word=trimmed, total=len(words))
        return OperationResult.ok("Sensitive word added")

    def remove_word(self, word: str) -> OperationResult:
        """Remove an exact (case-sensitive) entry."""
        words = self._load()
        if word not in words:
            return OperationResult.failure(NotFoundError("Sensitive word does not exist"))

        words.remove(word)
        self._save(words)
        log_info("Sensitive word removed", word=word, total=len(words))
        return OperationResult.ok("Sensitive word removed")

    def add_words_batch(self, words: Iterable[Any]) -> BatchResult:
        """
        Add many words at once; blanks, non-strings and duplicates are skipped.

        Skipped entries are reported as given, not trimmed. The list is written
        once at the end.
        """
        current = self._load()
        result = BatchResult()

        for word in words:
            try:
                trimmed = _normalize_word(word)
            except ValidationError:
                trimmed = ""
            if trimmed and trimmed not in current:
                current.append(trimmed)
                result.added += 1
            else:
                result.skipped += 1
                result.skipped_words.append(word)

        self._save(current)
        log_info("Sensitive word batch processed", added=result.added, skipped=result.skipped)
        return result

    def clear_words(self) -> OperationResult:
        """Replace the list with an empty one. An empty list is not re-seeded."""
        self._save([])
        log_info("Sensitive word list cleared", key=self.key)
        return OperationResult.ok("Sensitive word list cleared")

    def export_words(self) -> str:
        """Serialize the current list as a JSON array."""
        return json.dumps(self._load(), ensure_ascii=False)

    def import_words(self, payload: str | bytes) -> OperationResult:
        """
        Replace the list with the words in a JSON array payload.

        Non-string and blank entries are dropped; the rest are trimmed and
        de-duplicated, keeping the first occurrence. A payload that is not a
        JSON array fails with "format" and leaves the list unchanged.
        """
        try:
            try:
                data = json.loads(payload)
            except (TypeError, ValueError) as e:
                raise FormatError("Import data is not valid JSON") from e
            if not isinstance(data, list):
                raise FormatError("Import data must be a JSON array")
        except FormatError as e:
            log_info("Sensitive word import rejected", reason=e.message)
            return OperationResult.failure(e)

        trimmed = (item.strip() for item in data if isinstance(item, str))
        words = list(dict.fromkeys(w for w in trimmed if w))

        self._save(words)
        log_info("Sensitive words imported", count=len(words), received=len(data))
        return OperationResult.ok(f"Imported {len(words)} sensitive words", count=len(words))

    def word_pattern(self) -> Optional[re.Pattern]:
        """One case-insensitive pattern matching any listed word, longest first."""
        return alternation_pattern(self._load())

    # ------------------------------------------------------------------
    # Text checks
    # ------------------------------------------------------------------

    def detect(self, text: Optional[str]) -> DetectionResult:
        """List every banned word found in ``text``, in word-list order."""
        if not text:
            return DetectionResult(matched=False, found_words=[])
        return _detect(self._load(), text)

    def filter(self, text: Optional[str], replacement: Optional[str] = None) -> Optional[str]:
        """Replace every banned word in ``text`` with ``replacement``, longest words first."""
        if not text:
            return text
        token = self.replacement if replacement is None else replacement
        return _filter(self._load(), text, token)

    def moderate(self, text: Optional[str], replacement: Optional[str] = None) -> ModerationOutcome:
        """
        Detect and filter ``text`` against a single read of the word list.

        ``matched`` comes from detection, not from comparing the texts. A
        banned word spelled exactly like the replacement token (e.g. "***")
        is reported as matched while ``filtered_text`` equals the original.
        """
        if not text:
            return ModerationOutcome(original_text=text, filtered_text=text, matched=False, found_words=[])

        token = self.replacement if replacement is None else replacement
        words = self._load()
        detection = _detect(words, text)
        filtered = _filter(words, text, token) if detection.matched else text

        if detection.matched:
            log_info("Sensitive content filtered", found=len(detection.found_words), text=preview_text(text))

        return ModerationOutcome(
            original_text=text,
            filtered_text=filtered,
            matched=detection.matched,
            found_words=detection.found_words,
        )


def get_filter() -> ContentModerationFilter:
    """Return a filter bound to the current app's store and settings."""
    config = current_app.config
    return ContentModerationFilter(
        get_store(),
        key=config.get("SENSITIVE_WORDS_KEY", STORAGE_KEY),
        replacement=config.get("MODERATION_REPLACEMENT", DEFAULT_REPLACEMENT),
    )
