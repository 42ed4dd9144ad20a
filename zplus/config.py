"""
Centralized configuration for all environments.

Select a config by setting:
  ZPLUS_CONFIG=zplus.config.DevConfig      # local dev
  ZPLUS_CONFIG=zplus.config.ProdConfig     # production (default if unset)
  ZPLUS_CONFIG=zplus.config.TestConfig     # pytest

Notes:
- STORAGE_BACKEND is one of "memory", "file", "supabase"
- Rate limiting uses Flask-Limiter v3 keys (RATELIMIT_*).
"""

from __future__ import annotations
import os


class BaseConfig:
    DEBUG = False
    TESTING = False

    # Key-value storage for the word list
    STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "file").strip().lower()
    STORAGE_PATH = os.getenv("STORAGE_PATH", os.path.join("instance", "zplus_store.json"))

    # Supabase (hosted key-value table)
    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    SUPABASE_KV_TABLE = os.getenv("SUPABASE_KV_TABLE", "kv_store")

    # Moderation
    SENSITIVE_WORDS_KEY = os.getenv("SENSITIVE_WORDS_KEY", "z_sensitive_words")
    MODERATION_REPLACEMENT = os.getenv("MODERATION_REPLACEMENT", "***")
    MODERATION_MAX_TEXT_LENGTH = int(os.getenv("MODERATION_MAX_TEXT_LENGTH", "20000"))
    MODERATION_MAX_REPLACEMENT_LENGTH = 16
    # Empty means word-list mutations need no admin token
    MODERATION_ADMIN_TOKEN = os.getenv("MODERATION_ADMIN_TOKEN", "")

    # Flask-Limiter v3
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "120 per minute; 5000 per day")
    RATELIMIT_MODERATE = os.getenv("RATELIMIT_MODERATE", "60 per minute; 2 per second")

    # Import uploads
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1MB max request body



class ProdConfig(BaseConfig):
    """Production settings (selected by default if ZPLUS_CONFIG is unset)."""
    pass


class DevConfig(BaseConfig):
    """Developer-friendly settings."""
    ENV = "development"
    DEBUG = True
    # Relaxed rate limits for development/testing
    RATELIMIT_MODERATE = "600 per minute"


class TestConfig(BaseConfig):
    """CI/pytest settings."""
    TESTING = True
    DEBUG = True
    # In-memory store so tests never touch disk
    STORAGE_BACKEND = "memory"
    MODERATION_ADMIN_TOKEN = ""
    # Usually disable the limiter in tests to avoid flakiness
    RATELIMIT_ENABLED = False
