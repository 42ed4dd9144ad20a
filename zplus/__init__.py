"""
Application factory and global configuration.

Creates the Flask app, validates production settings, attaches the key-value
store that holds the sensitive-word list, configures rate limiting, registers
the moderation API and the CLI commands. Startup/config concerns live here;
moderation logic lives in zplus.services.moderation.
"""

from __future__ import annotations
import os
from typing import Optional
from flask import Flask, Response
from dotenv import load_dotenv  # <-- ensure .env is loaded for local dev
from .extensions import limiter
from .routes.moderation import moderation_bp
from .services.kv_store import KeyValueStore, init_store


def _validate_production_security(app: Flask, cfg_path: str) -> None:
    """
    Validate critical settings in production environments.

    Raises RuntimeError if production requirements are not met, so the app
    never starts with an insecure or non-durable configuration.

    Checks:
    - DEBUG must be False
    - STORAGE_BACKEND must be durable (not "memory")
    - Supabase credentials must be present when STORAGE_BACKEND is "supabase"
    """
    is_production = "ProdConfig" in cfg_path
    is_test = app.config.get("TESTING", False)

    if not is_production or is_test:
        return

    errors = []

    if app.config.get("DEBUG", False):
        errors.append(
            "DEBUG must be False in production. Debug mode exposes sensitive information "
            "and should never be enabled in production environments."
        )

    backend = app.config.get("STORAGE_BACKEND", "file")
    if backend == "memory":
        errors.append(
            "STORAGE_BACKEND=memory loses the word list on restart. "
            "Use 'file' or 'supabase' in production."
        )
    elif backend == "supabase" and not (
        app.config.get("SUPABASE_URL") and app.config.get("SUPABASE_SERVICE_ROLE_KEY")
    ):
        errors.append(
            "STORAGE_BACKEND=supabase requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
        )

    if errors:
        error_msg = "\n\n[ERROR] PRODUCTION CONFIG VALIDATION FAILED:\n\n" + "\n\n".join(f"  * {err}" for err in errors)
        error_msg += "\n\n[WARNING] The application will not start until these issues are resolved.\n"
        raise RuntimeError(error_msg)

    app.logger.info("[OK] Production config validation passed")


def create_app(config_object: Optional[str] = None, store: Optional[KeyValueStore] = None) -> Flask:
    """
    Build the app.

    Args:
        config_object: dotted path of a config class; defaults to ZPLUS_CONFIG
        store: key-value store to use instead of the configured backend
    """
    # override=False so production env vars are not overwritten by a stale .env file
    load_dotenv(override=False)

    app = Flask(__name__)

    # Allow ZPLUS_CONFIG to override (e.g., zplus.config.DevConfig)
    cfg_path = config_object or os.getenv("ZPLUS_CONFIG", "zplus.config.ProdConfig")
    try:
        app.config.from_object(cfg_path)
    except (ImportError, AttributeError) as e:
        app.logger.warning(f"Could not load config object {cfg_path}: {e}")

    _validate_production_security(app, cfg_path)

    limiter.init_app(app)

    if not app.config.get("RATELIMIT_ENABLED", True):
        limiter.enabled = False

    # Return word lists as readable UTF-8 rather than \uXXXX escapes
    app.json.ensure_ascii = False

    init_store(app, store)

    @app.after_request
    def apply_security_headers(resp: Response) -> Response:
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Cache-Control"] = "no-store"
        return resp

    # Blueprints
    app.register_blueprint(moderation_bp, url_prefix="/api/v1/moderation")

    # Register CLI commands
    from zplus.cli import moderate_command, words_cli
    app.cli.add_command(words_cli)
    app.cli.add_command(moderate_command)

    return app
