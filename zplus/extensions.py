"""
Shared Flask extension instances.

Kept in their own module so blueprints can import them without importing the
app factory.
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Bound to the app by create_app(). Limits come from RATELIMIT_* config;
# the moderation blueprint adds @limiter.limit(RATELIMIT_MODERATE) on text checks.
limiter = Limiter(key_func=get_remote_address)
