"""
Configuration for the auth module.

The signing key comes from the platform settings so every process sharing a
secret accepts the same cookies.
"""

from shortener_platform.config import settings

COOKIE_NAME = "user_id"
COOKIE_MAX_AGE = 60 * 60 * 24 * 365

SECRET_KEY: str = settings.SECRET_KEY
