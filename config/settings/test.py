"""
Test settings – in-memory SQLite and a fake Edge organization.
The Edge backend itself is replaced per test with ``httpx.MockTransport``.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("EDGE_ORGANIZATION", "test-org")
os.environ.setdefault("EDGE_ENDPOINT", "https://edge.test/v1")

from .base import *  # noqa: E402, F401, F403

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOGGING["root"]["level"] = "WARNING"  # noqa: F405
