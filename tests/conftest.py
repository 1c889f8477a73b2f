"""Test environment defaults; must be set before guardroster settings are first imported."""

import os

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("JWT_SECRET", "test-secret-for-guardroster-unit-tests")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("STORAGE_BASE_URL", "")
