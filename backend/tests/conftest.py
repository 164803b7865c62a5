"""Root conftest - shared test configuration."""

import os

# Never touch a real database, remote API or snapshot from the test suite
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REMOTE_API_URL", "http://pricing.test")
os.environ.setdefault("REMOTE_API_EMAIL", "admin@test.local")
os.environ.setdefault("REMOTE_API_PASSWORD", "test-password")
os.environ.setdefault("LOG_FORMAT", "text")
