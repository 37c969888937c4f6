"""Root conftest: shared test configuration."""

import os

# Settings are read at import time by backalley.main; tests never need a real pepper
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
