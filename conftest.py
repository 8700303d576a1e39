"""Root conftest: test settings must be in the environment before `settings` is built."""
from __future__ import annotations

import os
from pathlib import Path

TEST_ENV_FILE = Path(__file__).resolve().parent / ".env.test"

# Enough for Settings() to validate without a real database.
TEST_DEFAULTS = {
    "POSTGRES_USER": "teamchat",
    "POSTGRES_PASSWORD": "teamchat",
    "POSTGRES_DB": "teamchat_test",
    "JWT_SECRET": "test-secret",
    "BROADCAST_BACKEND": "memory",
}


def _read_env_file(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if line and not line.startswith("#") and "=" in line:
            key, _, value = line.partition("=")
            values[key.strip()] = value.strip()
    return values


_values = dict(TEST_DEFAULTS)
if TEST_ENV_FILE.exists():
    _values.update(_read_env_file(TEST_ENV_FILE))
for _key, _value in _values.items():
    os.environ.setdefault(_key, _value)
