"""Shared payloads and settings for the test suite."""

from pathlib import Path
from typing import Optional

from src.registry.core.config import Settings

TEST_SECRET = "test-secret-key-0123456789abcdefghij"


def supporter_payload(**overrides):
    payload = {
        "name": "Amara Okoye",
        "dob": "1990-05-15",
        "sex": "Female",
        "location": "L1",
        "community": "C1",
        "clan": "Clan1",
        "district": "D1",
        "contact": "0770000000",
    }
    payload.update(overrides)
    return payload


def make_settings(sqlite_path: Optional[Path] = None, **overrides) -> Settings:
    values = {
        "MODE": "development",
        "SECRET_KEY": TEST_SECRET,
        "BCRYPT_ROUNDS": 4,
        "FIRST_ADMIN_USERNAME": "admin",
        "FIRST_ADMIN_PASSWORD": "provision-pass",
        "LOG_LEVEL": "WARNING",
    }
    if sqlite_path is not None:
        values["SQLITE_PATH"] = str(sqlite_path)
    values.update(overrides)
    return Settings(_env_file=None, **values)
