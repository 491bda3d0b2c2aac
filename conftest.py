# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Shared fixtures: point the app at a throwaway in-memory store before import."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from devtrack.core.dependencies import get_database  # noqa: E402


@pytest.fixture(autouse=True)
def clean_store():
    """Fresh tables for every test."""
    database = get_database()
    database.init_schema()
    database.truncate_all()
    yield
