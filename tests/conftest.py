"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import the package and
`tests.helpers` without requiring PYTHONPATH to be set externally.
"""
import sys
from pathlib import Path

import pytest

from keyobject_lib.config import DATABASE_ENV


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture(autouse=True)
def no_ambient_database(monkeypatch):
    # A YDB_ADDRESS from the developer's shell must not leak into tests
    monkeypatch.delenv(DATABASE_ENV, raising=False)
