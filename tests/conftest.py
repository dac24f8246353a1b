"""
Pytest configuration and shared fixtures.
"""

import pytest
from pathlib import Path
from typing import Dict, Optional

from bizslug.database import init_database, get_session
from bizslug.logger import get_logger, reset_logger
from bizslug.storage import EstablishmentStore

FIXED_MILLIS = 1760000123456


@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch):
    """Fresh global logger per test, no console or file output."""
    monkeypatch.delenv("BIZSLUG_LOG_DIR", raising=False)
    monkeypatch.delenv("BIZSLUG_LOG_LEVEL", raising=False)
    reset_logger()
    logger = get_logger(level="DEBUG", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def fixed_clock():
    """Millisecond clock frozen at FIXED_MILLIS."""
    return lambda: FIXED_MILLIS


@pytest.fixture
def db_path(tmp_path) -> Path:
    path = tmp_path / "establishments.db"
    init_database(path)
    return path


@pytest.fixture
def db_session(db_path):
    """Create a temporary database and return a session."""
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def store(db_session) -> EstablishmentStore:
    return EstablishmentStore(db_session)


class OwnedSlugs:
    """
    In-memory exists() collaborator: slug -> owner id.
    Records every probe as (candidate, exclude_key).
    """

    def __init__(self, owners: Optional[Dict[str, str]] = None):
        self.owners = dict(owners or {})
        self.calls = []

    def __call__(self, candidate: str, exclude_key=None) -> bool:
        self.calls.append((candidate, exclude_key))
        owner = self.owners.get(candidate)
        return owner is not None and owner != exclude_key


@pytest.fixture
def owned_slugs():
    """Factory for OwnedSlugs collaborators."""
    return OwnedSlugs
