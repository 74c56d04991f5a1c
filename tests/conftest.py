"""
Shared fixtures for the persistbase test suite.
"""

import pytest

from persistbase.config import PERSISTENCE_OPTION, SQLITE_MODE, PersistenceConfig
from persistbase.core.context import PersistenceContext, reset_context
from persistbase.persistence.database import dispose_all


@pytest.fixture(autouse=True)
def clean_process_state():
    """Every test starts without a process context or cached engines."""
    reset_context()
    yield
    reset_context()
    dispose_all()


@pytest.fixture
def sqlite_config(tmp_path) -> PersistenceConfig:
    """Configuration with persistence on and a writable store directory."""
    (tmp_path / "var" / "db").mkdir(parents=True)
    return PersistenceConfig(basepath=tmp_path, options={PERSISTENCE_OPTION: SQLITE_MODE})


@pytest.fixture
def memory_config(tmp_path) -> PersistenceConfig:
    """Configuration without a persistence option."""
    return PersistenceConfig(basepath=tmp_path)


@pytest.fixture
def context(sqlite_config) -> PersistenceContext:
    return PersistenceContext(sqlite_config)


@pytest.fixture
def memory_context(memory_config) -> PersistenceContext:
    return PersistenceContext(memory_config)


@pytest.fixture
def handle(context):
    handle = context.active_handle()
    assert handle is not None, "SQLite store should be usable"
    return handle
