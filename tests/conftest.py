"""Shared pytest fixtures for sniaff tests."""

from pathlib import Path

import pytest

from sniaff.core.registry import SessionRegistry
from sniaff.core.state import StateStore

from tests.helpers import FakeContainerRemover

SNIAFF_ENV_VARS = (
    "SNIAFF_DIR",
    "SNIAFF_SESSIONS_DIR",
    "SNIAFF_LOGS_DIR",
    "SNIAFF_CONTAINER_PREFIX",
    "SNIAFF_DOCKER_BIN",
    "SNIAFF_CONTAINER_RUNTIME",
    "SNIAFF_LOG_LEVEL",
    "SNIAFF_VERBOSE",
)


@pytest.fixture(autouse=True)
def mock_sniaff_home(tmp_path, monkeypatch):
    """Point SNIAFF_DIR at tmp_path so tests never touch ~/.sniaff.

    Also clears the other SNIAFF_* variables and disables the docker
    runtime so the CLI never shells out to docker.
    """
    for var in SNIAFF_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("SNIAFF_DIR", str(tmp_path))
    monkeypatch.setenv("SNIAFF_CONTAINER_RUNTIME", "none")
    return tmp_path


@pytest.fixture
def sessions_dir(mock_sniaff_home) -> Path:
    """Sessions root matching the default derived from SNIAFF_DIR."""
    return mock_sniaff_home / "sessions"


@pytest.fixture
def store(sessions_dir) -> StateStore:
    return StateStore(sessions_dir)


@pytest.fixture
def fake_remover() -> FakeContainerRemover:
    return FakeContainerRemover()


@pytest.fixture
def registry(store, fake_remover) -> SessionRegistry:
    return SessionRegistry(store, container_remover=fake_remover)
