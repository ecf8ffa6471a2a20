"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration and the shared test
doubles. Autouse fixtures are marked as such.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os
from pathlib import Path

import pytest

from lumen.config import ProviderConfig
from lumen.workspace import Workspace
from tests.helpers import FakeProvider, SleepRecorder

TEST_MODEL = "gemini-test-model"

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================

_ENV_PREFIXES = ("AI_", "GOOGLE_CLOUD_", "GEMINI_", "VERTEX_")


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Ensure a clean provider environment for each test.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("WORKSPACE_ROOT", raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def vertex_config() -> ProviderConfig:
    """Non-streaming vertex config with the default retry settings."""
    return ProviderConfig(
        provider="vertex",
        model=TEST_MODEL,
        use_streaming=False,
        gcp_project="test-project",
        gcp_location="us-central1",
    )


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    root = tmp_path / "workspace"
    root.mkdir()
    return Workspace(root)
