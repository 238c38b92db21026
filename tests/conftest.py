"""Shared test fixtures for the ussdkit test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from ussdkit.conversation.models import UssdRequest
from ussdkit.conversation.session import Session
from ussdkit.conversation.stores import InMemoryHashStore
from ussdkit.security import FernetStringCipher


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            if self.original_env[key] is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = self.original_env[key]


@pytest.fixture
def env_override() -> Generator[Callable[[dict[str, str]], EnvOverrideContext], None, None]:
    """Context manager for temporarily setting environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"USSDKIT_DEBUG": "true"}):
                # test code here
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    yield _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from ussdkit.config import get_settings
    from ussdkit.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture
def store() -> InMemoryHashStore:
    """Create a fresh in-memory store for each test."""
    return InMemoryHashStore()


@pytest.fixture
def cipher() -> FernetStringCipher:
    """Fernet cipher with a low iteration count to keep tests fast."""
    return FernetStringCipher("test-secret", iterations=1_000)


@pytest.fixture
def make_session(
    store: InMemoryHashStore, cipher: FernetStringCipher
) -> Callable[..., Any]:
    """Factory for sessions bound to the shared store.

    Usage:
        session = await make_session("register", message="Alice")
    """

    async def _make_session(
        screen_id: str,
        message: str = "",
        session_id: str = "sess-1",
    ) -> Session:
        request = UssdRequest(session_id=session_id, message=message, mobile="233200000000")
        existing = await Session.load(request, store, cipher)
        if existing is not None:
            return existing
        return await Session.start(request, store, cipher, screen_id)

    return _make_session
