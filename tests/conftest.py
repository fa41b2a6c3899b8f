"""Shared test fixtures and utilities for tasklist tests.

Provides:
- MockContext for isolating tests from global settings
- Temporary workspace fixtures
- In-memory key-value store and a controllable id clock
- Local timezone pinning and structlog reset between tests
"""

import os
import tempfile
import time
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import patch

import pytest
import structlog

from tasklist.config import (
    TaskListSettings,
    reload_settings,
    set_context_settings,
    set_settings,
)
from tasklist.logging import clear_context
from tasklist.models import TaskIdGenerator
from tasklist.persistence import MemoryKeyValueStore


class MockContext:
    """Context manager for isolating tests from global state.

    Handles:
    - Clearing TASKLIST_* environment variables
    - Providing a temporary workspace directory
    - Resetting the global settings singleton afterwards

    Usage:
        with MockContext() as ctx:
            settings = ctx.settings
            workspace = ctx.workspace_dir
    """

    def __init__(self, **settings_kwargs):
        self._settings_kwargs = settings_kwargs
        self._temp_dir: tempfile.TemporaryDirectory | None = None
        self._settings: TaskListSettings | None = None
        self._original_env: dict[str, str] = {}

    def __enter__(self) -> "MockContext":
        self._temp_dir = tempfile.TemporaryDirectory()
        workspace_dir = Path(self._temp_dir.name)

        for var in list(os.environ):
            if var.startswith("TASKLIST_"):
                self._original_env[var] = os.environ.pop(var)

        self._settings = TaskListSettings(
            workspace_dir=workspace_dir,
            **self._settings_kwargs,
        )
        set_settings(self._settings)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        set_context_settings(None)
        os.environ.update(self._original_env)
        reload_settings()
        if self._temp_dir:
            self._temp_dir.cleanup()

    @property
    def settings(self) -> TaskListSettings:
        """Get the test settings instance."""
        if self._settings is None:
            raise RuntimeError("MockContext not entered")
        return self._settings

    @property
    def workspace_dir(self) -> Path:
        """Get the temporary workspace directory."""
        if self._temp_dir is None:
            raise RuntimeError("MockContext not entered")
        return Path(self._temp_dir.name)


class FixedClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int = 1) -> None:
        self.now_ms += ms


@pytest.fixture
def mock_context() -> Generator[MockContext, None, None]:
    """Fixture providing an isolated test context."""
    with MockContext() as ctx:
        yield ctx


@pytest.fixture
def temp_workspace(tmp_path: Path) -> Path:
    """Fixture providing a temporary workspace directory."""
    workspace = tmp_path / "workspace"
    workspace.mkdir(parents=True)
    return workspace


@pytest.fixture
def clean_settings(temp_workspace: Path) -> TaskListSettings:
    """Fixture providing default settings with no environment influence."""
    with patch.dict(os.environ, {}, clear=True):
        return TaskListSettings(workspace_dir=temp_workspace)


@pytest.fixture
def memory_kv() -> MemoryKeyValueStore:
    """Fixture providing an empty in-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Fixture providing a clock frozen until advanced."""
    return FixedClock()


@pytest.fixture
def id_generator(fixed_clock: FixedClock) -> TaskIdGenerator:
    """Fixture providing an id generator driven by the frozen clock."""
    return TaskIdGenerator(clock=fixed_clock)


@pytest.fixture
def local_tz(monkeypatch) -> Generator[Callable[[str], None], None, None]:
    """Fixture returning a setter for the process-local timezone.

    The original zone is restored once the test finishes.
    """
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")

    def set_zone(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield set_zone
    monkeypatch.undo()
    time.tzset()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Restore structlog defaults after tests that configure logging."""
    yield
    clear_context()
    structlog.reset_defaults()
