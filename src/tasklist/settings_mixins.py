"""Settings mixins for application identity, storage and logging.

AppSettingsMixin: Application identity and disk layout (app_name, workspace, paths).
StorageSettingsMixin: Key-value backend selection and the persisted record key.
LoggingSettingsMixin: Log verbosity and output format.

These live outside config.py so each concern can be read and tested on
its own; config.py composes them into TaskListSettings.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator


class AppSettingsMixin:
    """Settings for application identity and disk layout.

    Should be composed with BaseSettings via multiple inheritance.
    """

    app_name: str = Field(
        default="tasklist",
        title="App Name",
        description="Application name, also used for config directories",
    )

    workspace_dir: Path = Field(
        default_factory=lambda: Path.home() / ".tasklist",
        title="Workspace Directory",
        description="Directory holding the file-backed key-value store",
    )

    @field_validator("workspace_dir", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Expand ~ and environment variables in paths."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    def ensure_workspace_exists(self) -> None:
        """Create workspace directory if it doesn't exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


class StorageSettingsMixin:
    """Settings for the durable key-value store."""

    storage_backend: Literal["file", "memory"] = Field(
        default="file",
        title="Storage Backend",
        description="Key-value backend: JSON file in the workspace, or in-memory",
    )

    storage_key: str = Field(
        default="todos",
        title="Storage Key",
        description="Key under which the whole task collection is stored",
    )

    @field_validator("storage_key")
    @classmethod
    def non_empty_key(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("storage_key must not be empty")
        return v

    @property
    def storage_file(self) -> Path:
        """JSON file used by the file backend."""
        return self.workspace_dir / "storage.json"


class LoggingSettingsMixin:
    """Settings for log output.

    Note: This is a mixin, not a BaseSettings subclass, to avoid
    MRO issues when composed with other settings classes.
    """

    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="warning",
        title="Log Level",
        description="Logging verbosity level",
    )
    log_format: Literal["console", "json"] = Field(
        default="console",
        title="Log Format",
        description="Log output format (console for dev, json for production)",
    )
