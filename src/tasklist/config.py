"""Configuration for the task list.

Provides the TaskListSettings class plus global and context-scoped access.

Settings Management:
    1. Global singleton (simple cases):
        set_settings(my_settings)
        settings = get_settings()

    2. Context-based (isolated contexts, tests):
        with SettingsContext(my_settings):
            settings = get_settings()  # Returns my_settings

Settings Loading Priority (highest to lowest):
    1. Environment variables (TASKLIST_* prefix)
    2. Project config (./.tasklist/settings.json)
    3. User config (~/.tasklist/settings.json)
    4. .env file
    5. Default values
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from pathlib import Path
from typing import Generator, Tuple, Type

from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from tasklist.settings_mixins import (
    AppSettingsMixin,
    LoggingSettingsMixin,
    StorageSettingsMixin,
)

__all__ = [
    "TaskListSettings",
    "SettingsContext",
    "SettingsValidationError",
    "get_settings",
    "set_settings",
    "set_context_settings",
    "get_context_settings",
    "validate_settings",
    "reload_settings",
]


def _get_json_config_source(
    settings_cls: Type[BaseSettings],
    json_file: Path,
) -> PydanticBaseSettingsSource | None:
    """Create a JSON config source if the file exists.

    Args:
        settings_cls: The settings class
        json_file: Path to JSON config file

    Returns:
        JsonConfigSettingsSource if file exists, None otherwise
    """
    if not json_file.exists():
        return None
    return JsonConfigSettingsSource(settings_cls, json_file=json_file)


class TaskListSettings(
    StorageSettingsMixin, AppSettingsMixin, LoggingSettingsMixin, BaseSettings
):
    """Settings for the task list.

    Settings are loaded from (in order of precedence):
    1. Environment variables (TASKLIST_ prefix)
    2. Project config (./.{app_name}/settings.json)
    3. User config (~/.{app_name}/settings.json)
    4. .env file
    5. Default values

    Mixins provide organized settings:
    - AppSettingsMixin: Application identity and disk layout
    - StorageSettingsMixin: Key-value backend and record key
    - LoggingSettingsMixin: Log level and format
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKLIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources for layered JSON configuration.

        Note: JSON sources are only included if the files exist.
        """
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
        ]

        app_name = "tasklist"
        field_info = cls.model_fields.get("app_name")
        if field_info is not None and field_info.default:
            app_name = field_info.default

        project_json = _get_json_config_source(
            settings_cls,
            Path.cwd() / f".{app_name}" / "settings.json",
        )
        if project_json:
            sources.append(project_json)

        user_json = _get_json_config_source(
            settings_cls,
            Path.home() / f".{app_name}" / "settings.json",
        )
        if user_json:
            sources.append(user_json)

        sources.append(dotenv_settings)

        return tuple(sources)


# Context variable for settings (takes precedence over global singleton)
_settings_context: ContextVar[TaskListSettings | None] = ContextVar(
    "settings_context", default=None
)

_settings_instance: TaskListSettings | None = None


def get_settings() -> TaskListSettings:
    """Get the current settings instance.

    Settings resolution order:
    1. Context variable (set via SettingsContext or set_context_settings)
    2. Global singleton (set via set_settings)
    3. Fresh TaskListSettings instance (created on first access)
    """
    context_settings = _settings_context.get()
    if context_settings is not None:
        return context_settings

    global _settings_instance
    if _settings_instance is None:
        _settings_instance = TaskListSettings()
    return _settings_instance


def set_settings(settings: TaskListSettings) -> None:
    """Set the global settings instance.

    Args:
        settings: Settings instance to use globally
    """
    global _settings_instance
    _settings_instance = settings


def set_context_settings(settings: TaskListSettings | None) -> Token:
    """Set settings for the current context.

    Args:
        settings: Settings to use in current context, or None to clear

    Returns:
        Token that can be used to reset the context variable.
    """
    return _settings_context.set(settings)


def get_context_settings() -> TaskListSettings | None:
    """Get settings from current context (if any)."""
    return _settings_context.get()


@contextmanager
def SettingsContext(
    settings: TaskListSettings,
) -> Generator[TaskListSettings, None, None]:
    """Context manager for isolated settings.

    Example:
        with SettingsContext(test_settings) as s:
            session = TaskListSession.open()  # uses test_settings

    Args:
        settings: Settings to use within the context

    Yields:
        The settings instance
    """
    token = _settings_context.set(settings)
    try:
        yield settings
    finally:
        _settings_context.reset(token)


def reload_settings() -> TaskListSettings:
    """Reload settings (clears global singleton and context cache).

    Returns:
        Fresh TaskListSettings instance
    """
    global _settings_instance
    _settings_instance = None
    _settings_context.set(None)
    return get_settings()


class SettingsValidationError(Exception):
    """Raised when settings validation fails."""

    pass


def validate_settings(settings: TaskListSettings) -> None:
    """Validate settings for runtime use.

    Performs checks that depend on the filesystem:
    - the workspace path, if present, is a directory
    - the storage file, if present, is a regular file

    Only applies to the file backend; the memory backend touches no disk.

    Args:
        settings: Settings to validate

    Raises:
        SettingsValidationError: If validation fails
    """
    if settings.storage_backend != "file":
        return

    errors = []

    if settings.workspace_dir.exists() and not settings.workspace_dir.is_dir():
        errors.append(
            f"Workspace path '{settings.workspace_dir}' exists but is not a directory."
        )

    if settings.storage_file.exists() and not settings.storage_file.is_file():
        errors.append(
            f"Storage path '{settings.storage_file}' exists but is not a file."
        )

    if errors:
        raise SettingsValidationError("\n".join(errors))
