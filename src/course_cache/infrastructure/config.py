"""Configuration management for course_cache.

This module provides a unified configuration system that supports:
- Configuration files in TOML format
- Environment variables
- Multiple configuration file locations (project, user, system)
- Type-safe configuration using Pydantic

Configuration Priority (highest to lowest):
1. Explicit arguments (command-line options)
2. Environment variables
3. Project configuration file (.course-cache/config.toml or course-cache.toml)
4. User configuration file (~/.config/course-cache/config.toml)
5. System configuration file (/etc/course-cache/config.toml)
6. Default values

Environment Variable Naming:
- Nested fields: COURSE_CACHE_<SECTION>__<FIELD> (e.g., COURSE_CACHE_PATHS__CACHE_ROOT)
"""

import logging
from pathlib import Path

import platformdirs
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

logger = logging.getLogger(__name__)

APP_NAME = "course-cache"


class PathsConfig(BaseModel):
    """Path-related configuration."""

    cache_root: str = Field(
        default="cache",
        description="Directory below which all course caches are stored",
    )

    db_path: str = Field(
        default="course_cache.db",
        description="Path to the course database",
    )


class PermissionsConfig(BaseModel):
    """Permissions applied to newly created cache directories."""

    chmod: str = Field(
        default="",
        description="Mode passed to chmod, e.g. 'g+rwX' (empty: leave modes alone)",
    )

    chgrp: str = Field(
        default="",
        description="Group passed to chgrp (empty: leave group alone)",
    )


class CommandsConfig(BaseModel):
    """External command configuration."""

    git_executable: str = Field(
        default="git",
        description="Git executable used to fetch course sources",
    )

    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds an external command may run (unset: no limit)",
    )


class DatabaseConfig(BaseModel):
    """Database configuration."""

    busy_timeout: float = Field(
        default=30.0,
        ge=0,
        description="Seconds to wait for a course lock held by another refresh",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got {v}")
        return v_upper


class CourseCacheConfig(BaseSettings):
    """Main course_cache configuration.

    Loaded from multiple sources in priority order: explicit arguments >
    environment variables > project config > user config > system config > defaults.

    Environment Variables:
        - COURSE_CACHE_PATHS__CACHE_ROOT: Cache root directory
        - COURSE_CACHE_PATHS__DB_PATH: Database path
        - COURSE_CACHE_PERMISSIONS__CHMOD / __CHGRP: Cache permissions
        - COURSE_CACHE_LOGGING__LOG_LEVEL: Logging level
    """

    model_config = SettingsConfigDict(
        env_prefix="COURSE_CACHE_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    paths: PathsConfig = Field(
        default_factory=PathsConfig,
        description="Path-related configuration",
    )

    permissions: PermissionsConfig = Field(
        default_factory=PermissionsConfig,
        description="Cache directory permissions",
    )

    commands: CommandsConfig = Field(
        default_factory=CommandsConfig,
        description="External command configuration",
    )

    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig,
        description="Database configuration",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )

    @property
    def cache_root(self) -> Path:
        return Path(self.paths.cache_root)

    @property
    def db_path(self) -> Path:
        return Path(self.paths.db_path)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the sources and their priority for settings.

        Priority order (highest to lowest):
        1. Init settings (programmatic overrides)
        2. Environment variables
        3. Project configuration file
        4. User configuration file
        5. System configuration file
        """
        config_files = find_config_files()

        # Collected from lowest to highest priority
        toml_sources = []
        for location in ("system", "user", "project"):
            config_file = config_files[location]
            if config_file is None:
                continue
            toml_sources.append(TomlConfigSettingsSource(settings_cls, toml_file=config_file))
            logger.debug(f"Loaded {location} config: {config_file}")

        return (
            init_settings,
            env_settings,
            *reversed(toml_sources),
        )


def find_config_files() -> dict[str, Path | None]:
    """Find configuration files in standard locations.

    Returns:
        Dictionary with keys 'system', 'user', 'project', each containing
        a Path to the config file if it exists, or None otherwise.
    """
    config_files: dict[str, Path | None] = {
        "system": None,
        "user": None,
        "project": None,
    }

    system_config = Path("/etc") / APP_NAME / "config.toml"
    if system_config.exists():
        config_files["system"] = system_config

    user_config = Path(platformdirs.user_config_dir(APP_NAME, appauthor=False)) / "config.toml"
    if user_config.exists():
        config_files["user"] = user_config

    # .course-cache/config.toml takes precedence over course-cache.toml
    cwd = Path.cwd()
    for project_config in (cwd / f".{APP_NAME}" / "config.toml", cwd / f"{APP_NAME}.toml"):
        if project_config.exists():
            config_files["project"] = project_config
            break

    return config_files


def get_config_file_locations() -> dict[str, Path]:
    """Get the standard configuration file locations.

    Returns:
        Dictionary with keys 'system', 'user', 'project', each containing
        the Path where the config file should be located (may not exist).
    """
    return {
        "system": Path("/etc") / APP_NAME / "config.toml",
        "user": Path(platformdirs.user_config_dir(APP_NAME, appauthor=False)) / "config.toml",
        "project": Path.cwd() / f".{APP_NAME}" / "config.toml",
    }


_config: CourseCacheConfig | None = None


def get_config(reload: bool = False) -> CourseCacheConfig:
    """Get the global configuration instance.

    Args:
        reload: If True, reload the configuration from files and environment.
    """
    global _config

    if _config is None or reload:
        _config = CourseCacheConfig()

    return _config


def create_example_config() -> str:
    """Create an example configuration file content."""
    return """# course-cache configuration file
#
# Configuration files are loaded from (in priority order):
#   1. .course-cache/config.toml or course-cache.toml (project directory)
#   2. ~/.config/course-cache/config.toml (user directory)
#   3. /etc/course-cache/config.toml (system directory, Linux/Unix only)
#
# Environment variables override any setting (highest priority).
# Nested settings use double underscores: COURSE_CACHE_<SECTION>__<KEY>
#
# Examples:
#   COURSE_CACHE_PATHS__CACHE_ROOT=/var/lib/course-cache
#   COURSE_CACHE_PERMISSIONS__CHGRP=www-data
#   COURSE_CACHE_LOGGING__LOG_LEVEL=DEBUG

[paths]
# Directory below which all course caches are stored
cache_root = "cache"

# Path to the course database
db_path = "course_cache.db"

[permissions]
# Mode applied to new cache directories with chmod (empty: skip)
# Example: chmod = "g+rwX"
chmod = ""

# Group applied to new cache directories with chgrp (empty: skip)
# Example: chgrp = "www-data"
chgrp = ""

[commands]
# Git executable used to fetch course sources
git_executable = "git"

# Seconds an external command may run before the refresh fails
# timeout = 600

[database]
# Seconds to wait for a course that is being refreshed by another process
busy_timeout = 30

[logging]
# Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL
log_level = "INFO"
"""


def write_example_config(location: str = "user") -> Path:
    """Write an example configuration file to a standard location.

    Args:
        location: One of "user", "project" or "system".

    Raises:
        ValueError: If location is invalid.
        PermissionError: If cannot write to the location.
    """
    locations = get_config_file_locations()

    if location not in locations:
        raise ValueError(f"Invalid location '{location}'. Must be one of: user, project, system")

    config_path = locations[location]
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(create_example_config())

    logger.info(f"Created example configuration at: {config_path}")

    return config_path
