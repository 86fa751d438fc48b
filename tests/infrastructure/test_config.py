"""Tests for the configuration system."""

import os
import sys
import tomllib
from pathlib import Path

import pytest
from pydantic import ValidationError

from course_cache.infrastructure.config import (
    CourseCacheConfig,
    create_example_config,
    find_config_files,
    get_config,
    get_config_file_locations,
    write_example_config,
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run each test in an empty project directory with no user config or env overrides."""
    for var in list(os.environ):
        if var.upper().startswith("COURSE_CACHE_"):
            monkeypatch.delenv(var)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    monkeypatch.chdir(project_dir)
    return project_dir


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_paths(self):
        config = CourseCacheConfig()

        assert config.paths.cache_root == "cache"
        assert config.paths.db_path == "course_cache.db"
        assert config.cache_root == Path("cache")
        assert config.db_path == Path("course_cache.db")

    def test_default_permissions(self):
        config = CourseCacheConfig()

        assert config.permissions.chmod == ""
        assert config.permissions.chgrp == ""

    def test_default_commands_and_database(self):
        config = CourseCacheConfig()

        assert config.commands.git_executable == "git"
        assert config.commands.timeout is None
        assert config.database.busy_timeout == 30

    def test_default_logging(self):
        assert CourseCacheConfig().logging.log_level == "INFO"


class TestEnvironmentVariables:
    """Test configuration from environment variables."""

    def test_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("COURSE_CACHE_PATHS__CACHE_ROOT", "/srv/course-cache")
        monkeypatch.setenv("COURSE_CACHE_PERMISSIONS__CHGRP", "instructors")
        monkeypatch.setenv("COURSE_CACHE_COMMANDS__TIMEOUT", "120")

        config = CourseCacheConfig()

        assert config.cache_root == Path("/srv/course-cache")
        assert config.permissions.chgrp == "instructors"
        assert config.commands.timeout == 120

    def test_init_arguments_override_environment(self, monkeypatch):
        monkeypatch.setenv("COURSE_CACHE_PATHS__CACHE_ROOT", "/from/env")

        config = CourseCacheConfig(paths={"cache_root": "/from/cli"})

        assert config.cache_root == Path("/from/cli")


class TestConfigFiles:
    """Test loading configuration from TOML files."""

    def test_project_config(self, isolated_config):
        (isolated_config / "course-cache.toml").write_text(
            '[paths]\ncache_root = "project-cache"\n'
        )

        assert CourseCacheConfig().paths.cache_root == "project-cache"

    def test_dot_directory_takes_precedence(self, isolated_config):
        (isolated_config / "course-cache.toml").write_text('[paths]\ncache_root = "plain"\n')
        (isolated_config / ".course-cache").mkdir()
        (isolated_config / ".course-cache" / "config.toml").write_text(
            '[paths]\ncache_root = "dotted"\n'
        )

        assert CourseCacheConfig().paths.cache_root == "dotted"
        assert find_config_files()["project"] == isolated_config / ".course-cache" / "config.toml"

    @pytest.mark.skipif(sys.platform != "linux", reason="Uses XDG_CONFIG_HOME")
    def test_project_config_overrides_user_config(self, isolated_config, tmp_path):
        user_config = tmp_path / "xdg-config" / "course-cache" / "config.toml"
        user_config.parent.mkdir(parents=True)
        user_config.write_text('[paths]\ncache_root = "user"\ndb_path = "user.db"\n')
        (isolated_config / "course-cache.toml").write_text('[paths]\ncache_root = "project"\n')

        config = CourseCacheConfig()

        assert find_config_files()["user"] == user_config
        assert config.paths.cache_root == "project"
        assert config.paths.db_path == "user.db"

    def test_environment_overrides_project_config(self, isolated_config, monkeypatch):
        (isolated_config / "course-cache.toml").write_text('[logging]\nlog_level = "DEBUG"\n')
        monkeypatch.setenv("COURSE_CACHE_LOGGING__LOG_LEVEL", "ERROR")

        assert CourseCacheConfig().logging.log_level == "ERROR"


class TestValidation:
    """Test validation of configuration values."""

    def test_log_level_is_normalized(self):
        config = CourseCacheConfig(logging={"log_level": "debug"})

        assert config.logging.log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            CourseCacheConfig(logging={"log_level": "LOUD"})

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            CourseCacheConfig(commands={"timeout": 0})

    def test_busy_timeout_must_not_be_negative(self):
        with pytest.raises(ValidationError):
            CourseCacheConfig(database={"busy_timeout": -1})


class TestExampleConfig:
    """Test the generated example configuration."""

    def test_example_config_matches_defaults(self):
        data = tomllib.loads(create_example_config())

        assert CourseCacheConfig(**data).model_dump() == CourseCacheConfig().model_dump()

    def test_write_project_config(self, isolated_config):
        path = write_example_config("project")

        assert path == isolated_config / ".course-cache" / "config.toml"
        assert path.read_text() == create_example_config()
        assert get_config_file_locations()["project"] == path

    def test_invalid_location(self):
        with pytest.raises(ValueError, match="Invalid location"):
            write_example_config("nowhere")


class TestGetConfig:
    """Test the global configuration instance."""

    def test_returns_cached_instance(self):
        first = get_config(reload=True)

        assert get_config() is first

    def test_reload_picks_up_changes(self, monkeypatch):
        get_config(reload=True)
        monkeypatch.setenv("COURSE_CACHE_DATABASE__BUSY_TIMEOUT", "5")

        assert get_config(reload=True).database.busy_timeout == 5
