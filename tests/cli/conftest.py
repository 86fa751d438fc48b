"""
Shared fixtures and configuration for CLI tests.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

import pytest
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def cli_environment(tmp_path, monkeypatch):
    """Keep logs, config lookups and the working directory inside tmp_path."""
    for var in list(os.environ):
        if var.upper().startswith("COURSE_CACHE_"):
            monkeypatch.delenv(var)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setattr(
        "course_cache.cli.commands.shared.get_log_file_path",
        lambda: tmp_path / "course-cache.log",
    )
    monkeypatch.chdir(tmp_path)
    yield
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        if isinstance(handler, RotatingFileHandler):
            handler.close()
            root_logger.removeHandler(handler)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def base_args(tmp_path):
    """Global options pointing the CLI at a database and cache below tmp_path."""
    return ["--db-path", str(tmp_path / "courses.db"), "--cache-root", str(tmp_path / "cache")]
