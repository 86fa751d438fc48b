"""Centralized log path management for course_cache."""

from pathlib import Path

import platformdirs

from course_cache.infrastructure.config import APP_NAME


def get_log_dir() -> Path:
    """Get the system-appropriate log directory.

    Returns:
        Path to the log directory (created if it doesn't exist)
        - Windows: %LOCALAPPDATA%/course-cache/Logs
        - macOS: ~/Library/Logs/course-cache
        - Linux: ~/.local/state/course-cache/log
    """
    log_dir = Path(platformdirs.user_log_dir(APP_NAME, appauthor=False))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def get_main_log_path() -> Path:
    """Get the path to the main log file."""
    return get_log_dir() / "course-cache.log"
