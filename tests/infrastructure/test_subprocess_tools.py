"""Tests for running external commands."""

import sys

import pytest

from course_cache.infrastructure.services.subprocess_tools import (
    CommandError,
    CommandTimeoutError,
    format_command,
    run_command,
)


class TestRunCommand:
    """Test running external commands."""

    def test_returns_output(self, tmp_path):
        result = run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )

        assert result.returncode == 0
        assert result.stdout.strip() == str(tmp_path)

    def test_non_zero_exit(self):
        script = "import sys; sys.stderr.write('no such branch'); sys.exit(3)"

        with pytest.raises(CommandError) as exc_info:
            run_command([sys.executable, "-c", script])

        error = exc_info.value
        assert error.return_code == 3
        assert error.stderr == "no such branch"
        assert "no such branch" in str(error)
        assert "exit code 3" in str(error)

    def test_missing_executable(self, tmp_path):
        with pytest.raises(CommandError) as exc_info:
            run_command([str(tmp_path / "missing")])

        assert exc_info.value.return_code is None

    def test_timeout(self):
        with pytest.raises(CommandTimeoutError, match="timed out"):
            run_command([sys.executable, "-c", "import time; time.sleep(10)"], timeout=0.2)


class TestFormatCommand:
    """Test formatting commands for log messages."""

    def test_quotes_arguments(self):
        assert format_command(["git", "clone", "my repo"]) == "git clone 'my repo'"
