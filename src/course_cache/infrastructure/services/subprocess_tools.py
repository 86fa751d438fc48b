import logging
import shlex
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Exception raised when an external command fails.

    Attributes:
        cmd: The command that was executed
        return_code: The exit code, or None if the command did not finish
        stdout: The captured standard output
        stderr: The captured standard error
    """

    def __init__(
        self,
        message: str,
        cmd: list[str],
        return_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ):
        super().__init__(message)
        self.cmd = cmd
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr


class CommandTimeoutError(CommandError):
    """Exception raised when an external command exceeds its timeout."""

    pass


def format_command(cmd: list[str]) -> str:
    return shlex.join(cmd)


def run_command(
    cmd: list[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run an external command and wait for it to finish.

    Args:
        cmd: Command and arguments to execute
        cwd: Working directory for the command
        timeout: Seconds to wait before giving up; None waits forever

    Returns:
        CompletedProcess with stdout/stderr captured

    Raises:
        CommandError: If the executable is missing or exits with a non-zero code
        CommandTimeoutError: If the command does not finish within `timeout`
    """
    command_line = format_command(cmd)
    logger.debug(f"Running: {command_line}")

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandTimeoutError(
            f"Command timed out after {timeout} seconds: {command_line}", cmd
        ) from e
    except OSError as e:
        raise CommandError(f"Could not run {command_line}: {e}", cmd) from e

    if result.returncode != 0:
        stderr = result.stderr.strip()
        message = f"Command failed with exit code {result.returncode}: {command_line}"
        if stderr:
            message = f"{message}\n{stderr}"
        raise CommandError(
            message,
            cmd,
            return_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result
