import logging
from pathlib import Path

from course_cache.core.course import SUPPORTED_SOURCE_BACKENDS, Course
from course_cache.core.report import ConfigurationError, SyncError
from course_cache.infrastructure.services.subprocess_tools import CommandError, run_command

logger = logging.getLogger(__name__)


class RepositorySync:
    """Materializes the working tree of a course's source repository."""

    def __init__(self, git_executable: str = "git", timeout: float | None = None):
        self.git_executable = git_executable
        self.timeout = timeout

    def check_source(self, course: Course) -> None:
        """Raise ConfigurationError if the course source cannot be synced."""
        if course.source_backend not in SUPPORTED_SOURCE_BACKENDS:
            raise ConfigurationError(
                f"Source types other than git not yet implemented: {course.source_backend!r}"
            )

    def sync(self, course: Course, clone_path: Path) -> None:
        self.check_source(course)
        logger.info(f"Cloning {course.source_url} ({course.git_branch}) into {clone_path}")
        cmd = [
            self.git_executable,
            "clone",
            "-q",
            "-b",
            course.git_branch,
            course.source_url,
            str(clone_path),
        ]
        try:
            run_command(cmd, timeout=self.timeout)
        except CommandError as e:
            raise SyncError(f"Failed to fetch {course.source_url}: {e}") from e
