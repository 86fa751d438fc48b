import logging
from pathlib import Path

from course_cache.core.report import FilesystemError
from course_cache.infrastructure.config import PermissionsConfig
from course_cache.infrastructure.services.subprocess_tools import CommandError, run_command

logger = logging.getLogger(__name__)


def parent_dirs_up_to(path: Path, top: Path) -> list[Path]:
    """Return the ancestors of `path` from `top` (inclusive) downwards.

    Raises:
        ValueError: If `path` is not below `top`.
    """
    relative = path.relative_to(top)
    result = [top]
    current = top
    for part in relative.parts[:-1]:
        current = current / part
        result.append(current)
    return result


class PermissionPropagator:
    """Applies the configured mode and group to a new cache version.

    The cache version directory is changed recursively; its ancestors up to
    and including the cache root are changed non-recursively, so that
    intermediate directories created by the refresh are accessible too.
    """

    def __init__(self, config: PermissionsConfig, timeout: float | None = None):
        self.chmod = config.chmod
        self.chgrp = config.chgrp
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.chmod or self.chgrp)

    def run(self, version_root: Path, cache_root: Path) -> None:
        if not self.enabled:
            logger.debug("No cache permissions configured")
            return

        try:
            for directory in parent_dirs_up_to(version_root, cache_root):
                self._apply(directory, recursive=False)
            self._apply(version_root, recursive=True)
        except CommandError as e:
            raise FilesystemError(f"Failed to set permissions: {e}") from e
        logger.info(f"Set permissions on {version_root}")

    def _apply(self, path: Path, recursive: bool) -> None:
        flags = ["-R"] if recursive else []
        if self.chmod:
            run_command(["chmod", *flags, self.chmod, str(path)], timeout=self.timeout)
        if self.chgrp:
            run_command(["chgrp", *flags, self.chgrp, str(path)], timeout=self.timeout)
