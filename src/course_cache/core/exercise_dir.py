import logging
import os
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

SKIP_DIRS = frozenset(
    (
        "__pycache__",
        ".git",
        ".hg",
        ".svn",
        ".idea",
        ".vscode",
        ".mypy_cache",
        ".pytest_cache",
        ".tox",
        ".venv",
        "node_modules",
    )
)

EXERCISE_MARKER_DIRS = ("src", "test")


def is_skipped_dir(name: str) -> bool:
    return name in SKIP_DIRS or name.startswith(".")


def is_exercise_dir(path: Path) -> bool:
    """Return True if `path` looks like the root of an exercise."""
    return path.is_dir() and all((path / marker).is_dir() for marker in EXERCISE_MARKER_DIRS)


def find_exercise_dirs(root: Path) -> list[Path]:
    """Find all exercise directories below `root`, sorted by path.

    The search does not descend into exercise directories, so exercises are
    never nested.
    """
    result: list[Path] = []
    for dirpath, dirnames, _filenames in os.walk(root):
        current = Path(dirpath)
        if current != root and is_exercise_dir(current):
            result.append(current)
            dirnames[:] = []
            continue
        dirnames[:] = sorted(d for d in dirnames if not is_skipped_dir(d))
    logger.debug(f"Found {len(result)} exercise directories below {root}")
    return sorted(result, key=lambda p: relative_posix_path(p, root))


def relative_posix_path(path: Path, root: Path) -> str:
    return PurePosixPath(*path.relative_to(root).parts).as_posix()


def exercise_name_for_path(path: Path, root: Path) -> str:
    """Derive the exercise name from its directory path.

    >>> exercise_name_for_path(Path("/course/loops/ForLoop"), Path("/course"))
    'loops-ForLoop'
    """
    return relative_posix_path(path, root).replace("/", "-")
