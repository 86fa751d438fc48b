"""Checksumming and archiving the stub trees of exercises.

Both operations work on the same sorted enumeration of the stub tree, so an
unchanged stub tree always yields the same checksum and the same archive
layout.
"""

import hashlib
import logging
import os
import zipfile
from collections.abc import Collection
from pathlib import Path, PurePosixPath

from course_cache.core.cache_paths import CachePaths
from course_cache.core.course import Course, Exercise
from course_cache.core.report import FilesystemError

logger = logging.getLogger(__name__)

_READ_CHUNK_SIZE = 64 * 1024


def stub_files(base_path: Path) -> list[PurePosixPath]:
    """Return every file and directory below `base_path`, relative to it.

    The root itself is not included. Entries are sorted by their POSIX path
    string.
    """
    result: list[PurePosixPath] = []
    for dirpath, dirnames, filenames in os.walk(base_path):
        relative_dir = PurePosixPath(*Path(dirpath).relative_to(base_path).parts)
        for name in dirnames + filenames:
            result.append(relative_dir / name)
    return sorted(result, key=str)


def compute_checksum(base_path: Path) -> str:
    """Digest the relative paths and file contents of the tree at `base_path`."""
    digest = hashlib.sha256()
    for relative_path in stub_files(base_path):
        digest.update(str(relative_path).encode("utf-8"))
        full_path = base_path / relative_path
        if full_path.is_dir():
            continue
        with full_path.open("rb") as f:
            for chunk in iter(lambda: f.read(_READ_CHUNK_SIZE), b""):
                digest.update(chunk)
    return digest.hexdigest()


def make_archive(base_path: Path, archive_prefix: str, archive_path: Path) -> Path:
    """Create a ZIP archive of the tree at `base_path`.

    Every entry is stored below `archive_prefix`, so extracting the archive
    recreates `archive_prefix/...`.
    """
    prefix = PurePosixPath(archive_prefix)
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(
        archive_path,
        mode="w",
        compression=zipfile.ZIP_DEFLATED,
        compresslevel=9,
    ) as zf:
        for relative_path in stub_files(base_path):
            zf.write(base_path / relative_path, str(prefix / relative_path))
    return archive_path


class StubPackager:
    """Computes stub checksums and builds one archive per exercise."""

    def run(self, course: Course, paths: CachePaths, skipped: Collection[str] = ()) -> None:
        exercises = [e for e in course.exercises if e.name not in skipped]
        try:
            for exercise in exercises:
                self.checksum_stub(exercise, paths)
            paths.archive_path.mkdir(parents=True, exist_ok=True)
            for exercise in exercises:
                self.archive_stub(exercise, paths)
        except OSError as e:
            raise FilesystemError(f"Failed to package stubs: {e}") from e
        logger.info(f"{course.name}: packaged {len(exercises)} exercises")

    @staticmethod
    def checksum_stub(exercise: Exercise, paths: CachePaths) -> None:
        exercise.checksum = compute_checksum(paths.stub_path / exercise.relative_path)
        logger.debug(f"{exercise.name}: checksum {exercise.checksum}")

    @staticmethod
    def archive_stub(exercise: Exercise, paths: CachePaths) -> Path:
        return make_archive(
            paths.stub_path / exercise.relative_path,
            exercise.relative_path,
            paths.archive_for(exercise.name),
        )
