from pathlib import Path

from attrs import frozen

from course_cache.core.course import Course

CLONE_DIR = "clone"
SOLUTION_DIR = "solutions"
STUB_DIR = "stubs"
ARCHIVE_DIR = "archives"


@frozen
class CachePaths:
    """Filesystem layout of one cache version of a course.

    All paths live below `cache_root/<course_id>/<cache_version>/`, so two
    different versions of the same course never share a directory.
    """

    cache_root: Path
    course_id: int
    cache_version: int

    @classmethod
    def for_course(cls, cache_root: Path, course: Course) -> "CachePaths":
        if course.id is None:
            raise ValueError(f"Course {course.name!r} has not been stored yet")
        return cls(Path(cache_root), course.id, course.cache_version)

    @property
    def course_dir(self) -> Path:
        return self.cache_root / str(self.course_id)

    @property
    def root(self) -> Path:
        return self.course_dir / str(self.cache_version)

    @property
    def clone_path(self) -> Path:
        return self.root / CLONE_DIR

    @property
    def solution_path(self) -> Path:
        return self.root / SOLUTION_DIR

    @property
    def stub_path(self) -> Path:
        return self.root / STUB_DIR

    @property
    def archive_path(self) -> Path:
        return self.root / ARCHIVE_DIR

    def archive_for(self, exercise_name: str) -> Path:
        return self.archive_path / f"{exercise_name}.zip"
