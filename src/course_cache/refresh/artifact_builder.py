import logging
from collections.abc import Collection

from course_cache.core.cache_paths import CachePaths
from course_cache.core.course import Course
from course_cache.core.file_filter import FileFilter

logger = logging.getLogger(__name__)


class ArtifactBuilder:
    """Builds the solution and stub trees of every exercise of a course."""

    def __init__(self, file_filter: FileFilter):
        self.file_filter = file_filter

    def run(self, course: Course, paths: CachePaths, skipped: Collection[str] = ()) -> None:
        self.make_solutions(course, paths, skipped)
        self.make_stubs(course, paths, skipped)

    def make_solutions(
        self, course: Course, paths: CachePaths, skipped: Collection[str] = ()
    ) -> None:
        for exercise in course.exercises:
            if exercise.name in skipped:
                continue
            source = paths.clone_path / exercise.relative_path
            destination = paths.solution_path / exercise.relative_path
            destination.mkdir(parents=True, exist_ok=True)
            self.file_filter.make_solution(source, destination)
        logger.info(f"{course.name}: built solutions")

    def make_stubs(self, course: Course, paths: CachePaths, skipped: Collection[str] = ()) -> None:
        for exercise in course.exercises:
            if exercise.name in skipped:
                continue
            source = paths.clone_path / exercise.relative_path
            destination = paths.stub_path / exercise.relative_path
            destination.mkdir(parents=True, exist_ok=True)
            self.file_filter.make_stub(source, destination)
        logger.info(f"{course.name}: built stubs")
