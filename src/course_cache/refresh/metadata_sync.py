"""Reconciling course metadata with the contents of a fresh clone.

Exercises and available points are matched purely by name: anything found
on disk but not recorded is created, anything recorded but no longer found
is deleted. Renaming an exercise directory therefore shows up as one deleted
and one new exercise.
"""

import logging
from pathlib import Path

from course_cache.core.course import (
    AvailablePoint,
    Course,
    Exercise,
    default_course_options,
    default_exercise_options,
)
from course_cache.core.exercise_dir import (
    exercise_name_for_path,
    find_exercise_dirs,
    relative_posix_path,
)
from course_cache.core.options import (
    COURSE_OPTIONS_FILE,
    RecursiveOptionsReader,
    read_course_options,
)
from course_cache.core.report import MetadataParseError, Report
from course_cache.core.test_scanner import PointScanner

logger = logging.getLogger(__name__)


class MetadataSync:
    def __init__(
        self,
        point_scanner: PointScanner,
        options_reader: RecursiveOptionsReader | None = None,
    ):
        self.point_scanner = point_scanner
        self.options_reader = options_reader or RecursiveOptionsReader()

    def run(self, course: Course, clone_path: Path, report: Report) -> set[str]:
        """Update `course` from `clone_path`.

        Returns:
            Names of the exercises whose metadata could not be read; later
            stages skip them.
        """
        self.update_course_options(course, clone_path, report)
        discovered = self.discover_exercises(clone_path, report)
        self.add_new_exercises(course, discovered)
        self.remove_deleted_exercises(course, discovered)
        skipped = self.update_exercise_options(course, clone_path, report)
        self.update_available_points(course, clone_path, report, skipped)
        return skipped

    def update_course_options(self, course: Course, clone_path: Path, report: Report) -> None:
        # A malformed course options file is fatal and propagates
        options, unknown_keys = read_course_options(clone_path, default_course_options())
        for key in unknown_keys:
            report.add_warning(f"Ignoring unknown key {key!r} in {COURSE_OPTIONS_FILE}")
        course.options = options

    @staticmethod
    def discover_exercises(clone_path: Path, report: Report) -> dict[str, str]:
        """Map the name of every exercise found in `clone_path` to its relative path."""
        discovered: dict[str, str] = {}
        for exercise_dir in find_exercise_dirs(clone_path):
            name = exercise_name_for_path(exercise_dir, clone_path)
            relative_path = relative_posix_path(exercise_dir, clone_path)
            if name in discovered:
                report.add_warning(
                    f"Ignoring exercise directory {relative_path}: its name {name!r} "
                    f"is already used by {discovered[name]}"
                )
                continue
            discovered[name] = relative_path
        return discovered

    @staticmethod
    def add_new_exercises(course: Course, discovered: dict[str, str]) -> None:
        for name, relative_path in discovered.items():
            exercise = course.find_exercise(name)
            if exercise is None:
                logger.info(f"{course.name}: new exercise {name}")
                course.exercises.append(Exercise(name=name, relative_path=relative_path))
            else:
                exercise.relative_path = relative_path

    @staticmethod
    def remove_deleted_exercises(course: Course, discovered: dict[str, str]) -> None:
        removed = [e for e in course.exercises if e.name not in discovered]
        for exercise in removed:
            logger.info(f"{course.name}: removed exercise {exercise.name}")
            course.exercises.remove(exercise)

    def update_exercise_options(self, course: Course, clone_path: Path, report: Report) -> set[str]:
        skipped: set[str] = set()
        for exercise in course.exercises:
            try:
                exercise.options = self.options_reader.read_settings(
                    root_dir=clone_path,
                    target_dir=clone_path / exercise.relative_path,
                    defaults=default_exercise_options(),
                )
            except MetadataParseError as e:
                logger.warning(f"{course.name}: {exercise.name}: {e}")
                report.add_error(f"Failed to parse metadata for {exercise.name}: {e}")
                skipped.add(exercise.name)
        return skipped

    def update_available_points(
        self, course: Course, clone_path: Path, report: Report, skipped: set[str]
    ) -> None:
        for exercise in course.exercises:
            if exercise.name in skipped:
                continue
            point_names = self.point_scanner.scan_point_names(clone_path / exercise.relative_path)
            if not point_names:
                report.add_warning(f"Exercise {exercise.name} has no available points")

            for name in sorted(point_names):
                if exercise.find_point(name) is None:
                    exercise.available_points.append(AvailablePoint(name=name))

            exercise.available_points = [
                point for point in exercise.available_points if point.name in point_names
            ]
            logger.debug(f"{exercise.name}: points {exercise.point_names}")
