import copy
from typing import Any

from attrs import Factory, define

SUPPORTED_SOURCE_BACKENDS = frozenset({"git"})

DEFAULT_COURSE_OPTIONS: dict[str, Any] = {
    "hidden": False,
    "hide_after": None,
    "spreadsheet_key": None,
}

DEFAULT_EXERCISE_OPTIONS: dict[str, Any] = {
    "deadline": None,
    "publish_time": None,
    "gdocs_sheet": None,
    "hidden": False,
    "returnable": None,
}


def default_course_options() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_COURSE_OPTIONS)


def default_exercise_options() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_EXERCISE_OPTIONS)


@define
class AvailablePoint:
    """A grading point that the tests of an exercise can award."""

    name: str
    id: int | None = None


@define
class Exercise:
    name: str
    relative_path: str
    options: dict[str, Any] = Factory(default_exercise_options)
    checksum: str = ""
    available_points: list[AvailablePoint] = Factory(list)
    id: int | None = None

    @property
    def point_names(self) -> list[str]:
        return [point.name for point in self.available_points]

    def find_point(self, name: str) -> AvailablePoint | None:
        for point in self.available_points:
            if point.name == name:
                return point
        return None


@define
class Course:
    """A named collection of exercises sourced from a repository.

    `cache_version` selects the on-disk cache tree that is currently live.
    Version 0 means the course has never been refreshed successfully.
    """

    name: str
    source_url: str
    source_backend: str = "git"
    git_branch: str = "master"
    cache_version: int = 0
    options: dict[str, Any] = Factory(default_course_options)
    exercises: list[Exercise] = Factory(list)
    id: int | None = None

    @property
    def exercise_names(self) -> list[str]:
        return [exercise.name for exercise in self.exercises]

    def find_exercise(self, name: str) -> Exercise | None:
        for exercise in self.exercises:
            if exercise.name == name:
                return exercise
        return None

    def update_from(self, other: "Course") -> None:
        """Overwrite the state of this course with that of `other`."""
        self.id = other.id
        self.name = other.name
        self.source_url = other.source_url
        self.source_backend = other.source_backend
        self.git_branch = other.git_branch
        self.cache_version = other.cache_version
        self.options = other.options
        self.exercises = other.exercises
