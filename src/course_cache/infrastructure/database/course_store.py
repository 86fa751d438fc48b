"""Persistent storage of courses using SQLite.

Courses are loaded into plain `Course` objects. All changes made by a
refresh go through a `CourseTransaction`, which holds SQLite's write lock
(`BEGIN IMMEDIATE`) from the moment the course is loaded until the
transaction is committed or rolled back. A second refresh therefore waits
for the first one to finish, and fails once the busy timeout expires.
"""

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from course_cache.core.course import AvailablePoint, Course, Exercise
from course_cache.infrastructure.database.schema import init_database

logger = logging.getLogger(__name__)


class CourseNotFoundError(LookupError):
    pass


class DuplicateCourseError(ValueError):
    pass


def _load_exercises(conn: sqlite3.Connection, course_id: int) -> list[Exercise]:
    exercises = []
    exercise_rows = conn.execute(
        "SELECT * FROM exercises WHERE course_id = ? ORDER BY id", (course_id,)
    ).fetchall()
    for row in exercise_rows:
        point_rows = conn.execute(
            "SELECT id, name FROM available_points WHERE exercise_id = ? ORDER BY id",
            (row["id"],),
        ).fetchall()
        exercises.append(
            Exercise(
                id=row["id"],
                name=row["name"],
                relative_path=row["relative_path"],
                options=json.loads(row["options"]),
                checksum=row["checksum"],
                available_points=[
                    AvailablePoint(id=point["id"], name=point["name"]) for point in point_rows
                ],
            )
        )
    return exercises


def _course_from_row(conn: sqlite3.Connection, row: sqlite3.Row) -> Course:
    return Course(
        id=row["id"],
        name=row["name"],
        source_backend=row["source_backend"],
        source_url=row["source_url"],
        git_branch=row["git_branch"],
        cache_version=row["cache_version"],
        options=json.loads(row["options"]),
        exercises=_load_exercises(conn, row["id"]),
    )


def _load_course(conn: sqlite3.Connection, course_id: int) -> Course:
    row = conn.execute("SELECT * FROM courses WHERE id = ?", (course_id,)).fetchone()
    if row is None:
        raise CourseNotFoundError(f"No course with id {course_id}")
    return _course_from_row(conn, row)


class CourseTransaction:
    """A write transaction on the course database.

    Use `CourseStore.transaction()` to obtain one.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.active = False

    def begin(self) -> None:
        self.conn.execute("BEGIN IMMEDIATE")
        self.active = True

    def commit(self) -> None:
        self.conn.commit()
        self.active = False

    def rollback(self) -> None:
        self.conn.rollback()
        self.active = False

    def load_course(self, course_id: int) -> Course:
        """Load a working copy of a course while holding the write lock."""
        self._check_active()
        return _load_course(self.conn, course_id)

    def save_course(self, course: Course) -> None:
        """Write `course` and reconcile its exercises and points with the database."""
        self._check_active()
        if course.id is None:
            raise ValueError(f"Course {course.name!r} has not been stored yet")

        self.conn.execute(
            """
            UPDATE courses
            SET name = ?, source_backend = ?, source_url = ?, git_branch = ?,
                cache_version = ?, options = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (
                course.name,
                course.source_backend,
                course.source_url,
                course.git_branch,
                course.cache_version,
                json.dumps(course.options),
                course.id,
            ),
        )

        stored_ids = {
            row["id"]
            for row in self.conn.execute(
                "SELECT id FROM exercises WHERE course_id = ?", (course.id,)
            )
        }
        kept_ids = {exercise.id for exercise in course.exercises if exercise.id is not None}
        for exercise_id in stored_ids - kept_ids:
            # Points are removed by ON DELETE CASCADE
            self.conn.execute("DELETE FROM exercises WHERE id = ?", (exercise_id,))

        for exercise in course.exercises:
            self._save_exercise(course.id, exercise)

    def _save_exercise(self, course_id: int, exercise: Exercise) -> None:
        if exercise.id is None:
            cursor = self.conn.execute(
                """
                INSERT INTO exercises (course_id, name, relative_path, options, checksum)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    course_id,
                    exercise.name,
                    exercise.relative_path,
                    json.dumps(exercise.options),
                    exercise.checksum,
                ),
            )
            exercise.id = cursor.lastrowid
        else:
            self.conn.execute(
                """
                UPDATE exercises
                SET name = ?, relative_path = ?, options = ?, checksum = ?
                WHERE id = ?
                """,
                (
                    exercise.name,
                    exercise.relative_path,
                    json.dumps(exercise.options),
                    exercise.checksum,
                    exercise.id,
                ),
            )

        stored_ids = {
            row["id"]
            for row in self.conn.execute(
                "SELECT id FROM available_points WHERE exercise_id = ?", (exercise.id,)
            )
        }
        kept_ids = {point.id for point in exercise.available_points if point.id is not None}
        for point_id in stored_ids - kept_ids:
            self.conn.execute("DELETE FROM available_points WHERE id = ?", (point_id,))
        for point in exercise.available_points:
            if point.id is None:
                cursor = self.conn.execute(
                    "INSERT INTO available_points (exercise_id, name) VALUES (?, ?)",
                    (exercise.id, point.name),
                )
                point.id = cursor.lastrowid

    def _check_active(self) -> None:
        if not self.active:
            raise RuntimeError("Transaction is no longer active")


class CourseStore:
    """Course repository backed by a SQLite database."""

    def __init__(self, db_path: Path, timeout: float = 30.0):
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        if not self._initialized:
            init_database(self.db_path, self.timeout).close()
            self._initialized = True
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=self.timeout,
            isolation_level=None,  # Autocommit; transactions are explicit
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[CourseTransaction]:
        """Open a write transaction.

        The transaction is committed when the block completes normally and
        rolled back when it raises. Code inside the block may also commit or
        roll back explicitly.
        """
        with self._connection() as conn:
            tx = CourseTransaction(conn)
            tx.begin()
            try:
                yield tx
            except BaseException:
                if tx.active:
                    tx.rollback()
                raise
            if tx.active:
                tx.commit()

    def add_course(self, course: Course) -> Course:
        with self._connection() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO courses
                        (name, source_backend, source_url, git_branch, cache_version, options)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        course.name,
                        course.source_backend,
                        course.source_url,
                        course.git_branch,
                        course.cache_version,
                        json.dumps(course.options),
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise DuplicateCourseError(f"Course {course.name!r} already exists") from e
            course.id = cursor.lastrowid
        logger.info(f"Added course {course.name!r} (id {course.id})")
        return course

    def load_course(self, course_id: int) -> Course:
        with self._connection() as conn:
            return _load_course(conn, course_id)

    def find_course(self, name: str) -> Course | None:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM courses WHERE name = ?", (name,)).fetchone()
            return _course_from_row(conn, row) if row is not None else None

    def list_courses(self) -> list[Course]:
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM courses ORDER BY name").fetchall()
            return [_course_from_row(conn, row) for row in rows]

    def delete_course(self, course_id: int) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM courses WHERE id = ?", (course_id,))
        logger.info(f"Deleted course {course_id}")

    def reload(self, course: Course) -> None:
        """Replace the state of `course` with its persisted state."""
        if course.id is None:
            raise ValueError(f"Course {course.name!r} has not been stored yet")
        course.update_from(self.load_course(course.id))
