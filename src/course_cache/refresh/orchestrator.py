"""Safely refreshing a course from its source repository.

A refresh never modifies the live cache of a course. It locks the course
record, builds a complete new cache version next to the live one and only
then switches the persisted `cache_version` over to it. If anything goes
wrong, the new version is deleted and the record is left untouched.
"""

import logging
import shutil
import sqlite3
from collections.abc import Collection
from enum import StrEnum
from pathlib import Path

from course_cache.core.cache_paths import CachePaths
from course_cache.core.course import Course
from course_cache.core.file_filter import ExerciseFileFilter, FileFilter
from course_cache.core.report import RefreshError, RefreshFailure, Report
from course_cache.core.test_scanner import AnnotationTestScanner, PointScanner
from course_cache.infrastructure.config import CourseCacheConfig, get_config
from course_cache.infrastructure.database.course_store import CourseNotFoundError, CourseStore
from course_cache.refresh.artifact_builder import ArtifactBuilder
from course_cache.refresh.metadata_sync import MetadataSync
from course_cache.refresh.packaging import StubPackager
from course_cache.refresh.permissions import PermissionPropagator
from course_cache.refresh.repository_sync import RepositorySync

logger = logging.getLogger(__name__)


class RefreshState(StrEnum):
    IDLE = "idle"
    LOCKED = "locked"
    STAGING = "staging"
    SYNCING = "syncing"
    BUILDING_ARTIFACTS = "building-artifacts"
    PACKAGING = "packaging"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled-back"


class CourseRefresher:
    def __init__(
        self,
        store: CourseStore,
        config: CourseCacheConfig | None = None,
        *,
        repository_sync: RepositorySync | None = None,
        file_filter: FileFilter | None = None,
        point_scanner: PointScanner | None = None,
        permission_propagator: PermissionPropagator | None = None,
    ):
        self.store = store
        self.config = config or get_config()
        self.cache_root = self.config.cache_root
        timeout = self.config.commands.timeout
        self.repository_sync = repository_sync or RepositorySync(
            self.config.commands.git_executable, timeout
        )
        self.metadata_sync = MetadataSync(point_scanner or AnnotationTestScanner())
        self.artifact_builder = ArtifactBuilder(file_filter or ExerciseFileFilter())
        self.packager = StubPackager()
        self.permission_propagator = permission_propagator or PermissionPropagator(
            self.config.permissions, timeout
        )
        self.state = RefreshState.IDLE

    def refresh_course(self, course: Course) -> Report:
        """Refresh `course` and reload it from the database.

        Returns:
            The report of a successful refresh, possibly with warnings.

        Raises:
            RefreshFailure: If the refresh recorded any error. The course
                record and the live cache are then unchanged.
        """
        if course.id is None:
            raise ValueError(f"Course {course.name!r} has not been stored yet")

        report = Report()
        old_paths: CachePaths | None = None
        try:
            with self.store.transaction() as tx:
                working = tx.load_course(course.id)
                self._enter(RefreshState.LOCKED, working)
                old_paths = CachePaths.for_course(self.cache_root, working)
                new_paths: CachePaths | None = None
                try:
                    self.repository_sync.check_source(working)
                    working.cache_version += 1
                    new_paths = CachePaths.for_course(self.cache_root, working)
                    self._stage(working, old_paths, new_paths)
                    self._run_stages(working, new_paths, report)
                    if report.successful:
                        self._enter(RefreshState.COMMITTING, working)
                        tx.save_course(working)
                        tx.commit()
                except RefreshError as e:
                    logger.error(f"Refreshing {working.name} failed: {e}")
                    report.add_error(str(e))
                except Exception as e:
                    logger.exception(f"Unexpected error while refreshing {working.name}")
                    report.add_error(str(e))

                if not report.successful:
                    if new_paths is not None:
                        try:
                            self._remove_tree(new_paths.root)
                        except OSError as e:
                            logger.exception(f"Could not remove incomplete cache {new_paths.root}")
                            report.add_error(
                                f"Could not remove incomplete cache {new_paths.root}: {e}"
                            )
                    if tx.active:
                        tx.rollback()
                    self._enter(RefreshState.ROLLED_BACK, working)
        except CourseNotFoundError as e:
            logger.error(f"Cannot refresh {course.name}: {e}")
            report.add_error(str(e))
        except sqlite3.Error as e:
            logger.exception(f"Database error while refreshing {course.name}")
            report.add_error(str(e))

        if report.successful and old_paths is not None:
            self._enter(RefreshState.COMMITTED, course)
            try:
                self._remove_tree(old_paths.root)
            except OSError as e:
                report.add_warning(f"Could not remove old cache {old_paths.root}: {e}")

        self._reload(course, report)
        report.close()
        if not report.successful:
            raise RefreshFailure(report)
        return report

    def _reload(self, course: Course, report: Report) -> None:
        try:
            self.store.reload(course)
        except (CourseNotFoundError, sqlite3.Error) as e:
            logger.error(f"Could not reload {course.name}: {e}")
            message = f"Could not reload course {course.name}: {e}"
            if report.successful:
                report.add_warning(message)
            else:
                report.add_error(message)

    def _enter(self, state: RefreshState, course: Course) -> None:
        self.state = state
        logger.info(f"{course.name}: {state}")

    def _stage(self, course: Course, old_paths: CachePaths, new_paths: CachePaths) -> None:
        self._enter(RefreshState.STAGING, course)
        self._remove_stale_versions(new_paths.course_dir, keep=old_paths.cache_version)
        self._remove_tree(new_paths.root)
        new_paths.root.mkdir(parents=True)

    def _run_stages(self, course: Course, paths: CachePaths, report: Report) -> None:
        self._enter(RefreshState.SYNCING, course)
        self.repository_sync.sync(course, paths.clone_path)
        skipped: Collection[str] = self.metadata_sync.run(course, paths.clone_path, report)

        self._enter(RefreshState.BUILDING_ARTIFACTS, course)
        self.artifact_builder.run(course, paths, skipped)

        self._enter(RefreshState.PACKAGING, course)
        self.packager.run(course, paths, skipped)
        self.permission_propagator.run(paths.root, self.cache_root)

    @staticmethod
    def _remove_stale_versions(course_dir: Path, keep: int) -> None:
        """Delete leftover version directories of earlier, interrupted refreshes."""
        if not course_dir.is_dir():
            return
        for child in course_dir.iterdir():
            if child.is_dir() and child.name.isdigit() and int(child.name) != keep:
                logger.warning(f"Removing stale cache version {child}")
                shutil.rmtree(child)

    @staticmethod
    def _remove_tree(path: Path) -> None:
        if path.exists():
            logger.debug(f"Removing {path}")
            shutil.rmtree(path)


def refresh_course(
    course: Course, store: CourseStore, config: CourseCacheConfig | None = None
) -> Report:
    """Refresh `course` with the default collaborators."""
    return CourseRefresher(store, config).refresh_course(course)
