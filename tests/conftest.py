from pathlib import Path

import pytest

from course_cache.core.course import Course
from course_cache.infrastructure.config import CourseCacheConfig
from course_cache.infrastructure.database.course_store import CourseStore
from course_cache.refresh.orchestrator import CourseRefresher
from tests.fixtures.source_repos import LocalCopySync, write_exercise


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A course source with two exercises."""
    root = tmp_path / "source"
    write_exercise(root, "basics/Hello", points=("1.1", "1.2"))
    write_exercise(root, "loops/WhileLoop", points=("2.1",))
    return root


@pytest.fixture
def config(tmp_path: Path) -> CourseCacheConfig:
    return CourseCacheConfig(
        paths={
            "cache_root": str(tmp_path / "cache"),
            "db_path": str(tmp_path / "courses.db"),
        }
    )


@pytest.fixture
def store(config: CourseCacheConfig) -> CourseStore:
    return CourseStore(config.db_path, timeout=config.database.busy_timeout)


@pytest.fixture
def course(store: CourseStore) -> Course:
    return store.add_course(
        Course(name="java-basics", source_url="https://example.org/java-basics.git")
    )


@pytest.fixture
def local_sync(source_dir: Path) -> LocalCopySync:
    return LocalCopySync(source_dir)


@pytest.fixture
def refresher(store, config, local_sync) -> CourseRefresher:
    return CourseRefresher(store, config, repository_sync=local_sync)
