from pathlib import Path

import pytest

from course_cache.core.cache_paths import CachePaths
from course_cache.core.course import Course


class TestCachePaths:
    """Test the cache directory layout."""

    def test_layout_below_course_and_version(self, tmp_path):
        paths = CachePaths(tmp_path, course_id=3, cache_version=7)

        assert paths.course_dir == tmp_path / "3"
        assert paths.root == tmp_path / "3" / "7"
        assert paths.clone_path == tmp_path / "3" / "7" / "clone"
        assert paths.solution_path == tmp_path / "3" / "7" / "solutions"
        assert paths.stub_path == tmp_path / "3" / "7" / "stubs"
        assert paths.archive_path == tmp_path / "3" / "7" / "archives"

    def test_archive_for_exercise(self, tmp_path):
        paths = CachePaths(tmp_path, course_id=1, cache_version=2)

        assert paths.archive_for("loops-ForLoop") == (
            tmp_path / "1" / "2" / "archives" / "loops-ForLoop.zip"
        )

    def test_versions_never_share_directories(self, tmp_path):
        old = CachePaths(tmp_path, course_id=1, cache_version=1)
        new = CachePaths(tmp_path, course_id=1, cache_version=2)

        assert old.course_dir == new.course_dir
        assert old.root != new.root
        assert not new.root.is_relative_to(old.root)

    def test_for_course(self, tmp_path):
        course = Course(name="c", source_url="u", cache_version=4, id=9)

        paths = CachePaths.for_course(str(tmp_path), course)

        assert paths == CachePaths(Path(tmp_path), 9, 4)

    def test_for_course_requires_stored_course(self, tmp_path):
        with pytest.raises(ValueError, match="has not been stored"):
            CachePaths.for_course(tmp_path, Course(name="c", source_url="u"))
