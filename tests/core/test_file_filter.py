import os
import stat

import pytest

from course_cache.core.file_filter import (
    ExerciseFileFilter,
    FileFilter,
    is_solution_file,
    solution_text,
    stub_text,
)

JAVA_SOURCE = """\
public class Sum {
    public static int sum(int a, int b) {
        // BEGIN SOLUTION
        return a + b;
        // END SOLUTION
        // STUB: return 0;
    }
}
"""


class TestStubText:
    """Test removing solutions from source text."""

    def test_removes_solution_and_inserts_stub(self):
        assert stub_text(JAVA_SOURCE) == (
            "public class Sum {\n"
            "    public static int sum(int a, int b) {\n"
            "        return 0;\n"
            "    }\n"
            "}\n"
        )

    def test_python_comments(self):
        source = (
            "def f():\n"
            "    # BEGIN SOLUTION\n"
            "    return 1\n"
            "    # END SOLUTION\n"
            "    # STUB: pass\n"
        )

        assert stub_text(source) == "def f():\n    pass\n"

    def test_block_comment_stub(self):
        assert stub_text("  /* STUB: int x = 0; */\n") == "  int x = 0;\n"

    def test_html_comment_stub(self):
        assert stub_text("<!-- STUB: <p>todo</p> -->\n") == "<p>todo</p>\n"

    def test_preserves_windows_line_endings(self):
        source = "a\r\n// STUB: b\r\n"

        assert stub_text(source) == "a\r\nb\r\n"

    def test_text_without_markers_is_unchanged(self):
        assert stub_text("plain\ntext\n") == "plain\ntext\n"


class TestSolutionText:
    """Test stripping markers from solution text."""

    def test_keeps_solution_and_drops_markers(self):
        assert solution_text(JAVA_SOURCE) == (
            "public class Sum {\n"
            "    public static int sum(int a, int b) {\n"
            "        return a + b;\n"
            "    }\n"
            "}\n"
        )

    def test_drops_solution_file_marker(self):
        assert solution_text("// SOLUTION FILE\nclass A {}\n") == "class A {}\n"


class TestIsSolutionFile:
    """Test detecting solution-only files."""

    def test_marker_anywhere(self):
        assert is_solution_file("package x;\n// SOLUTION FILE\n")

    def test_no_marker(self):
        assert not is_solution_file("package x;\n")


@pytest.fixture
def exercise_source(tmp_path):
    source = tmp_path / "exercise"
    (source / "src").mkdir(parents=True)
    (source / "test").mkdir()
    (source / "lib").mkdir()
    (source / ".git").mkdir()
    (source / "src" / "Sum.java").write_text(JAVA_SOURCE)
    (source / "src" / "Helper.java").write_text("// SOLUTION FILE\nclass Helper {}\n")
    (source / "test" / "SumTest.java").write_text('@Points("1.1")\nclass SumTest {}\n')
    (source / "test" / "HiddenSumTest.java").write_text('@Points("1.2")\nclass HiddenSumTest {}\n')
    (source / "lib" / "data.bin").write_bytes(b"\x00\xff\x10BEGIN SOLUTION\xfe")
    (source / ".git" / "HEAD").write_text("ref: refs/heads/master\n")
    (source / "metadata.yml").write_text("hidden: false\n")
    run_script = source / "run.sh"
    run_script.write_text("#!/bin/sh\necho run\n")
    run_script.chmod(0o755)
    return source


class TestExerciseFileFilter:
    """Test copying exercise trees."""

    def test_is_a_file_filter(self):
        assert isinstance(ExerciseFileFilter(), FileFilter)

    def test_make_stub(self, exercise_source, tmp_path):
        destination = tmp_path / "stub"

        ExerciseFileFilter().make_stub(exercise_source, destination)

        assert (destination / "src" / "Sum.java").read_text() == stub_text(JAVA_SOURCE)
        assert not (destination / "src" / "Helper.java").exists()
        assert (destination / "test" / "SumTest.java").exists()
        assert not (destination / "test" / "HiddenSumTest.java").exists()
        assert not (destination / "metadata.yml").exists()
        assert not (destination / ".git").exists()

    def test_make_solution(self, exercise_source, tmp_path):
        destination = tmp_path / "solution"

        ExerciseFileFilter().make_solution(exercise_source, destination)

        assert (destination / "src" / "Sum.java").read_text() == solution_text(JAVA_SOURCE)
        assert (destination / "src" / "Helper.java").read_text() == "class Helper {}\n"
        assert (destination / "test" / "HiddenSumTest.java").exists()
        assert not (destination / "metadata.yml").exists()

    @pytest.mark.parametrize("variant", ["make_stub", "make_solution"])
    def test_binary_files_are_copied_verbatim(self, exercise_source, tmp_path, variant):
        destination = tmp_path / variant

        getattr(ExerciseFileFilter(), variant)(exercise_source, destination)

        assert (destination / "lib" / "data.bin").read_bytes() == (
            exercise_source / "lib" / "data.bin"
        ).read_bytes()

    @pytest.mark.skipif(os.name != "posix", reason="File modes are POSIX specific")
    def test_file_modes_are_preserved(self, exercise_source, tmp_path):
        destination = tmp_path / "stub"

        ExerciseFileFilter().make_stub(exercise_source, destination)

        mode = (destination / "run.sh").stat().st_mode
        assert mode & stat.S_IXUSR

    @pytest.mark.skipif(os.name != "posix", reason="File modes are POSIX specific")
    @pytest.mark.parametrize("variant", ["make_stub", "make_solution"])
    def test_binary_file_modes_are_preserved(self, exercise_source, tmp_path, variant):
        tool = exercise_source / "lib" / "tool"
        tool.write_bytes(b"\x7fELF\x00\xff\xfe")
        tool.chmod(0o755)
        destination = tmp_path / variant

        getattr(ExerciseFileFilter(), variant)(exercise_source, destination)

        assert (destination / "lib" / "tool").stat().st_mode & stat.S_IXUSR

    @pytest.mark.parametrize("variant", ["make_stub", "make_solution"])
    @pytest.mark.parametrize("package", ["build", "dist", "target"])
    def test_source_packages_named_like_build_output_are_copied(
        self, exercise_source, tmp_path, variant, package
    ):
        (exercise_source / "src" / package).mkdir()
        (exercise_source / "src" / package / "Step.java").write_text("class Step {}\n")
        destination = tmp_path / variant

        getattr(ExerciseFileFilter(), variant)(exercise_source, destination)

        assert (destination / "src" / package / "Step.java").read_text() == "class Step {}\n"
