"""Producing the solution and stub variants of an exercise.

The default filter understands a few comment markers in exercise sources:

- `BEGIN SOLUTION` / `END SOLUTION` delimit code that only the solution
  contains.
- `STUB: <code>` lines contain code that only the stub contains.
- `SOLUTION FILE` marks a file that is left out of the stub entirely.

Test files whose name starts with `Hidden` are left out of the stub, and
binary files are copied unchanged into both variants.
"""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Protocol, runtime_checkable

from course_cache.core.exercise_dir import is_skipped_dir
from course_cache.core.options import EXERCISE_OPTIONS_FILE

logger = logging.getLogger(__name__)

_COMMENT_START = r"(?://+|#+|/\*+|<!--)"

BEGIN_SOLUTION_REGEX = re.compile(rf"^\s*{_COMMENT_START}\s*BEGIN SOLUTION\b")
END_SOLUTION_REGEX = re.compile(rf"^\s*{_COMMENT_START}\s*END SOLUTION\b")
SOLUTION_FILE_REGEX = re.compile(rf"^\s*{_COMMENT_START}\s*SOLUTION FILE\b")
STUB_REGEX = re.compile(
    rf"^(?P<indent>[ \t]*){_COMMENT_START}\s*STUB:[ \t]?(?P<code>.*?)[ \t]*(?:\*/|-->)?[ \t]*$"
)

HIDDEN_TEST_PREFIX = "Hidden"

EXCLUDED_FILES = frozenset({EXERCISE_OPTIONS_FILE})


@runtime_checkable
class FileFilter(Protocol):
    """Builds the solution and stub trees of an exercise from its source tree."""

    def make_solution(self, source: Path, destination: Path) -> None: ...

    def make_stub(self, source: Path, destination: Path) -> None: ...


def _split_line_ending(line: str) -> tuple[str, str]:
    stripped = line.rstrip("\r\n")
    return stripped, line[len(stripped) :]


def solution_text(text: str) -> str:
    """Return the solution variant of a source text."""
    lines = []
    for line in text.splitlines(keepends=True):
        content, _ = _split_line_ending(line)
        if (
            BEGIN_SOLUTION_REGEX.match(content)
            or END_SOLUTION_REGEX.match(content)
            or SOLUTION_FILE_REGEX.match(content)
            or STUB_REGEX.match(content)
        ):
            continue
        lines.append(line)
    return "".join(lines)


def stub_text(text: str) -> str:
    """Return the stub variant of a source text."""
    lines = []
    in_solution = False
    for line in text.splitlines(keepends=True):
        content, ending = _split_line_ending(line)
        if in_solution:
            if END_SOLUTION_REGEX.match(content):
                in_solution = False
            continue
        if BEGIN_SOLUTION_REGEX.match(content):
            in_solution = True
            continue
        if END_SOLUTION_REGEX.match(content):
            continue
        stub_match = STUB_REGEX.match(content)
        if stub_match:
            lines.append(stub_match.group("indent") + stub_match.group("code") + ending)
            continue
        lines.append(line)
    return "".join(lines)


def is_solution_file(text: str) -> bool:
    return any(SOLUTION_FILE_REGEX.match(line) for line in text.splitlines())


class ExerciseFileFilter:
    def make_solution(self, source: Path, destination: Path) -> None:
        logger.debug(f"Making solution {source} -> {destination}")
        self._copy_tree(source, destination, stub=False)

    def make_stub(self, source: Path, destination: Path) -> None:
        logger.debug(f"Making stub {source} -> {destination}")
        self._copy_tree(source, destination, stub=True)

    def _copy_tree(self, source: Path, destination: Path, stub: bool) -> None:
        destination.mkdir(parents=True, exist_ok=True)
        for dirpath, dirnames, filenames in os.walk(source):
            dirnames[:] = sorted(d for d in dirnames if not is_skipped_dir(d))
            relative_dir = Path(dirpath).relative_to(source)
            target_dir = destination / relative_dir
            target_dir.mkdir(parents=True, exist_ok=True)
            for filename in sorted(filenames):
                if filename in EXCLUDED_FILES:
                    continue
                if stub and filename.startswith(HIDDEN_TEST_PREFIX):
                    continue
                self._copy_file(Path(dirpath) / filename, target_dir / filename, stub)

    @staticmethod
    def _copy_file(source_file: Path, target_file: Path, stub: bool) -> None:
        data = source_file.read_bytes()
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            shutil.copyfile(source_file, target_file)
            shutil.copymode(source_file, target_file)
            return

        if stub:
            if is_solution_file(text):
                return
            result = stub_text(text)
        else:
            result = solution_text(text)
        target_file.write_bytes(result.encode("utf-8"))
        shutil.copymode(source_file, target_file)
