"""Reading course and exercise options from YAML files in the course source.

Course options come from a single `course_options.yml` at the repository root.
Exercise options are assembled from `metadata.yml` files found on the way
from the repository root down to the exercise directory; deeper files
override shallower ones.
"""

import copy
import datetime
import logging
from pathlib import Path
from typing import Any

import yaml

from course_cache.core.report import MetadataParseError

logger = logging.getLogger(__name__)

COURSE_OPTIONS_FILE = "course_options.yml"
EXERCISE_OPTIONS_FILE = "metadata.yml"


def load_options_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from `path`.

    An empty file yields an empty mapping. Dates and timestamps are returned
    as ISO 8601 strings so that the options can be stored as JSON.

    Raises:
        MetadataParseError: If the file is not valid YAML or not a mapping.
    """
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise MetadataParseError(path, str(e)) from e
    except UnicodeDecodeError as e:
        raise MetadataParseError(path, f"not a UTF-8 text file ({e.reason})") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MetadataParseError(path, f"expected a mapping, got {type(data).__name__}")
    return _normalize(data)


def _normalize(value: Any) -> Any:
    """Replace YAML dates and timestamps with ISO 8601 strings."""
    if isinstance(value, dict):
        return {_normalize(key): _normalize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    if isinstance(value, datetime.date):
        return value.isoformat()
    return value


def merge_options(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge `overrides` into a copy of `base`.

    Nested mappings are merged key by key; any other value in `overrides`
    replaces the value in `base`.
    """
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_options(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def read_course_options(
    clone_path: Path, defaults: dict[str, Any]
) -> tuple[dict[str, Any], list[str]]:
    """Return the effective course options and the unknown keys that were ignored."""
    options_file = clone_path / COURSE_OPTIONS_FILE
    if not options_file.is_file():
        logger.debug(f"No {COURSE_OPTIONS_FILE} in {clone_path}, using defaults")
        return copy.deepcopy(defaults), []

    data = load_options_file(options_file)
    known = {key: value for key, value in data.items() if key in defaults}
    unknown = sorted(str(key) for key in data if key not in defaults)
    return merge_options(defaults, known), unknown


class RecursiveOptionsReader:
    """Reads per-directory option files between a root and a target directory."""

    def __init__(self, file_name: str = EXERCISE_OPTIONS_FILE):
        self.file_name = file_name

    def option_files(self, root_dir: Path, target_dir: Path) -> list[Path]:
        """Return the existing option files from `root_dir` down to `target_dir`."""
        relative = target_dir.relative_to(root_dir)
        directories = [root_dir]
        current = root_dir
        for part in relative.parts:
            current = current / part
            directories.append(current)
        return [d / self.file_name for d in directories if (d / self.file_name).is_file()]

    def read_settings(
        self, root_dir: Path, target_dir: Path, defaults: dict[str, Any]
    ) -> dict[str, Any]:
        result = copy.deepcopy(defaults)
        for options_file in self.option_files(root_dir, target_dir):
            logger.debug(f"Applying options from {options_file}")
            result = merge_options(result, load_options_file(options_file))
        return result
