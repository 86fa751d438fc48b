"""Outcome of a course refresh and the errors raised by refresh stages."""

from pathlib import Path

from attrs import define, field


@define
class Report:
    """Errors and warnings collected during one refresh attempt.

    The report is closed when the refresh finishes; after that it can no
    longer be modified.
    """

    _errors: list[str] = field(factory=list)
    _warnings: list[str] = field(factory=list)
    _closed: bool = field(default=False, init=False)

    @property
    def errors(self) -> tuple[str, ...]:
        return tuple(self._errors)

    @property
    def warnings(self) -> tuple[str, ...]:
        return tuple(self._warnings)

    @property
    def successful(self) -> bool:
        return not self._errors

    @property
    def closed(self) -> bool:
        return self._closed

    def add_error(self, message: str) -> None:
        self._check_open()
        self._errors.append(message)

    def add_warning(self, message: str) -> None:
        self._check_open()
        self._warnings.append(message)

    def close(self) -> None:
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Cannot modify a report after the refresh has completed")


class RefreshFailure(Exception):
    """Raised by a refresh whose report contains errors."""

    def __init__(self, report: Report):
        super().__init__("Course refresh failed")
        self.report = report


class RefreshError(Exception):
    """Base class for errors that abort the remaining refresh stages."""

    pass


class ConfigurationError(RefreshError):
    """The course is configured in a way the refresher cannot handle."""

    pass


class SyncError(RefreshError):
    """The source repository could not be fetched."""

    pass


class MetadataParseError(RefreshError):
    """An options file could not be parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to parse metadata in {path}: {reason}")
        self.path = path
        self.reason = reason


class FilesystemError(RefreshError):
    """Building, packaging or publishing the cache tree failed."""

    pass
