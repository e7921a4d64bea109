"""Error hierarchy for getdoc."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict


class ExitCode(IntEnum):
    """getdoc CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1  # Bad input or settings (user fixable)
    COLLABORATOR_ERROR = 2  # cargo or a source file failed
    INTERNAL_ERROR = 3  # Invariant violation


class GetDocError(Exception):
    """Base exception for getdoc errors."""

    exit_code: ExitCode = ExitCode.INTERNAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": int(self.exit_code),
            **self.context,
        }


class ConfigurationError(GetDocError):
    """Unknown focus features or invalid settings. Raised before any check runs."""

    exit_code = ExitCode.CONFIG_ERROR


class AssemblyError(GetDocError):
    """An implicated file reached report assembly without an extraction result."""

    exit_code = ExitCode.INTERNAL_ERROR


class CheckRunError(GetDocError):
    """The external check for one configuration could not be run."""

    exit_code = ExitCode.COLLABORATOR_ERROR

    def __init__(self, message: str, configuration: str, **context: Any) -> None:
        super().__init__(message, configuration=configuration, **context)
        self.configuration = configuration


class SourceParseError(GetDocError):
    """A source file could not be parsed into a syntax tree."""

    exit_code = ExitCode.COLLABORATOR_ERROR

    def __init__(self, message: str, file_path: str, **context: Any) -> None:
        super().__init__(message, file_path=file_path, **context)
        self.file_path = file_path
