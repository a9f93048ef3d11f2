"""Diagnostic model: structured messages about stylesheets that failed to load."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity level for a diagnostic message."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding about a stylesheet file.

    Attributes:
        rule: Identifier for the kind of failure (``legacy_format``,
            ``malformed_section``, ``io_error``, ``duplicate_file``).
        severity: How serious the issue is.
        message: Human-readable description of the problem.
        file_id: The stylesheet file involved.
        line: 1-based line of the failure, if known.
        column: 1-based column of the failure, if known.
    """

    rule: str
    severity: Severity
    message: str
    file_id: str
    line: int | None = None
    column: int | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    def to_dict(self) -> dict:
        return {
            "rule": self.rule,
            "severity": self.severity.value,
            "message": self.message,
            "file_id": self.file_id,
            "line": self.line,
            "column": self.column,
        }

    def __str__(self) -> str:
        location = self.file_id
        if self.line is not None:
            location = f"{location}:{self.line}"
            if self.column is not None:
                location = f"{location}:{self.column}"
        return f"{self.severity.value} [{location}]: {self.message}"
