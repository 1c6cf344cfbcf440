# Error taxonomy for mcpdesk
from typing import Any


class ConfigError(Exception):
    """Base class for all config store failures.

    ABOUTME: Every error carries a human readable message and a kind tag
    ABOUTME: to_dict() turns the error into data for callers that report it
    """

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class NotFoundError(ConfigError):
    """Config file or server entry does not exist."""

    kind = "not_found"


class ConflictError(ConfigError):
    """A server with the same name already exists."""

    kind = "conflict"


class SchemaError(ConfigError):
    """Valid JSON with the wrong shape."""

    kind = "schema"


class NoBackupError(ConfigError):
    """No backup file exists for the config path."""

    kind = "no_backup"


class CorruptBackupError(ConfigError):
    """The backup file exists but does not parse."""

    kind = "corrupt_backup"


class StorageError(ConfigError):
    """Permission, disk or lock failures while touching files."""

    kind = "io"


class ValidationFailed(ConfigError):
    """A server edit was rejected before anything was written."""

    kind = "invalid"


class ParseError(ConfigError):
    """Malformed JSON, with a location the user can jump to.

    ABOUTME: line and column are 1-indexed
    ABOUTME: error_type classifies the fault (incomplete, trailing_comma, ...)
    ABOUTME: has_backup tells the caller whether restore can be offered
    """

    kind = "parse"

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        error_type: str = "unknown",
        suggestion: str | None = None,
        detail: str = "",
        has_backup: bool = False,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.column = column
        self.error_type = error_type
        self.suggestion = suggestion
        self.detail = detail
        self.has_backup = has_backup

    def location(self) -> str:
        if self.line is None:
            return "unknown location"
        return f"line {self.line}, column {self.column}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "error_type": self.error_type,
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "suggestion": self.suggestion,
            "detail": self.detail,
            "has_backup": self.has_backup,
        }
