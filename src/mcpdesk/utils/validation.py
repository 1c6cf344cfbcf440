# ABOUTME: Validation utilities for MCP server entries
# ABOUTME: Errors block a write, warnings are only reported
import shutil
from dataclasses import dataclass

from mcpdesk.models import ServerEdit


@dataclass(frozen=True)
class ValidationError:
    """Represents a validation error or warning.

    ABOUTME: Uses frozen dataclass for immutability
    ABOUTME: Severity level distinguishes between blocking errors and warnings
    """
    server_name: str
    message: str
    severity: str  # 'error' or 'warning'


def validate_command_exists(command: str) -> ValidationError | None:
    """Check that a command can be found on PATH.

    ABOUTME: Uses shutil.which() for cross-platform command lookup
    ABOUTME: A missing command is a warning: the client may run with another PATH

    Examples:
        >>> validate_command_exists("nonexistent_cmd")
        ValidationError(server_name='', message='Command not found: nonexistent_cmd', severity='warning')
    """
    if shutil.which(command) is None:
        return ValidationError(
            server_name="",
            message=f"Command not found: {command}",
            severity="warning"
        )
    return None


def validate_entry(name: str, edit: ServerEdit) -> list[ValidationError]:
    """Validate a server name and edit before writing.

    ABOUTME: Empty name or command and non-string args/env are errors
    ABOUTME: An unquoted command containing spaces is a warning

    Args:
        name: Server name (the mapping key)
        edit: Command, args and env to be written

    Returns:
        List of ValidationError instances (empty if valid)
    """
    errors: list[ValidationError] = []

    if not name or not name.strip():
        errors.append(ValidationError(
            server_name=name,
            message="Server name cannot be empty",
            severity="error"
        ))

    if not isinstance(edit.command, str) or not edit.command.strip():
        errors.append(ValidationError(
            server_name=name,
            message=f"Server '{name}' has an empty command",
            severity="error"
        ))
    elif " " in edit.command.strip() and not edit.command.startswith('"'):
        errors.append(ValidationError(
            server_name=name,
            message=(
                f"Server '{name}' command contains spaces but is not quoted. "
                "Consider moving arguments to the 'args' array"
            ),
            severity="warning"
        ))

    if not all(isinstance(arg, str) for arg in edit.args):
        errors.append(ValidationError(
            server_name=name,
            message=f"Server '{name}' arguments must all be strings",
            severity="error"
        ))

    for key, value in edit.env.items():
        if not key or not isinstance(value, str):
            errors.append(ValidationError(
                server_name=name,
                message=f"Server '{name}' has an invalid environment variable '{key}'",
                severity="error"
            ))

    return errors


def blocking_errors(errors: list[ValidationError]) -> list[ValidationError]:
    """Filter to errors that must stop a write."""
    return [e for e in errors if e.severity == "error"]
