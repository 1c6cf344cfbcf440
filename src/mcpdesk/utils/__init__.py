# ABOUTME: Utility modules for mcpdesk
# ABOUTME: Exports backup, JSON diagnostics, file IO and validation functions

from mcpdesk.utils.backup import create_backup, get_backup_info, has_backup, restore_backup
from mcpdesk.utils.json_errors import decode_document, loads_strict, offset_to_line_column
from mcpdesk.utils.jsonio import path_lock, write_json_atomic
from mcpdesk.utils.validation import (
    ValidationError,
    validate_command_exists,
    validate_entry,
)

__all__ = [
    "create_backup",
    "get_backup_info",
    "has_backup",
    "restore_backup",
    "decode_document",
    "loads_strict",
    "offset_to_line_column",
    "path_lock",
    "write_json_atomic",
    "ValidationError",
    "validate_command_exists",
    "validate_entry",
]
