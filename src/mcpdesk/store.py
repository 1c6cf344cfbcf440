# Read-modify-write access to the desktop client's MCP server config
import logging
from pathlib import Path
from typing import Any, Callable

from mcpdesk.document import (
    EMPTY_DOCUMENT,
    dict_to_entry,
    edit_to_dict,
    entries_of,
    parse_document,
    remove_server,
    servers_of,
    set_server,
)
from mcpdesk.errors import (
    ConfigError,
    ConflictError,
    NotFoundError,
    ParseError,
    StorageError,
    ValidationFailed,
)
from mcpdesk.models import SERVERS_FIELD, BackupInfo, SaveResult, ServerEdit, ServerEntry
from mcpdesk.paths import resolve_config_path
from mcpdesk.utils.backup import create_backup, get_backup_info, has_backup, restore_backup
from mcpdesk.utils.jsonio import path_lock, read_text, write_text_atomic
from mcpdesk.utils.validation import blocking_errors, validate_entry

logger = logging.getLogger(__name__)

# ABOUTME: A path argument may be a Path, a string override, or None for the default
PathLike = Path | str | None


class ConfigStore:
    """Sole reader/writer of the client config document.

    ABOUTME: Every operation takes the config path; None or "" means OS default
    ABOUTME: Reads raise typed ConfigErrors, mutations return SaveResult
    ABOUTME: Writes are serialized per path and replace the file atomically

    Each mutation follows the same cycle under the path lock: read the
    current text and decode it, check the change against the decoded
    document, copy the live file into the backup slot, then edit only the
    touched server member in the raw text and move a temp file holding the
    result over the target. Everything outside that member keeps its bytes.
    """

    def _read_document(self, path: Path) -> tuple[str, dict[str, Any]]:
        text = read_text(path)
        try:
            return text, parse_document(text)
        except ParseError as e:
            e.has_backup = has_backup(path)
            logger.warning(f"Failed to parse {path} at {e.location()}: {e.detail}")
            raise

    def load(self, path: PathLike = None) -> dict[str, ServerEntry]:
        """Load all server entries, sorted by name.

        Raises:
            NotFoundError: If the config file doesn't exist
            ParseError: If the JSON is malformed (has_backup is filled in)
            SchemaError: If the servers field or an entry has the wrong shape
        """
        config_path = resolve_config_path(path)
        logger.debug(f"Loading servers from {config_path}")
        _, data = self._read_document(config_path)
        return entries_of(data)

    def get_one(self, path: PathLike, name: str) -> ServerEntry:
        """Load a single server entry.

        Raises:
            NotFoundError: If the file or the entry doesn't exist
        """
        config_path = resolve_config_path(path)
        _, data = self._read_document(config_path)
        servers = servers_of(data)
        if name not in servers:
            raise NotFoundError(f"Server '{name}' not found")
        return dict_to_entry(name, servers[name])

    def _write(
        self,
        path: PathLike,
        mutate: Callable[[str, dict[str, Any]], str],
        done_message: str,
        create: bool = False,
    ) -> SaveResult:
        config_path = resolve_config_path(path)
        try:
            with path_lock(config_path):
                if config_path.exists() or not create:
                    text, data = self._read_document(config_path)
                    new_text = mutate(text, data)
                    create_backup(config_path)
                else:
                    new_text = mutate(EMPTY_DOCUMENT, {})
                write_text_atomic(config_path, new_text)
        except ConfigError as e:
            logger.warning(f"Write to {config_path} refused: {e.message}")
            return SaveResult.failed(e)
        except OSError as e:
            logger.warning(f"Write to {config_path} failed: {e}")
            return SaveResult.failed(StorageError(f"Failed to write config: {e}"))

        logger.info(f"{done_message} ({config_path})")
        return SaveResult.ok(done_message)

    @staticmethod
    def _check_edit(name: str, edit: ServerEdit) -> None:
        errors = blocking_errors(validate_entry(name, edit))
        if errors:
            raise ValidationFailed("; ".join(e.message for e in errors))

    def add(self, path: PathLike, name: str, edit: ServerEdit) -> SaveResult:
        """Insert a new server entry.

        ABOUTME: Fails with ConflictError if the name is already registered
        ABOUTME: Creates the config file if it doesn't exist yet
        """
        def mutate(text: str, data: dict[str, Any]) -> str:
            self._check_edit(name, edit)
            if name in data.get(SERVERS_FIELD, {}):
                raise ConflictError(f"Server '{name}' already exists")
            return set_server(text, name, edit_to_dict(edit))

        return self._write(path, mutate, f"Server '{name}' added successfully", create=True)

    def update(self, path: PathLike, name: str, edit: ServerEdit) -> SaveResult:
        """Replace command/args/env of an existing entry, keeping its key and position."""
        def mutate(text: str, data: dict[str, Any]) -> str:
            self._check_edit(name, edit)
            servers = data.get(SERVERS_FIELD, {})
            if name not in servers:
                raise NotFoundError(f"Server '{name}' not found")
            return set_server(text, name, edit_to_dict(edit, servers[name]))

        return self._write(path, mutate, f"Server '{name}' updated successfully")

    def delete(self, path: PathLike, name: str) -> SaveResult:
        """Remove a server entry."""
        def mutate(text: str, data: dict[str, Any]) -> str:
            return remove_server(text, name)

        return self._write(path, mutate, f"Server '{name}' deleted successfully")

    def restore_from_backup(self, path: PathLike = None) -> SaveResult:
        """Overwrite the live config with the backup slot.

        ABOUTME: NoBackupError / CorruptBackupError are returned as failures
        ABOUTME: The replaced live file is kept as <name>.broken
        """
        config_path = resolve_config_path(path)
        try:
            with path_lock(config_path):
                restore_backup(config_path)
        except ConfigError as e:
            logger.warning(f"Restore of {config_path} refused: {e.message}")
            return SaveResult.failed(e)
        return SaveResult.ok("Configuration restored from backup successfully")

    def create_manual_backup(self, path: PathLike = None) -> SaveResult:
        """Snapshot the live config into the backup slot without mutating it."""
        config_path = resolve_config_path(path)
        try:
            with path_lock(config_path):
                if not config_path.exists():
                    raise NotFoundError("Configuration file does not exist")
                backup_path = create_backup(config_path)
        except ConfigError as e:
            return SaveResult.failed(e)
        return SaveResult.ok(f"Manual backup created: {backup_path}")

    def get_backup_info(self, path: PathLike = None) -> BackupInfo | None:
        """Backup metadata, or None when there is no backup."""
        return get_backup_info(resolve_config_path(path))

    def has_backup(self, path: PathLike = None) -> bool:
        return has_backup(resolve_config_path(path))
