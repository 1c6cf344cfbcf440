# ABOUTME: Single-slot backup of the client config file.
# ABOUTME: The backup lives next to the config as <name>.backup and is overwritten on each write.
import logging
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

from mcpdesk.errors import ConfigError, CorruptBackupError, NoBackupError, NotFoundError, StorageError
from mcpdesk.models import BackupInfo
from mcpdesk.paths import backup_path_for, broken_path_for

logger = logging.getLogger(__name__)


def _copy_atomic(source: Path, target: Path) -> None:
    """Copy source over target through a temp file in target's directory."""
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
    )
    os.close(fd)
    try:
        shutil.copy2(source, tmp_name)
        os.replace(tmp_name, target)
    except OSError:
        try:
            os.unlink(tmp_name)
        except OSError:
            logger.debug(f"Temp file already gone: {tmp_name}")
        raise


def create_backup(config_path: Path) -> Path:
    """Snapshot the config file into its backup slot.

    ABOUTME: Uses shutil.copy2() to preserve file metadata
    ABOUTME: Replaces any previous backup (single slot, no history)

    Args:
        config_path: Path to the live config file

    Returns:
        Path to the backup file

    Raises:
        NotFoundError: If config_path doesn't exist
        StorageError: If the copy fails

    Examples:
        >>> create_backup(Path("~/.config/Claude/claude_desktop_config.json").expanduser())
        PosixPath('/home/user/.config/Claude/claude_desktop_config.json.backup')
    """
    if not config_path.exists():
        raise NotFoundError(f"Config file not found: {config_path}")

    backup_path = backup_path_for(config_path)
    try:
        _copy_atomic(config_path, backup_path)
    except OSError as e:
        raise StorageError(f"Failed to create backup: {e}") from e

    logger.info(f"Backed up {config_path} to {backup_path}")
    return backup_path


def has_backup(config_path: Path) -> bool:
    """Return True if a backup file exists for config_path."""
    return backup_path_for(config_path).is_file()


def read_backup(config_path: Path) -> str:
    """Return the backup content after checking it is a usable document.

    Raises:
        NoBackupError: If no backup exists
        CorruptBackupError: If the backup doesn't parse as a config document
        StorageError: If the backup can't be read
    """
    from mcpdesk.document import parse_document

    backup_path = backup_path_for(config_path)
    if not backup_path.is_file():
        raise NoBackupError("No backup file found")

    try:
        content = backup_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(f"Failed to read backup file: {e}") from e

    try:
        parse_document(content)
    except ConfigError as e:
        logger.warning(f"Backup {backup_path} is unusable: {e.message}")
        raise CorruptBackupError("Backup file is corrupted or invalid") from e

    return content


def get_backup_info(config_path: Path) -> BackupInfo | None:
    """Describe the backup for config_path, or None if there is none.

    ABOUTME: created is the backup's modification time in ISO 8601
    ABOUTME: is_valid is False when the content doesn't parse
    """
    backup_path = backup_path_for(config_path)
    try:
        stat = backup_path.stat()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StorageError(f"Failed to get backup metadata: {e}") from e

    try:
        read_backup(config_path)
        is_valid = True
    except (CorruptBackupError, StorageError):
        is_valid = False

    return BackupInfo(
        path=str(backup_path),
        created=datetime.fromtimestamp(stat.st_mtime).isoformat(timespec="seconds"),
        size=stat.st_size,
        is_valid=is_valid,
    )


def preserve_broken(config_path: Path) -> Path | None:
    """Copy the current (possibly broken) config aside before a restore.

    Returns:
        Path of the copy, or None if there was no live file
    """
    if not config_path.exists():
        return None
    broken_path = broken_path_for(config_path)
    try:
        shutil.copy2(config_path, broken_path)
    except OSError as e:
        raise StorageError(f"Failed to backup current file: {e}") from e
    logger.info(f"Kept current config as {broken_path}")
    return broken_path


def restore_backup(config_path: Path) -> None:
    """Overwrite the live config with its backup.

    ABOUTME: Validates the backup first, then keeps the live file as .broken
    """
    read_backup(config_path)
    preserve_broken(config_path)
    try:
        _copy_atomic(backup_path_for(config_path), config_path)
    except OSError as e:
        raise StorageError(f"Failed to restore from backup: {e}") from e
    logger.info(f"Restored {config_path} from backup")
