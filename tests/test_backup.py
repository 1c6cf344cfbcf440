# ABOUTME: Tests for backup utilities.
# ABOUTME: Covers create_backup, read_backup, get_backup_info and restore_backup.
from pathlib import Path

import pytest

from mcpdesk.errors import CorruptBackupError, NoBackupError, NotFoundError
from mcpdesk.paths import backup_path_for, broken_path_for
from mcpdesk.utils.backup import (
    create_backup,
    get_backup_info,
    has_backup,
    preserve_broken,
    read_backup,
    restore_backup,
)

VALID = '{"mcpServers": {"test": {"command": "node"}}}'


class TestCreateBackup:
    """Tests for create_backup function."""

    def test_creates_backup_next_to_config(self, tmp_path):
        """Test that the backup lands beside the config file."""
        source = tmp_path / "config.json"
        source.write_text(VALID)

        backup_path = create_backup(source)

        assert backup_path == tmp_path / "config.json.backup"
        assert backup_path.exists()

    def test_backup_preserves_content(self, tmp_path):
        source = tmp_path / "config.json"
        source.write_text(VALID)

        backup_path = create_backup(source)

        assert backup_path.read_text() == VALID

    def test_backup_overwrites_previous(self, tmp_path):
        """Test that there is only ever one backup slot."""
        source = tmp_path / "config.json"
        source.write_text('{"v": 1}')
        create_backup(source)
        source.write_text('{"v": 2}')

        backup_path = create_backup(source)

        assert backup_path.read_text() == '{"v": 2}'

    def test_missing_source_raises(self, tmp_path):
        """Test that backing up a missing file raises NotFoundError."""
        with pytest.raises(NotFoundError):
            create_backup(tmp_path / "missing.json")


class TestReadBackup:
    """Tests for read_backup and has_backup."""

    def test_no_backup(self, tmp_path):
        config = tmp_path / "config.json"
        assert has_backup(config) is False
        with pytest.raises(NoBackupError, match="No backup file found"):
            read_backup(config)

    def test_corrupt_backup(self, tmp_path):
        config = tmp_path / "config.json"
        backup_path_for(config).write_text("{ nope")

        with pytest.raises(CorruptBackupError, match="corrupted or invalid"):
            read_backup(config)

    def test_wrong_shape_backup_is_corrupt(self, tmp_path):
        """Test that a backup with a non-object mcpServers is unusable."""
        config = tmp_path / "config.json"
        backup_path_for(config).write_text('{"mcpServers": []}')

        with pytest.raises(CorruptBackupError):
            read_backup(config)

    def test_valid_backup(self, tmp_path):
        config = tmp_path / "config.json"
        backup_path_for(config).write_text(VALID)

        assert has_backup(config) is True
        assert read_backup(config) == VALID


class TestBackupInfo:
    """Tests for get_backup_info function."""

    def test_none_without_backup(self, tmp_path):
        assert get_backup_info(tmp_path / "config.json") is None

    def test_metadata(self, tmp_path):
        config = tmp_path / "config.json"
        backup_path_for(config).write_text(VALID)

        info = get_backup_info(config)

        assert info is not None
        assert info.path == str(backup_path_for(config))
        assert info.size == len(VALID)
        assert info.is_valid is True
        assert "T" in info.created
        assert info.to_dict()["is_valid"] is True

    def test_invalid_backup_metadata(self, tmp_path):
        config = tmp_path / "config.json"
        backup_path_for(config).write_text("[")

        info = get_backup_info(config)

        assert info is not None
        assert info.is_valid is False


class TestRestoreBackup:
    """Tests for restore_backup and preserve_broken."""

    def test_restore_replaces_live_file(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text("{ broken")
        backup_path_for(config).write_text(VALID)

        restore_backup(config)

        assert config.read_text() == VALID
        assert broken_path_for(config).read_text() == "{ broken"
        assert backup_path_for(config).read_text() == VALID

    def test_restore_when_live_file_missing(self, tmp_path):
        """Test restore recreates a deleted config without a .broken copy."""
        config = tmp_path / "config.json"
        backup_path_for(config).write_text(VALID)

        restore_backup(config)

        assert config.read_text() == VALID
        assert not broken_path_for(config).exists()

    def test_corrupt_backup_leaves_live_file(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(VALID)
        backup_path_for(config).write_text("{ nope")

        with pytest.raises(CorruptBackupError):
            restore_backup(config)

        assert config.read_text() == VALID
        assert not broken_path_for(config).exists()

    def test_preserve_broken_without_live_file(self, tmp_path):
        assert preserve_broken(tmp_path / "config.json") is None

    def test_preserve_broken_returns_path(self, tmp_path: Path):
        config = tmp_path / "config.json"
        config.write_text("x")

        assert preserve_broken(config) == tmp_path / "config.json.broken"
