# Command facade used by front ends (CLI or any other driver)
import logging
from pathlib import Path
from typing import Callable, Mapping

from mcpdesk.errors import ConfigError, NotFoundError, ValidationFailed
from mcpdesk.models import (
    AppSettings,
    BackupInfo,
    PresetDefinition,
    SaveResult,
    ServerEdit,
    ServerEntry,
)
from mcpdesk.paths import get_default_config_path, resolve_config_path
from mcpdesk.paths import get_settings_path as default_settings_path
from mcpdesk.presets import PresetCatalog, get_catalog, missing_api_keys, to_server_entry
from mcpdesk import settings as settings_io
from mcpdesk.store import ConfigStore

logger = logging.getLogger(__name__)


class Commands:
    """One method per front-end command, no UI state kept between calls.

    ABOUTME: Config path precedence: call argument, constructor override,
    ABOUTME: settings file override, then the OS default
    ABOUTME: Reads raise ConfigError subclasses, mutations return SaveResult
    """

    def __init__(
        self,
        config_path: str | Path | None = None,
        settings_path: Path | None = None,
        store: ConfigStore | None = None,
        catalog: PresetCatalog | None = None,
    ) -> None:
        self._config_override = config_path
        self._settings_path = settings_path
        self._store = store or ConfigStore()
        self._catalog = catalog

    @property
    def catalog(self) -> PresetCatalog:
        if self._catalog is None:
            self._catalog = get_catalog()
        return self._catalog

    def config_path(self, custom_path: str | Path | None = None) -> Path:
        """Resolve which config file a command should act on."""
        for candidate in (custom_path, self._config_override):
            if candidate is not None and str(candidate).strip():
                return resolve_config_path(candidate)
        return resolve_config_path(self.load_settings().claude_config_path)

    def _mutate(self, action: Callable[[Path], SaveResult]) -> SaveResult:
        try:
            path = self.config_path()
        except ConfigError as e:
            return SaveResult.failed(e)
        return action(path)

    # Servers

    def load_servers(self, custom_path: str | Path | None = None) -> list[ServerEntry]:
        return list(self._store.load(self.config_path(custom_path)).values())

    def get_server_details(self, name: str) -> ServerEntry:
        return self._store.get_one(self.config_path(), name)

    def add_server(self, name: str, edit: ServerEdit) -> SaveResult:
        return self._mutate(lambda path: self._store.add(path, name, edit))

    def update_server(self, name: str, edit: ServerEdit) -> SaveResult:
        return self._mutate(lambda path: self._store.update(path, name, edit))

    def delete_server(self, name: str) -> SaveResult:
        return self._mutate(lambda path: self._store.delete(path, name))

    # Presets

    def list_presets(self) -> list[PresetDefinition]:
        return self.catalog.list_presets()

    def list_available_presets(self) -> list[PresetDefinition]:
        """Presets not yet installed; all presets if the config can't be read."""
        try:
            installed = [entry.name for entry in self.load_servers()]
        except ConfigError as e:
            logger.debug(f"Can't read installed servers, listing all presets: {e.message}")
            installed = []
        return self.catalog.available(installed)

    def get_preset_by_name(self, name: str) -> PresetDefinition | None:
        return self.catalog.get_by_name(name)

    def list_presets_by_category(self, category: str) -> list[PresetDefinition]:
        return self.catalog.by_category(category)

    def list_presets_by_kind(self, kind: str) -> list[PresetDefinition]:
        return self.catalog.by_kind(kind)

    def list_preset_categories(self) -> list[str]:
        return self.catalog.categories()

    def list_preset_kinds(self) -> list[str]:
        return self.catalog.kinds()

    def install_preset(
        self,
        preset_name: str,
        secrets: Mapping[str, str] | None = None,
    ) -> SaveResult:
        """Add a preset as a server, with user secrets merged into its env.

        ABOUTME: Refuses when a required API key is missing
        """
        preset = self.catalog.get_by_name(preset_name)
        if preset is None:
            return SaveResult.failed(NotFoundError(f"Preset server '{preset_name}' not found"))

        missing = missing_api_keys(preset, secrets)
        if missing:
            return SaveResult.failed(
                ValidationFailed(f"Missing required API key(s): {', '.join(missing)}")
            )

        entry = to_server_entry(preset, secrets)
        return self.add_server(entry.name, entry.to_edit())

    # Settings

    def get_settings_path(self) -> Path:
        return self._settings_path or default_settings_path()

    def load_settings(self) -> AppSettings:
        return settings_io.load_settings(self.get_settings_path())

    def save_settings(self, settings: AppSettings) -> SaveResult:
        return settings_io.save_settings(settings, self.get_settings_path())

    def get_default_config_path(self) -> Path:
        return get_default_config_path()

    # Backups

    def create_manual_backup(self) -> SaveResult:
        return self._mutate(self._store.create_manual_backup)

    def restore_from_backup(self) -> SaveResult:
        return self._mutate(self._store.restore_from_backup)

    def get_backup_info(self) -> BackupInfo | None:
        return self._store.get_backup_info(self.config_path())
