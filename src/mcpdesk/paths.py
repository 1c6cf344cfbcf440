# Well-known file locations for mcpdesk
import os
import platform
from pathlib import Path

# ABOUTME: Filename the desktop client reads its MCP server registrations from
CONFIG_FILENAME = "claude_desktop_config.json"

# ABOUTME: Directory name for our own settings under the per-user app data dir
APP_DIR_NAME = "mcpdesk"
SETTINGS_FILENAME = "settings.json"

# ABOUTME: Suffixes for the single-slot backup and the pre-restore copy
BACKUP_SUFFIX = ".backup"
BROKEN_SUFFIX = ".broken"


def _app_data_dir() -> Path:
    """Return the per-user application data directory for this OS.

    ABOUTME: Windows uses %APPDATA%, macOS Library/Application Support
    ABOUTME: Everything else follows XDG, falling back to ~/.config
    """
    system = platform.system()
    if system == "Windows":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata)
        return Path.home() / "AppData" / "Roaming"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def get_default_config_path() -> Path:
    """Return the desktop client's config file path for this OS.

    Examples:
        >>> get_default_config_path()  # on Linux
        PosixPath('/home/user/.config/Claude/claude_desktop_config.json')
    """
    return _app_data_dir() / "Claude" / CONFIG_FILENAME


def get_settings_path() -> Path:
    """Return the path of the mcpdesk settings file."""
    return _app_data_dir() / APP_DIR_NAME / SETTINGS_FILENAME


def resolve_config_path(custom_path: str | Path | None = None) -> Path:
    """Resolve an optional override into the config path to use.

    ABOUTME: None, empty or whitespace-only overrides fall back to the default
    ABOUTME: ~ is expanded in overrides
    """
    if custom_path is None:
        return get_default_config_path()
    if isinstance(custom_path, Path):
        return custom_path.expanduser()
    text = custom_path.strip()
    if not text:
        return get_default_config_path()
    return Path(text).expanduser()


def backup_path_for(config_path: Path) -> Path:
    """Derive the single backup slot for a config file (same directory)."""
    return config_path.with_name(config_path.name + BACKUP_SUFFIX)


def broken_path_for(config_path: Path) -> Path:
    """Derive where a broken config is kept before a restore overwrites it."""
    return config_path.with_name(config_path.name + BROKEN_SUFFIX)
