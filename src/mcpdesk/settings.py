# Persistence of mcpdesk's own preferences
import logging
from pathlib import Path
from typing import Any

from mcpdesk.errors import ConfigError, SchemaError, StorageError
from mcpdesk.models import AppSettings, SaveResult
from mcpdesk.paths import get_settings_path
from mcpdesk.utils.json_errors import loads_strict
from mcpdesk.utils.jsonio import path_lock, read_text, write_json_atomic

logger = logging.getLogger(__name__)


def settings_from_dict(data: dict[str, Any]) -> AppSettings:
    """Build AppSettings from the JSON file contents.

    ABOUTME: Missing keys take defaults, unknown keys are kept in extra
    """
    config_path = data.get("claudeConfigPath", "")
    dark_mode = data.get("darkMode", False)
    if not isinstance(config_path, str):
        raise SchemaError("'claudeConfigPath' must be a string")
    if not isinstance(dark_mode, bool):
        raise SchemaError("'darkMode' must be true or false")

    extra = {k: v for k, v in data.items() if k not in ("claudeConfigPath", "darkMode")}
    return AppSettings(claude_config_path=config_path, dark_mode=dark_mode, extra=extra)


def load_settings(path: Path | None = None) -> AppSettings:
    """Load settings, returning defaults if the file doesn't exist.

    Raises:
        ParseError: If the settings file is malformed JSON
        SchemaError: If a field has the wrong type
    """
    settings_path = path or get_settings_path()
    if not settings_path.exists():
        logger.debug(f"No settings at {settings_path}, using defaults")
        return AppSettings()

    data = loads_strict(read_text(settings_path))
    if not isinstance(data, dict):
        raise SchemaError("Settings file must contain a JSON object")
    return settings_from_dict(data)


def save_settings(settings: AppSettings, path: Path | None = None) -> SaveResult:
    """Write settings atomically, creating the settings directory if needed."""
    settings_path = path or get_settings_path()
    try:
        with path_lock(settings_path):
            write_json_atomic(settings_path, settings.to_dict())
    except ConfigError as e:
        logger.warning(f"Failed to save settings: {e.message}")
        return SaveResult.failed(e)
    except OSError as e:
        return SaveResult.failed(StorageError(f"Failed to write settings file: {e}"))
    except ValueError as e:
        return SaveResult.failed(SchemaError(f"Settings hold a value JSON cannot represent: {e}"))

    logger.info(f"Saved settings to {settings_path}")
    return SaveResult.ok("Settings saved successfully")
