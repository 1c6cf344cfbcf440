# mcpdesk - MCP server manager for the Claude desktop config
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models and errors
from mcpdesk.errors import (
    ConfigError,
    ConflictError,
    CorruptBackupError,
    NoBackupError,
    NotFoundError,
    ParseError,
    SchemaError,
    StorageError,
    ValidationFailed,
)
from mcpdesk.models import (
    AppSettings,
    ApiKeyRequirement,
    BackupInfo,
    PresetDefinition,
    SaveResult,
    ServerEdit,
    ServerEntry,
)

# ABOUTME: Export the store, catalog and command facade
from mcpdesk.commands import Commands
from mcpdesk.paths import get_default_config_path, resolve_config_path
from mcpdesk.presets import PresetCatalog, get_catalog, to_server_entry
from mcpdesk.store import ConfigStore

__all__ = [
    "__version__",
    "AppSettings",
    "ApiKeyRequirement",
    "BackupInfo",
    "PresetDefinition",
    "SaveResult",
    "ServerEdit",
    "ServerEntry",
    "ConfigError",
    "ConflictError",
    "CorruptBackupError",
    "NoBackupError",
    "NotFoundError",
    "ParseError",
    "SchemaError",
    "StorageError",
    "ValidationFailed",
    "Commands",
    "ConfigStore",
    "PresetCatalog",
    "get_catalog",
    "to_server_entry",
    "get_default_config_path",
    "resolve_config_path",
]
