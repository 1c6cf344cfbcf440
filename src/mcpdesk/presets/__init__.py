# Preset catalog of installable MCP servers
from mcpdesk.presets.catalog import (
    KNOWN_KINDS,
    PresetCatalog,
    get_catalog,
    kind_for_command,
    kind_matches_command,
    missing_api_keys,
    preset_from_row,
    to_server_entry,
)

__all__ = [
    "KNOWN_KINDS",
    "PresetCatalog",
    "get_catalog",
    "kind_for_command",
    "kind_matches_command",
    "missing_api_keys",
    "preset_from_row",
    "to_server_entry",
]
