# Core data models for mcpdesk
from dataclasses import dataclass, field
from typing import Any

from mcpdesk.errors import ConfigError

# ABOUTME: Name of the top-level field holding server entries in the client config
SERVERS_FIELD = "mcpServers"


@dataclass(frozen=True)
class ServerEntry:
    """One registered MCP server process definition.

    ABOUTME: Uses frozen dataclass to prevent accidental mutation
    ABOUTME: name is the mapping key in the document, never stored in the value
    """
    name: str
    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    def to_edit(self) -> "ServerEdit":
        """Return the editable part of this entry."""
        return ServerEdit(command=self.command, args=list(self.args), env=dict(self.env))


@dataclass(frozen=True)
class ServerEdit:
    """Command, arguments and environment submitted by add/update."""
    command: str
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the client's on-disk format.

        ABOUTME: args is always written, env only when non-empty
        """
        result: dict[str, Any] = {
            "command": self.command,
            "args": list(self.args),
        }
        if self.env:
            result["env"] = dict(self.env)
        return result


@dataclass(frozen=True)
class BackupInfo:
    """Metadata about the single-slot backup file."""
    path: str
    created: str
    size: int
    is_valid: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "created": self.created,
            "size": self.size,
            "is_valid": self.is_valid,
        }


@dataclass
class SaveResult:
    """Outcome of a mutating operation.

    ABOUTME: Failures are reported as data, error holds the typed cause
    """
    success: bool
    message: str
    error: ConfigError | None = None

    @classmethod
    def ok(cls, message: str) -> "SaveResult":
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, error: ConfigError) -> "SaveResult":
        return cls(success=False, message=error.message, error=error)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result


@dataclass(frozen=True)
class ApiKeyRequirement:
    """An environment variable a preset needs the user to supply."""
    name: str
    description: str = ""
    required: bool = True


@dataclass(frozen=True)
class PresetDefinition:
    """A catalog row describing an installable server template.

    ABOUTME: kind is the launch method tag (npx, uvx, uv, docker, ...)
    ABOUTME: Rows are never mutated; fields are copied out when installing
    """
    name: str
    description: str
    category: str
    kind: str
    command: str
    args: tuple[str, ...] = ()
    env: tuple[tuple[str, str], ...] = ()
    api_keys: tuple[ApiKeyRequirement, ...] = ()

    @property
    def requires_api_key(self) -> bool:
        return any(key.required for key in self.api_keys)

    @property
    def default_env(self) -> dict[str, str]:
        return dict(self.env)

    def to_dict(self, include_env_values: bool = True) -> dict[str, Any]:
        """Serialize for display.

        ABOUTME: include_env_values=False lists env keys only
        """
        result: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "kind": self.kind,
            "command": self.command,
            "args": list(self.args),
            "apiKeys": [
                {"name": k.name, "description": k.description, "required": k.required}
                for k in self.api_keys
            ],
            "requiresApiKey": self.requires_api_key,
        }
        if include_env_values:
            result["env"] = self.default_env
        else:
            result["env_keys"] = [key for key, _ in self.env]
        return result


@dataclass
class AppSettings:
    """Persisted application preferences.

    ABOUTME: Empty claude_config_path means use the OS default location
    ABOUTME: extra keeps unknown keys found in the settings file
    """
    claude_config_path: str = ""
    dark_mode: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        data["claudeConfigPath"] = self.claude_config_path
        data["darkMode"] = self.dark_mode
        return data
