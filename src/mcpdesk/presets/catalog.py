# ABOUTME: Preset catalog: curated MCP server templates for one-click installation
# ABOUTME: Rows come from the bundled presets.toml and are normalized once at load
import logging
from functools import lru_cache
from importlib import resources
from typing import Any, Iterable, Mapping

import tomli

from mcpdesk.models import ApiKeyRequirement, PresetDefinition, ServerEntry

logger = logging.getLogger(__name__)

PRESETS_RESOURCE = "presets.toml"

# Launchers with a dedicated kind tag; any other command is its own kind.
KNOWN_KINDS = ("docker", "npx", "uvx", "uv")


def kind_for_command(command: str) -> str:
    """Derive the kind tag for a command (``NPX`` -> ``npx``)."""
    lowered = command.lower()
    return lowered if lowered in KNOWN_KINDS else command


def kind_matches_command(preset: PresetDefinition) -> bool:
    """True if the preset's kind agrees with its command.

    Kinds outside KNOWN_KINDS are free-form and always match.
    """
    if preset.kind.lower() not in KNOWN_KINDS:
        return True
    return kind_for_command(preset.command) == preset.kind.lower()


def _api_keys_from_row(row: Mapping[str, Any]) -> tuple[ApiKeyRequirement, ...]:
    keys = [
        ApiKeyRequirement(
            name=str(item["name"]),
            description=str(item.get("description", "")),
            required=bool(item.get("required", True)),
        )
        for item in row.get("apiKeys", [])
    ]
    legacy_name = row.get("apiKeyName")
    if legacy_name and all(k.name != legacy_name for k in keys):
        keys.append(
            ApiKeyRequirement(
                name=str(legacy_name),
                description=str(row.get("apiKeyDescription", "")),
                required=True,
            )
        )
    return tuple(keys)


def preset_from_row(row: Mapping[str, Any]) -> PresetDefinition:
    """Normalize one raw catalog row into a PresetDefinition.

    Raises:
        ValueError: If a required field is missing
    """
    for required in ("name", "command"):
        if not row.get(required):
            raise ValueError(f"Preset row missing required '{required}': {dict(row)}")

    command = str(row["command"])
    env = row.get("env") or {}
    return PresetDefinition(
        name=str(row["name"]),
        description=str(row.get("description", "")),
        category=str(row.get("category", "Other")),
        kind=str(row.get("kind") or kind_for_command(command)),
        command=command,
        args=tuple(str(a) for a in row.get("args", [])),
        env=tuple((str(k), str(v)) for k, v in env.items()),
        api_keys=_api_keys_from_row(row),
    )


class PresetCatalog:
    """Read-only table of preset definitions in declaration order."""

    def __init__(self, presets: Iterable[PresetDefinition]) -> None:
        self._presets: tuple[PresetDefinition, ...] = tuple(presets)
        self._by_name = {p.name: p for p in self._presets}
        if len(self._by_name) != len(self._presets):
            raise ValueError("Preset names must be unique")
        for preset in self._presets:
            if not kind_matches_command(preset):
                logger.warning(
                    f"Preset '{preset.name}' kind '{preset.kind}' "
                    f"doesn't match command '{preset.command}'"
                )

    @classmethod
    def from_toml(cls, text: str) -> "PresetCatalog":
        data = tomli.loads(text)
        return cls(preset_from_row(row) for row in data.get("preset", []))

    def __len__(self) -> int:
        return len(self._presets)

    def list_presets(self) -> list[PresetDefinition]:
        return list(self._presets)

    def get_by_name(self, name: str) -> PresetDefinition | None:
        return self._by_name.get(name)

    def categories(self) -> list[str]:
        return sorted({p.category for p in self._presets})

    def kinds(self) -> list[str]:
        return sorted({p.kind for p in self._presets})

    def by_category(self, category: str) -> list[PresetDefinition]:
        return [p for p in self._presets if p.category == category]

    def by_kind(self, kind: str) -> list[PresetDefinition]:
        wanted = kind.lower()
        return [p for p in self._presets if p.kind.lower() == wanted]

    def available(self, installed_names: Iterable[str]) -> list[PresetDefinition]:
        """Presets whose name is not already installed."""
        installed = set(installed_names)
        return [p for p in self._presets if p.name not in installed]


@lru_cache(maxsize=1)
def get_catalog() -> PresetCatalog:
    """Load the bundled catalog (once per process)."""
    text = resources.files(__package__).joinpath(PRESETS_RESOURCE).read_text(encoding="utf-8")
    catalog = PresetCatalog.from_toml(text)
    logger.debug(f"Loaded {len(catalog)} presets")
    return catalog


def missing_api_keys(preset: PresetDefinition, secrets: Mapping[str, str] | None) -> list[str]:
    """Names of required API keys that were not supplied (or are blank)."""
    supplied = secrets or {}
    return [
        key.name
        for key in preset.api_keys
        if key.required and not str(supplied.get(key.name, "")).strip()
    ]


def to_server_entry(
    preset: PresetDefinition,
    secrets: Mapping[str, str] | None = None,
) -> ServerEntry:
    """Build a ServerEntry from a preset plus user-supplied secrets.

    The environment is the preset's defaults updated with ``secrets``;
    supplied values win on key collisions. Pure: the preset is not touched.
    """
    env = preset.default_env
    if secrets:
        env.update(secrets)
    return ServerEntry(
        name=preset.name,
        command=preset.command,
        args=list(preset.args),
        env=env,
    )
