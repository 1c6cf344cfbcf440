# ABOUTME: Tests for the bundled preset catalog and preset installation helpers
# ABOUTME: Covers queries, legacy row normalization and ServerEntry construction
import pytest

from mcpdesk.models import ApiKeyRequirement, PresetDefinition, ServerEntry
from mcpdesk.presets import (
    PresetCatalog,
    get_catalog,
    kind_for_command,
    kind_matches_command,
    missing_api_keys,
    preset_from_row,
    to_server_entry,
)


def make_preset(name="p", kind="npx", command="npx", env=(), api_keys=(), category="Utilities"):
    return PresetDefinition(
        name=name,
        description=f"{name} preset",
        category=category,
        kind=kind,
        command=command,
        args=("-y", name),
        env=env,
        api_keys=api_keys,
    )


class TestBundledCatalog:
    """Tests against the presets shipped with the package."""

    def test_declaration_order(self):
        names = [p.name for p in get_catalog().list_presets()]
        assert names[0] == "dice"
        assert names[:4] == ["dice", "time", "sequential-thinking", "browsermcp"]

    def test_names_unique(self):
        names = [p.name for p in get_catalog().list_presets()]
        assert len(names) == len(set(names))

    def test_get_by_name(self):
        preset = get_catalog().get_by_name("brave-search")
        assert preset is not None
        assert preset.category == "Search"
        assert preset.kind == "npx"
        assert [k.name for k in preset.api_keys] == ["BRAVE_API_KEY"]
        assert preset.requires_api_key

    def test_get_unknown_returns_none(self):
        assert get_catalog().get_by_name("does-not-exist") is None

    def test_legacy_api_key_fields_normalized(self):
        """Test apiKeyName/apiKeyDescription rows become api_keys."""
        preset = get_catalog().get_by_name("openweather")
        assert preset is not None
        assert preset.api_keys == (
            ApiKeyRequirement(
                name="OWM_API_KEY",
                description="Get your API key from https://openweathermap.org/api",
            ),
        )

    def test_default_env(self):
        preset = get_catalog().get_by_name("fetch")
        assert preset is not None
        assert preset.default_env == {"PYTHONIOENCODING": "utf-8"}

    def test_categories_sorted_and_distinct(self):
        categories = get_catalog().categories()
        assert categories == sorted(set(categories))
        assert "Utilities" in categories
        assert "Development" in categories

    def test_by_category_matches_filter(self):
        catalog = get_catalog()
        for category in catalog.categories():
            assert catalog.by_category(category) == [
                p for p in catalog.list_presets() if p.category == category
            ]

    def test_by_category_unknown_is_empty(self):
        assert get_catalog().by_category("Nope") == []

    def test_by_kind_case_insensitive(self):
        catalog = get_catalog()
        assert catalog.by_kind("NPX") == catalog.by_kind("npx")
        assert all(p.kind == "docker" for p in catalog.by_kind("Docker"))

    def test_kinds(self):
        assert get_catalog().kinds() == ["docker", "npx", "uvx"]

    def test_every_kind_matches_command(self):
        assert all(kind_matches_command(p) for p in get_catalog().list_presets())

    def test_available_excludes_installed(self):
        catalog = get_catalog()
        available = catalog.available(["dice", "github", "not-a-preset"])
        names = [p.name for p in available]
        assert "dice" not in names
        assert "github" not in names
        assert len(available) == len(catalog) - 2


class TestRows:
    """Tests for preset_from_row and PresetCatalog construction."""

    def test_kind_derived_from_command(self):
        preset = preset_from_row({"name": "x", "command": "UVX", "args": ["tool"]})
        assert preset.kind == "uvx"
        assert preset.category == "Other"

    def test_missing_command_rejected(self):
        with pytest.raises(ValueError, match="command"):
            preset_from_row({"name": "x"})

    def test_legacy_key_not_duplicated(self):
        row = {
            "name": "x",
            "command": "npx",
            "apiKeys": [{"name": "K", "description": "new"}],
            "apiKeyName": "K",
        }
        assert [k.name for k in preset_from_row(row).api_keys] == ["K"]

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="unique"):
            PresetCatalog([make_preset("a"), make_preset("a")])

    def test_from_toml(self):
        catalog = PresetCatalog.from_toml(
            '[[preset]]\nname = "one"\ncommand = "npx"\n'
            '[[preset]]\nname = "two"\ncommand = "docker"\ncategory = "System"\n'
        )
        assert [p.name for p in catalog.list_presets()] == ["one", "two"]
        assert catalog.kinds() == ["docker", "npx"]

    def test_kind_for_command(self):
        assert kind_for_command("Docker") == "docker"
        assert kind_for_command("node") == "node"

    def test_mismatched_kind_detected(self):
        assert not kind_matches_command(make_preset(kind="docker", command="npx"))
        assert kind_matches_command(make_preset(kind="custom", command="node"))


class TestToServerEntry:
    """Tests for to_server_entry and missing_api_keys."""

    def test_secrets_override_defaults(self):
        """Test supplied values win and extra keys are added."""
        preset = make_preset(env=(("A", "1"),))

        entry = to_server_entry(preset, {"A": "2", "B": "3"})

        assert entry == ServerEntry(
            name="p", command="npx", args=["-y", "p"], env={"A": "2", "B": "3"}
        )

    def test_preset_not_mutated(self):
        preset = make_preset(env=(("A", "1"),))
        to_server_entry(preset, {"A": "2"})
        assert preset.default_env == {"A": "1"}

    def test_without_secrets(self):
        entry = to_server_entry(make_preset())
        assert entry.env == {}
        assert entry.args == ["-y", "p"]

    def test_missing_api_keys(self):
        preset = make_preset(api_keys=(
            ApiKeyRequirement("TOKEN"),
            ApiKeyRequirement("OPTIONAL", required=False),
        ))
        assert missing_api_keys(preset, None) == ["TOKEN"]
        assert missing_api_keys(preset, {"TOKEN": "  "}) == ["TOKEN"]
        assert missing_api_keys(preset, {"TOKEN": "abc"}) == []
