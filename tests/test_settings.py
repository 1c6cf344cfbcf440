# Tests for persisted application settings
import json

import pytest

from mcpdesk.errors import ParseError, SchemaError
from mcpdesk.models import AppSettings
from mcpdesk.settings import load_settings, save_settings, settings_from_dict


class TestLoadSettings:
    """Tests for load_settings."""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "settings.json")
        assert settings == AppSettings()
        assert settings.claude_config_path == ""
        assert settings.dark_mode is False

    def test_reads_fields(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"claudeConfigPath": "/x/config.json", "darkMode": True}))

        settings = load_settings(path)

        assert settings.claude_config_path == "/x/config.json"
        assert settings.dark_mode is True

    def test_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"darkMode": true}')

        assert load_settings(path) == AppSettings(dark_mode=True)

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"darkMode": ')

        with pytest.raises(ParseError) as exc_info:
            load_settings(path)
        assert exc_info.value.line == 1

    def test_non_finite_literal_rejected(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"darkMode": false, "zoom": Infinity}')

        with pytest.raises(ParseError) as exc_info:
            load_settings(path)
        assert (exc_info.value.line, exc_info.value.column) == (1, 29)

    def test_wrong_type(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"darkMode": "yes"}')

        with pytest.raises(SchemaError):
            load_settings(path)

    def test_non_object(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[]")

        with pytest.raises(SchemaError):
            load_settings(path)


class TestSaveSettings:
    """Tests for save_settings."""

    def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        settings = AppSettings(claude_config_path="/a/b.json", dark_mode=True)

        result = save_settings(settings, path)

        assert result.success
        assert result.message == "Settings saved successfully"
        assert load_settings(path) == settings

    def test_unknown_keys_survive(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text('{"windowWidth": 800, "darkMode": false}')

        settings = load_settings(path)
        settings.dark_mode = True
        save_settings(settings, path)

        data = json.loads(path.read_text())
        assert data == {"windowWidth": 800, "darkMode": True, "claudeConfigPath": ""}

    def test_non_finite_value_not_written(self, tmp_path):
        """Test a value JSON can't hold fails the save and leaves the file alone."""
        path = tmp_path / "settings.json"
        path.write_text('{"darkMode": false}')

        result = save_settings(AppSettings(extra={"zoom": float("inf")}), path)

        assert not result.success
        assert isinstance(result.error, SchemaError)
        assert path.read_text() == '{"darkMode": false}'
        assert list(tmp_path.iterdir()) == [path]


def test_settings_from_dict_rejects_bad_path():
    with pytest.raises(SchemaError, match="claudeConfigPath"):
        settings_from_dict({"claudeConfigPath": 5})
