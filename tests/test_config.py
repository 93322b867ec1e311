"""Tests for the Config class.

This module contains tests for defaults, validation of every setting and loading
settings from editor-style mappings and JSON files.
"""

import json

import g4f  # type: ignore
import pytest

from agent_commit.config import SETTING_KEYS, Config
from agent_commit.models import CommitPolicy


class TestConfig:
    """Test suite for the Config class."""

    def test_default_config(self):
        """Test that the default configuration is valid."""
        config = Config()
        assert config.is_valid()
        assert config.enabled is True
        assert config.typing_speed_threshold == 150
        assert config.min_characters_for_analysis == 10
        assert config.session_timeout == 2000
        assert config.commit_frequency is CommitPolicy.ON_SAVE
        assert config.auto_stage is True
        assert config.exclude_patterns == []
        assert config.commit_message_template == "AI: {description}"
        assert config.ai_author_suffix == "(agent)"
        assert config.use_ai_generator is False
        assert config.show_notifications is True
        assert config.debounce_delay == 1000
        assert config.model == g4f.models.gpt_4o_mini

    def test_defaults_are_not_shared(self):
        first, second = Config(), Config()
        first.exclude_patterns.append("*.log")
        assert second.exclude_patterns == []

    def test_unit_conversions(self):
        config = Config(session_timeout=2500, debounce_delay=250)
        assert config.session_timeout_seconds == 2.5
        assert config.debounce_seconds == 0.25

    @pytest.mark.parametrize("value,expected", [
        ("immediate", CommitPolicy.IMMEDIATE),
        ("onSave", CommitPolicy.ON_SAVE),
        ("manual", CommitPolicy.MANUAL),
        (CommitPolicy.MANUAL, CommitPolicy.MANUAL),
    ])
    def test_commit_frequency_accepts_strings(self, value, expected):
        assert Config(commit_frequency=value).commit_frequency is expected

    @pytest.mark.parametrize("field_name", ["enabled", "auto_stage", "use_ai_generator", "show_notifications"])
    @pytest.mark.parametrize("invalid_value", [None, 1, "True"])
    def test_invalid_booleans(self, field_name, invalid_value):
        with pytest.raises(ValueError) as excinfo:
            Config(**{field_name: invalid_value})
        assert f"Invalid configuration: {field_name} must be a boolean value" in str(excinfo.value)

    @pytest.mark.parametrize(
        "field_name,invalid_value,expected_error",
        [
            ("typing_speed_threshold", 49, "typing_speed_threshold must be a number between 50 and 500"),
            ("typing_speed_threshold", 501, "typing_speed_threshold must be a number between 50 and 500"),
            ("typing_speed_threshold", "fast", "typing_speed_threshold must be a number between 50 and 500"),
            ("typing_speed_threshold", True, "typing_speed_threshold must be a number between 50 and 500"),
            ("min_characters_for_analysis", 4, "min_characters_for_analysis must be an integer between 5 and 50"),
            ("min_characters_for_analysis", 51, "min_characters_for_analysis must be an integer between 5 and 50"),
            ("min_characters_for_analysis", 10.5,
             "min_characters_for_analysis must be an integer between 5 and 50"),
            ("session_timeout", 499, "session_timeout must be a number of milliseconds between 500 and 10000"),
            ("session_timeout", 10001, "session_timeout must be a number of milliseconds between 500 and 10000"),
            ("commit_frequency", "sometimes", "commit_frequency must be one of: immediate, onSave, manual"),
            ("exclude_patterns", "*.log", "exclude_patterns must be a list of strings"),
            ("exclude_patterns", ["*.log", 3], "exclude_patterns must be a list of strings"),
            ("commit_message_template", "  ", "commit_message_template must be a non-empty string"),
            ("ai_author_suffix", None, "ai_author_suffix must be a string"),
            ("debounce_delay", -1, "debounce_delay must be a number of milliseconds between 0 and 10000"),
            ("fallback_timeout", 0.5, "fallback_timeout must be a number between 1.0 and 60.0"),
            ("session_history_size", -1, "session_history_size must be a non-negative integer"),
        ],
    )
    def test_invalid_values(self, field_name, invalid_value, expected_error):
        with pytest.raises(ValueError) as excinfo:
            Config(**{field_name: invalid_value})
        assert f"Invalid configuration: {expected_error}" in str(excinfo.value)

    @pytest.mark.parametrize("field_name,value", [
        ("typing_speed_threshold", 50),
        ("typing_speed_threshold", 500),
        ("min_characters_for_analysis", 5),
        ("min_characters_for_analysis", 50),
        ("session_timeout", 500),
        ("session_timeout", 10000),
        ("debounce_delay", 0),
        ("ai_author_suffix", ""),
    ])
    def test_boundary_values_are_valid(self, field_name, value):
        assert Config(**{field_name: value}).is_valid()

    def test_model_as_string(self):
        config = Config(model="gpt-4o")
        assert config.model == "gpt-4o"


class TestLoading:

    def test_from_mapping_uses_editor_names(self):
        config = Config.from_mapping({
            "typingSpeedThreshold": 200,
            "commitFrequency": "immediate",
            "excludePatterns": ["*.log"],
            "useCursorAI": True,
            "aiAuthorSuffix": "[bot]",
        })
        assert config.typing_speed_threshold == 200
        assert config.commit_frequency is CommitPolicy.IMMEDIATE
        assert config.exclude_patterns == ["*.log"]
        assert config.use_ai_generator is True
        assert config.ai_author_suffix == "[bot]"

    def test_from_mapping_accepts_attribute_names_and_ignores_unknown(self):
        config = Config.from_mapping({"auto_stage": False, "colorTheme": "dark"})
        assert config.auto_stage is False

    def test_from_mapping_validates(self):
        with pytest.raises(ValueError, match="typing_speed_threshold"):
            Config.from_mapping({"typingSpeedThreshold": 5000})

    def test_every_setting_key_maps_to_a_field(self):
        config = Config()
        for name in SETTING_KEYS.values():
            assert hasattr(config, name)

    def test_load_plain_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"sessionTimeout": 3000, "showNotifications": False}))
        config = Config.load(path)
        assert config.session_timeout == 3000
        assert config.show_notifications is False

    def test_load_nested_section(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({
            "editor.fontSize": 14,
            "agentCommit": {"commitFrequency": "manual", "debounceDelay": 0},
        }))
        config = Config.load(path)
        assert config.commit_frequency is CommitPolicy.MANUAL
        assert config.debounce_delay == 0

    def test_load_rejects_non_object(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError, match="must contain a JSON object"):
            Config.load(path)

    @pytest.mark.parametrize("section", [[], "manual", 3])
    def test_load_rejects_non_object_section(self, tmp_path, section):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"agentCommit": section}))
        with pytest.raises(ValueError, match="agentCommit in .* must be a JSON object"):
            Config.load(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            Config.load(tmp_path / "missing.json")
