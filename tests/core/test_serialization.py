"""
Unit Tests for loading the persisted app state.
"""

import json
import logging

import pytest

from marksheet_toolkit.core.models import Orientation
from marksheet_toolkit.core.schemas.validator import ValidationError
from marksheet_toolkit.core.utils.serialization import (
    StateLoadError,
    deserialize_app_state,
    load_app_state,
    serialize_app_state,
)


class TestLoadAppState:
    def test_load_when_valid_file_then_state_built(self, state_file):
        state = load_app_state(state_file)

        assert [c.class_name for c in state.classes] == ["Class 10"]
        assert [s.name for s in state.students] == ["Asha Rao", "Ravi Kumar"]
        assert state.orientation is Orientation.PORTRAIT
        assert state.school_info.session == "2024-25"

    def test_load_normalizes_theme_once(self, state_file):
        state = load_app_state(state_file)

        assert state.theme.school_name_color == "#123456"
        assert state.theme.margins.top == 12
        assert state.theme.margins.left == 10

    def test_load_when_missing_file_then_state_load_error(self, tmp_path):
        with pytest.raises(StateLoadError, match="Cannot read"):
            load_app_state(tmp_path / "nope.json")

    def test_load_when_not_json_then_state_load_error(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StateLoadError, match="not valid JSON"):
            load_app_state(path)

    def test_load_when_invalid_then_validation_error(self, tmp_path, state_data):
        state_data["classes"][0]["passPercentage"] = -1
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(state_data), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_app_state(path)


class TestDeserializeAppState:
    def test_when_orientation_missing_then_portrait(self, state_data):
        del state_data["orientation"]
        assert deserialize_app_state(state_data).orientation is Orientation.PORTRAIT

    def test_when_orphan_student_then_warning_logged(self, state_data, caplog):
        state_data["students"][1]["className"] = "Class 99"
        with caplog.at_level(logging.WARNING):
            state = deserialize_app_state(state_data)
        assert state.class_for(state.students[1]) is None
        assert "reference no known class" in caplog.text

    def test_serialize_when_loaded_then_keys_match_persisted_shape(self, state_data):
        state = deserialize_app_state(state_data)
        data = serialize_app_state(state)

        assert data["students"][0]["rollNo"] == "1"
        assert data["classes"][0]["subjects"][2]["type"] == "Co-Scholastic"
        assert deserialize_app_state(data) == state
