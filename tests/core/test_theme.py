"""
Unit Tests for theme normalization.
"""

import pytest

from marksheet_toolkit.core.models import DEFAULT_THEME, Orientation, ThemeConfig, normalize_theme


class TestNormalizeTheme:
    def test_when_none_then_defaults(self):
        assert normalize_theme(None) is DEFAULT_THEME

    def test_when_already_normalized_then_returned_unchanged(self):
        theme = normalize_theme({"gradeColor": "#111111"})
        assert normalize_theme(theme) is theme

    def test_when_partial_margins_then_merged_per_side(self):
        theme = normalize_theme({"margins": {"top": 20}})

        assert theme.margins.top == 20
        assert theme.margins.left == DEFAULT_THEME.margins.left
        assert theme.margins.bottom == DEFAULT_THEME.margins.bottom

    def test_when_numeric_key_not_numeric_then_default(self):
        theme = normalize_theme({"schoolNameSize": "big"})
        assert theme.school_name_size == DEFAULT_THEME.school_name_size

    def test_when_unknown_or_null_keys_then_ignored(self):
        theme = normalize_theme({"sparkles": True, "gradeColor": None})
        assert theme == DEFAULT_THEME

    def test_when_watermark_opacity_out_of_range_then_clamped(self):
        assert normalize_theme({"watermarkOpacity": 5}).watermark_opacity == 1.0
        assert normalize_theme({"watermarkOpacity": -1}).watermark_opacity == 0.0

    def test_when_alignment_valid_then_lowercased(self):
        assert normalize_theme({"schoolNameAlign": "Left"}).school_name_align == "left"

    def test_when_alignment_unknown_then_default(self):
        assert normalize_theme({"schoolNameAlign": "middle"}).school_name_align == "center"

    def test_when_scale_not_positive_then_default(self):
        assert normalize_theme({"resultContentScale": 0}).result_content_scale == 1.0

    def test_when_payload_not_mapping_then_defaults(self):
        assert normalize_theme(["not", "a", "theme"]) is DEFAULT_THEME

    def test_result_is_immutable(self):
        theme = normalize_theme({})
        with pytest.raises(AttributeError):
            theme.grade_color = "#000000"

    def test_to_dict_uses_camel_case_keys(self):
        data = ThemeConfig().to_dict()
        assert data["schoolNameColor"] == DEFAULT_THEME.school_name_color
        assert data["margins"] == {"top": 10.0, "right": 10.0, "bottom": 10.0, "left": 10.0}


class TestOrientation:
    def test_parse_when_landscape_any_case_then_landscape(self):
        assert Orientation.parse("LANDSCAPE") is Orientation.LANDSCAPE

    def test_parse_when_unknown_then_portrait(self):
        assert Orientation.parse("sideways") is Orientation.PORTRAIT
        assert Orientation.parse(None) is Orientation.PORTRAIT
