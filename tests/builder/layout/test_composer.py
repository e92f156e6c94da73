"""
Unit Tests for marksheet composition.

The composer is a pure function, so these tests inspect the produced
PageDescription directly without rendering anything.
"""

from dataclasses import replace

import pytest

from conftest import png_data_uri
from marksheet_toolkit.builder.layout import (
    ImageElement,
    QrElement,
    TextElement,
    compose_marksheet,
    verification_payload,
)
from marksheet_toolkit.builder.results import compute_result
from marksheet_toolkit.core.models import (
    ClassConfig,
    ExamConfig,
    Orientation,
    SubjectConfig,
    normalize_theme,
)


def texts(description):
    return [e.text for e in description.elements if isinstance(e, TextElement)]


def images(description):
    return [e for e in description.elements if isinstance(e, ImageElement)]


class TestComposeMarksheet:
    def test_when_same_inputs_then_identical_description(self, asha, class_config, school, theme):
        first = compose_marksheet(asha, class_config, school, theme, "portrait")
        second = compose_marksheet(asha, class_config, school, theme, "portrait")

        assert first == second
        assert first.fingerprint() == second.fingerprint()

    def test_when_raw_theme_dict_then_same_as_normalized(self, asha, class_config, school):
        raw = {"gradeColor": "#112233"}
        from_raw = compose_marksheet(asha, class_config, school, raw, "portrait")
        from_normalized = compose_marksheet(asha, class_config, school, normalize_theme(raw), "portrait")
        assert from_raw.fingerprint() == from_normalized.fingerprint()

    def test_when_theme_changes_then_fingerprint_changes(self, asha, class_config, school, theme):
        plain = compose_marksheet(asha, class_config, school, theme, "portrait")
        tinted = compose_marksheet(asha, class_config, school, replace(theme, grade_color="#ff0000"), "portrait")
        assert plain.fingerprint() != tinted.fingerprint()

    def test_portrait_description_matches_a4(self, asha, class_config, school, theme):
        description = compose_marksheet(asha, class_config, school, theme, Orientation.PORTRAIT)

        assert description.width_mm == 210
        assert description.page_height_mm == 297
        assert description.height_mm >= 297
        assert description.orientation is Orientation.PORTRAIT

    def test_landscape_description_is_wide(self, asha, class_config, school, theme):
        description = compose_marksheet(asha, class_config, school, theme, "landscape")

        assert description.width_mm == 297
        assert description.page_height_mm == 210

    def test_header_and_title_text(self, asha, class_config, school, theme):
        lines = texts(compose_marksheet(asha, class_config, school, theme, "portrait"))

        assert any(line.startswith("ADARSH") for line in lines)
        assert "ACADEMIC SESSION: 2024-25" in lines
        assert "PROGRESS REPORT CARD" in lines
        assert "Station Road, Jaipur" in lines

    def test_student_info_includes_extra_fields(self, asha, class_config, school, theme):
        lines = texts(compose_marksheet(asha, class_config, school, theme, "portrait"))

        assert "STUDENT NAME" in lines
        assert "Asha Rao" in lines
        assert "FATHER NAME" in lines
        assert "Vikram Rao" in lines
        assert "Female" in lines

    def test_result_box_shows_percentage_and_label(self, asha, class_config, school, theme):
        lines = texts(compose_marksheet(asha, class_config, school, theme, "portrait"))

        assert "75.00%" in lines
        assert "PASS" in lines
        assert "150 / 200" in lines

    def test_when_failing_then_needs_improvement(self, ravi, class_config, school, theme):
        lines = texts(compose_marksheet(ravi, class_config, school, theme, "portrait"))

        assert "7.50%" in lines
        assert "NEEDS IMPROVEMENT" in lines

    def test_when_grade_missing_then_dash(self, ravi, class_config, school, theme):
        lines = texts(compose_marksheet(ravi, class_config, school, theme, "portrait"))
        assert "-" in lines

    def test_co_scholastic_grade_printed(self, asha, class_config, school, theme):
        lines = texts(compose_marksheet(asha, class_config, school, theme, "portrait"))

        assert "Art & Craft" in lines
        assert "A" in lines

    def test_qr_carries_verification_payload(self, asha, class_config, school, theme):
        description = compose_marksheet(asha, class_config, school, theme, "portrait")
        qr = [e for e in description.elements if isinstance(e, QrElement)]

        assert len(qr) == 1
        assert qr[0].payload == "Name:Asha Rao,Roll:1,Result:PASS,Pct:75.00"

    def test_verification_payload_uses_two_decimals(self, ravi, class_config):
        payload = verification_payload(ravi, compute_result(ravi, class_config))
        assert payload == "Name:Ravi Kumar,Roll:2,Result:NEEDS IMPROVEMENT,Pct:7.50"

    def test_when_subjects_lack_an_exam_then_columns_are_union(self, asha, school, theme):
        t1 = ExamConfig(id="t1", name="Term 1", max_marks=50)
        final = ExamConfig(id="final", name="Final", max_marks=100)
        cls = ClassConfig(
            id="c10",
            class_name="Class 10",
            subjects=(
                SubjectConfig(id="math", name="Mathematics", exams=(t1, final)),
                SubjectConfig(id="sci", name="Science", exams=(t1,)),
            ),
        )
        lines = texts(compose_marksheet(asha, cls, school, theme, "portrait"))

        assert lines.count("MM") == 2
        assert "TERM 1" in lines
        assert "FINAL" in lines
        # Science has no final exam, so only Mathematics prints "100"
        assert lines.count("100") == 1


class TestImages:
    def test_when_no_logo_then_no_images(self, asha, class_config, school, theme):
        description = compose_marksheet(asha, class_config, school, theme, "portrait")

        assert images(description) == []
        assert description.image_sources == ()

    def test_when_logo_then_watermark_painted_last(self, asha, class_config, school, theme):
        logo = png_data_uri("blue")
        themed = replace(theme, watermark_opacity=0.25)
        description = compose_marksheet(
            asha, class_config, replace(school, logo=logo), themed, "portrait",
        )

        last = description.elements[-1]
        assert isinstance(last, ImageElement)
        assert last.source == logo
        assert last.grayscale
        assert last.opacity == 0.25
        assert len(images(description)) == 2
        assert description.image_sources == (logo,)

    def test_when_photo_enabled_and_present_then_photo_drawn(self, asha, class_config, school, theme):
        photo = png_data_uri("green")
        cls = replace(class_config, enable_photo=True)
        student = replace(asha, photo=photo)

        photos = [e for e in images(compose_marksheet(student, cls, school, theme, "portrait")) if e.source == photo]

        assert len(photos) == 1
        assert photos[0].fit == "cover"

    def test_when_photo_disabled_then_photo_skipped(self, asha, class_config, school, theme):
        student = replace(asha, photo=png_data_uri("green"))
        assert images(compose_marksheet(student, class_config, school, theme, "portrait")) == []

    def test_when_photo_enabled_but_missing_then_no_placeholder_image(self, asha, class_config, school, theme):
        cls = replace(class_config, enable_photo=True)
        assert images(compose_marksheet(asha, cls, school, theme, "portrait")) == []


class TestOverflow:
    def test_when_content_too_tall_then_description_grows(self, asha, school, theme):
        exams = (ExamConfig(id="t1", name="Term 1", max_marks=50),)
        cls = ClassConfig(
            id="c10",
            class_name="Class 10",
            subjects=tuple(
                SubjectConfig(id=f"sub{i}", name=f"Subject {i}", exams=exams) for i in range(60)
            ),
        )
        description = compose_marksheet(asha, cls, school, theme, "portrait")

        assert description.overflows
        assert description.height_mm > description.page_height_mm
        assert description.width_mm == 210

    def test_when_more_subjects_then_taller_description(self, asha, class_config, school, theme):
        extra = SubjectConfig(
            id="hist", name="History", exams=(ExamConfig(id="t1", name="Term 1", max_marks=50),),
        )
        longer = replace(class_config, subjects=class_config.subjects + (extra,))

        base = compose_marksheet(asha, class_config, school, theme, "portrait", 40)
        grown = compose_marksheet(asha, longer, school, theme, "portrait", 40)

        assert base.overflows
        assert grown.height_mm > base.height_mm


class TestErrors:
    def test_when_font_size_not_positive_then_raises(self, asha, class_config, school, theme):
        with pytest.raises(ValueError, match="font_size_px"):
            compose_marksheet(asha, class_config, school, theme, "portrait", 0)

    def test_when_margins_consume_page_then_raises(self, asha, class_config, school):
        theme = normalize_theme({"margins": {"left": 150, "right": 150}})
        with pytest.raises(ValueError, match="no room"):
            compose_marksheet(asha, class_config, school, theme, "portrait")

    def test_inputs_not_modified(self, asha, class_config, school, theme):
        before = (asha.to_dict(), class_config.to_dict(), school.to_dict(), theme.to_dict())
        compose_marksheet(asha, class_config, school, theme, "portrait")
        assert (asha.to_dict(), class_config.to_dict(), school.to_dict(), theme.to_dict()) == before
