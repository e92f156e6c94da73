"""
Unit Tests for single-student export.
"""

import io
from dataclasses import replace

import pytest
from pypdf import PdfReader

from conftest import TinyRenderer
from marksheet_toolkit.builder.export import RenderFailure, export_one, save_one
from marksheet_toolkit.builder.layout import compose_marksheet
from marksheet_toolkit.builder.rendering import RenderError
from marksheet_toolkit.core.models import Orientation


class FailingRenderer(TinyRenderer):
    def paint(self, description, resources):
        raise RenderError("surface crashed")


class OutOfMemoryRenderer(TinyRenderer):
    def paint(self, description, resources):
        raise MemoryError("raster too large")


class TestExportOne:
    def test_returns_one_page_pdf(self, asha, class_config, school, theme, tiny_renderer):
        data = export_one(asha, class_config, school, theme, "portrait", renderer=tiny_renderer)

        assert data.startswith(b"%PDF-")
        assert len(PdfReader(io.BytesIO(data)).pages) == 1

    def test_default_font_size_is_18px(self, asha, class_config, school, theme, tiny_renderer):
        export_one(asha, class_config, school, theme, Orientation.PORTRAIT, renderer=tiny_renderer)

        expected = compose_marksheet(asha, class_config, school, theme, Orientation.PORTRAIT, 18)
        assert tiny_renderer.painted == [expected]

    def test_font_size_override(self, asha, class_config, school, theme, tiny_renderer):
        export_one(asha, class_config, school, theme, "portrait", font_size_px=12, renderer=tiny_renderer)

        expected = compose_marksheet(asha, class_config, school, theme, "portrait", 12)
        assert tiny_renderer.painted[0].fingerprint() == expected.fingerprint()

    def test_landscape_page(self, asha, class_config, school, theme, tiny_renderer):
        data = export_one(asha, class_config, school, theme, "landscape", renderer=tiny_renderer)
        page = PdfReader(io.BytesIO(data)).pages[0]
        assert float(page.mediabox.width) > float(page.mediabox.height)

    def test_when_paint_fails_then_render_failure_with_identity(self, asha, class_config, school, theme):
        renderer = FailingRenderer()
        with pytest.raises(RenderFailure) as exc:
            export_one(asha, class_config, school, theme, "portrait", renderer=renderer)

        assert exc.value.student_id == "s1"
        assert exc.value.student_name == "Asha Rao"
        assert isinstance(exc.value.__cause__, RenderError)
        # Surface released after the failure
        with renderer.surface(timeout=0.05):
            pass

    def test_when_logo_unreadable_then_render_failure(self, asha, class_config, school, theme, tiny_renderer):
        broken = replace(school, logo="missing/logo.png")
        with pytest.raises(RenderFailure, match="Asha Rao"):
            export_one(asha, class_config, broken, theme, "portrait", renderer=tiny_renderer)

    def test_when_paint_runs_out_of_memory_then_render_failure(self, asha, class_config, school, theme):
        renderer = OutOfMemoryRenderer()
        with pytest.raises(RenderFailure, match="Asha Rao") as exc:
            export_one(asha, class_config, school, theme, "portrait", renderer=renderer)

        assert exc.value.student_id == "s1"
        assert isinstance(exc.value.__cause__, RenderError)
        assert isinstance(exc.value.__cause__.__cause__, MemoryError)

    def test_when_font_size_invalid_then_render_failure(self, asha, class_config, school, theme, tiny_renderer):
        with pytest.raises(RenderFailure) as exc:
            export_one(asha, class_config, school, theme, "portrait", font_size_px=0, renderer=tiny_renderer)
        assert isinstance(exc.value.__cause__, ValueError)


class TestSaveOne:
    def test_writes_named_file(self, tmp_path, asha, class_config, school, theme, tiny_renderer):
        path = save_one(
            asha, class_config, school, theme, "portrait",
            output_dir=tmp_path / "out", renderer=tiny_renderer,
        )

        assert path == tmp_path / "out" / "Asha Rao_Marksheet.pdf"
        assert path.read_bytes().startswith(b"%PDF-")

    def test_when_render_fails_then_no_file(self, tmp_path, asha, class_config, school, theme):
        with pytest.raises(RenderFailure):
            save_one(
                asha, class_config, school, theme, "portrait",
                output_dir=tmp_path, renderer=FailingRenderer(),
            )
        assert list(tmp_path.iterdir()) == []
