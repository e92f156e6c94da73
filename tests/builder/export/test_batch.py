"""
Unit Tests for batch export.

Covers partitioning, the progress contract, job validation, the state
machine, first-failure abort with kept files, and cancellation.
"""

import io

import pytest
from pypdf import PdfReader

from conftest import TinyRenderer, make_students
from marksheet_toolkit.builder.config import ExportConfig
from marksheet_toolkit.builder.export import (
    BatchCancelled,
    BatchExporter,
    BatchExportError,
    BatchState,
    InvalidJobError,
    export_batch,
    partition,
)
from marksheet_toolkit.builder.export.batch import (
    CANCELLED_MESSAGE,
    DONE_MESSAGE,
    FAILURE_MESSAGE,
    INIT_MESSAGE,
    _progress_percent,
)
from marksheet_toolkit.builder.layout import compose_marksheet
from marksheet_toolkit.builder.rendering import RenderError


class FlakyRenderer(TinyRenderer):
    """Fails when painting the named student."""

    def __init__(self, fail_on: str):
        super().__init__()
        self.fail_on = fail_on

    def paint(self, description, resources):
        image = super().paint(description, resources)
        if any(getattr(e, "text", None) == self.fail_on for e in description.elements):
            raise RenderError(f"cannot paint {self.fail_on}")
        return image


class OutOfMemoryRenderer(TinyRenderer):
    def paint(self, description, resources):
        raise MemoryError("raster too large")


class MemorySink:
    def __init__(self, events=None):
        self.files = {}
        self.events = events if events is not None else []

    def __call__(self, filename, data):
        self.files[filename] = data
        self.events.append(("save", filename))
        return None


def page_counts(sink: MemorySink):
    return [len(PdfReader(io.BytesIO(data)).pages) for data in sink.files.values()]


@pytest.fixture
def exporter(tiny_renderer):
    return BatchExporter(renderer=tiny_renderer)


class TestPartition:
    @pytest.mark.parametrize(
        "count, size, expected",
        [
            (125, 50, [50, 50, 25]),
            (100, 50, [50, 50]),
            (3, 50, [3]),
            (3, 1, [1, 1, 1]),
        ],
    )
    def test_groups_are_contiguous_and_bounded(self, count, size, expected):
        students = make_students(count)
        groups = partition(students, size)

        assert [len(g) for g in groups] == expected
        assert [s for g in groups for s in g] == students

    def test_when_size_below_one_then_invalid(self):
        with pytest.raises(InvalidJobError):
            partition(make_students(3), 0)


class TestProgressPercent:
    def test_rounds_processed_share(self):
        assert _progress_percent(1, 3) == 33
        assert _progress_percent(2, 3) == 67

    def test_held_below_100_until_last_student(self):
        assert _progress_percent(199, 200) == 99
        assert _progress_percent(200, 200) == 100


class TestExportBatch:
    def test_files_named_and_paged_per_batch(self, exporter, class_config, school, theme):
        sink = MemorySink()
        files = exporter.export_batch(
            make_students(5), class_config, school, theme, "portrait", 2, sink=sink,
        )

        assert [f.filename for f in files] == [
            "Class 10_Batch_1_of_3.pdf",
            "Class 10_Batch_2_of_3.pdf",
            "Class 10_Batch_3_of_3.pdf",
        ]
        assert [f.student_ids for f in files] == [("s1", "s2"), ("s3", "s4"), ("s5",)]
        assert [f.page_count for f in files] == [2, 2, 1]
        assert page_counts(sink) == [2, 2, 1]

    def test_pages_follow_student_order(self, exporter, tiny_renderer, class_config, school, theme):
        students = make_students(3)
        exporter.export_batch(students, class_config, school, theme, "portrait", 2, sink=MemorySink())

        names = [
            next(e.text for e in d.elements if getattr(e, "text", None) in {s.name for s in students})
            for d in tiny_renderer.painted
        ]
        assert names == ["Student 1", "Student 2", "Student 3"]

    def test_progress_monotonic_and_complete_before_last_save(self, exporter, class_config, school, theme):
        events = []
        sink = MemorySink(events)

        def progress(percent, message):
            events.append(("progress", percent, message))

        exporter.export_batch(
            make_students(5), class_config, school, theme, "portrait", 2,
            progress=progress, sink=sink,
        )

        reports = [e for e in events if e[0] == "progress"]
        percents = [e[1] for e in reports]
        assert reports[0] == ("progress", 0, INIT_MESSAGE)
        assert percents == sorted(percents)
        assert percents[-1] == 100
        assert percents.count(100) == 1
        assert len(reports) == 1 + 5
        assert events.index(("progress", 100, "Processing Batch 3 of 3...")) < len(events) - 1
        assert events[-1] == ("save", "Class 10_Batch_3_of_3.pdf")

    def test_state_transitions(self, tiny_renderer, class_config, school, theme):
        seen = []
        exporter = BatchExporter(renderer=tiny_renderer, on_state=lambda s, m: seen.append(s))
        exporter.export_batch(make_students(3), class_config, school, theme, "portrait", 2, sink=MemorySink())

        assert seen[0] is BatchState.INITIALIZING
        assert seen[-1] is BatchState.DONE
        assert seen.count(BatchState.PROCESSING_BATCH) == 2
        assert seen.count(BatchState.PROCESSING_STUDENT) == 3
        assert seen.count(BatchState.SAVING_BATCH_FILE) == 2
        assert exporter.state is BatchState.DONE
        assert exporter.status_message == DONE_MESSAGE

    def test_default_font_size_is_12px(self, exporter, tiny_renderer, class_config, school, theme):
        student = make_students(1)[0]
        exporter.export_batch([student], class_config, school, theme, "portrait", 1, sink=MemorySink())

        expected = compose_marksheet(student, class_config, school, theme, "portrait", 12)
        assert tiny_renderer.painted == [expected]

    def test_default_sink_writes_into_output_dir(self, tmp_path, tiny_renderer, class_config, school, theme):
        exporter = BatchExporter(renderer=tiny_renderer, config=ExportConfig(output_dir=tmp_path))
        files = exporter.export_batch(make_students(3), class_config, school, theme, "portrait", 2)

        assert [f.path for f in files] == [
            tmp_path / "Class 10_Batch_1_of_2.pdf",
            tmp_path / "Class 10_Batch_2_of_2.pdf",
        ]
        assert all(f.path.exists() for f in files)

    def test_batch_size_defaults_to_config(self, tiny_renderer, class_config, school, theme):
        exporter = BatchExporter(renderer=tiny_renderer, config=ExportConfig(batch_size=2))
        files = exporter.export_batch(make_students(3), class_config, school, theme, "portrait", sink=MemorySink())
        assert len(files) == 2

    def test_module_level_wrapper(self, tiny_renderer, class_config, school, theme):
        sink = MemorySink()
        files = export_batch(
            make_students(2), class_config, school, theme, "landscape", 50,
            sink=sink, renderer=tiny_renderer,
        )

        assert [f.filename for f in files] == ["Class 10_Batch_1_of_1.pdf"]
        page = PdfReader(io.BytesIO(sink.files[files[0].filename])).pages[0]
        assert float(page.mediabox.width) > float(page.mediabox.height)


class TestValidation:
    @pytest.mark.parametrize("batch_size", [0, -1, 101, 2.5, True])
    def test_when_batch_size_out_of_range_then_rejected(self, exporter, class_config, school, theme, batch_size):
        with pytest.raises(InvalidJobError):
            exporter.export_batch(make_students(3), class_config, school, theme, "portrait", batch_size)

    def test_when_no_students_then_rejected_without_progress(self, exporter, class_config, school, theme):
        calls = []
        with pytest.raises(InvalidJobError, match="No students"):
            exporter.export_batch(
                [], class_config, school, theme, "portrait", 10,
                progress=lambda p, m: calls.append(p),
            )
        assert calls == []
        assert exporter.state is BatchState.IDLE

    def test_when_student_from_other_class_then_rejected(self, exporter, tiny_renderer, class_config, school, theme):
        students = make_students(2) + make_students(1, class_name="Class 9")
        with pytest.raises(InvalidJobError, match="not in Class 10"):
            exporter.export_batch(students, class_config, school, theme, "portrait", 10)
        assert tiny_renderer.painted == []

    @pytest.mark.parametrize("font_size_px", [0, -4, True, "12"])
    def test_when_font_size_invalid_then_rejected_without_progress(
        self, exporter, tiny_renderer, class_config, school, theme, font_size_px,
    ):
        calls = []
        with pytest.raises(InvalidJobError, match="font_size_px"):
            exporter.export_batch(
                make_students(2), class_config, school, theme, "portrait", 2,
                progress=lambda p, m: calls.append(p), font_size_px=font_size_px,
            )
        assert calls == []
        assert tiny_renderer.painted == []
        assert exporter.state is BatchState.IDLE

    def test_when_already_running_then_second_job_rejected(self, exporter, class_config, school, theme):
        rejected = []

        def progress(percent, message):
            if percent == 0:
                try:
                    exporter.export_batch(make_students(1), class_config, school, theme, "portrait", 1)
                except InvalidJobError as e:
                    rejected.append(str(e))

        exporter.export_batch(
            make_students(2), class_config, school, theme, "portrait", 2,
            progress=progress, sink=MemorySink(),
        )
        assert rejected == ["A batch export is already running"]


class TestFailureAndCancel:
    def test_when_student_fails_then_abort_and_keep_saved_files(self, class_config, school, theme):
        seen = []
        exporter = BatchExporter(renderer=FlakyRenderer("Student 4"), on_state=lambda s, m: seen.append(m))
        sink = MemorySink()

        with pytest.raises(BatchExportError) as exc:
            exporter.export_batch(make_students(5), class_config, school, theme, "portrait", 2, sink=sink)

        error = exc.value
        assert str(error) == FAILURE_MESSAGE
        assert error.student_id == "s4"
        assert error.student_name == "Student 4"
        assert [f.filename for f in error.saved_files] == ["Class 10_Batch_1_of_3.pdf"]
        assert list(sink.files) == ["Class 10_Batch_1_of_3.pdf"]
        assert exporter.state is BatchState.FAILED
        assert seen[-1] == FAILURE_MESSAGE

    def test_when_failed_then_exporter_reusable(self, tiny_renderer, class_config, school, theme):
        exporter = BatchExporter(renderer=FlakyRenderer("Student 1"))
        with pytest.raises(BatchExportError):
            exporter.export_batch(make_students(1), class_config, school, theme, "portrait", 1, sink=MemorySink())

        exporter.renderer = tiny_renderer
        files = exporter.export_batch(make_students(1), class_config, school, theme, "portrait", 1, sink=MemorySink())
        assert len(files) == 1

    def test_when_sink_fails_then_batch_export_error(self, exporter, class_config, school, theme):
        def sink(filename, data):
            raise OSError("disk full")

        with pytest.raises(BatchExportError) as exc:
            exporter.export_batch(make_students(2), class_config, school, theme, "portrait", 2, sink=sink)
        assert exc.value.saved_files == ()
        assert isinstance(exc.value.__cause__, OSError)

    def test_when_renderer_runs_out_of_memory_then_failed_and_reusable(
        self, tiny_renderer, class_config, school, theme,
    ):
        exporter = BatchExporter(renderer=OutOfMemoryRenderer())

        with pytest.raises(BatchExportError) as exc:
            exporter.export_batch(make_students(3), class_config, school, theme, "portrait", 2, sink=MemorySink())

        assert str(exc.value) == FAILURE_MESSAGE
        assert exc.value.student_id == "s1"
        assert exc.value.saved_files == ()
        assert exporter.state is BatchState.FAILED
        assert not exporter.state.is_running

        exporter.renderer = tiny_renderer
        files = exporter.export_batch(make_students(3), class_config, school, theme, "portrait", 2, sink=MemorySink())
        assert len(files) == 2

    def test_when_sink_raises_unexpected_error_then_failed_with_saved_files(
        self, exporter, class_config, school, theme,
    ):
        saved = []

        def sink(filename, data):
            if saved:
                raise RuntimeError("share went away")
            saved.append(filename)
            return None

        with pytest.raises(BatchExportError) as exc:
            exporter.export_batch(make_students(3), class_config, school, theme, "portrait", 2, sink=sink)

        assert [f.filename for f in exc.value.saved_files] == ["Class 10_Batch_1_of_2.pdf"]
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert exporter.state is BatchState.FAILED

    def test_cancel_between_students(self, exporter, tiny_renderer, class_config, school, theme):
        sink = MemorySink()

        def progress(percent, message):
            if percent > 0:
                exporter.cancel()

        with pytest.raises(BatchCancelled) as exc:
            exporter.export_batch(
                make_students(5), class_config, school, theme, "portrait", 1,
                progress=progress, sink=sink,
            )

        assert str(exc.value) == CANCELLED_MESSAGE
        assert len(tiny_renderer.painted) == 1
        assert [f.filename for f in exc.value.saved_files] == ["Class 10_Batch_1_of_5.pdf"]
        assert exporter.state is BatchState.CANCELLED

    def test_cancel_flag_cleared_for_next_job(self, exporter, class_config, school, theme):
        exporter.cancel()
        files = exporter.export_batch(make_students(2), class_config, school, theme, "portrait", 1, sink=MemorySink())
        assert len(files) == 2
