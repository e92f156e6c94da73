"""
Module: builder.export.batch

Purpose:
    Export many students as a series of multi-page PDFs. Students are
    split into contiguous groups of at most ``batch_size``; each group
    becomes one file, saved as soon as it is complete, so no single
    document has to hold the whole class.

    State machine:
        IDLE -> INITIALIZING -> PROCESSING_BATCH(i) -> PROCESSING_STUDENT(j)...
             -> SAVING_BATCH_FILE(i) -> next batch | DONE
        any step -> FAILED (first error) | CANCELLED (between students)

    Processing is strictly sequential and holds the renderer's surface
    for the whole job. The first failure aborts the job; files saved by
    earlier batches are kept and reported on the error.

Key Functions:
    - export_batch(): Module-level convenience wrapper
    - partition(): Contiguous grouping of students

Key Classes:
    - BatchExporter: Orchestrator with progress, state and cancellation
    - BatchFile: One saved output file
    - BatchState: Orchestrator states
    - InvalidJobError, BatchExportError, BatchCancelled

Dependencies:
    - builder.export.single: render_student()
    - builder.layout: fit_to_page()
    - builder.output: MarksheetDocument, batch_filename()

Used By:
    - builder.controller: export_from_state()
    - gui.widgets.bulk_generator: Background export thread
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from marksheet_toolkit.core.models import (
    ClassConfig,
    Orientation,
    SchoolInfo,
    Student,
    ThemeConfig,
)
from marksheet_toolkit.builder.config import BATCH_FONT_SIZE_PX, ExportConfig
from marksheet_toolkit.builder.layout import fit_to_page
from marksheet_toolkit.builder.output import MarksheetDocument, batch_filename
from marksheet_toolkit.builder.rendering import PillowRenderer, Renderer

from .single import render_student

logger = logging.getLogger(__name__)

INIT_MESSAGE = "Initializing PDF engine..."
BATCH_MESSAGE = "Processing Batch {number} of {total}..."
DONE_MESSAGE = "All files generated successfully!"
FAILURE_MESSAGE = "Error during generation. Please try a smaller batch size."
CANCELLED_MESSAGE = "Generation cancelled."

ProgressCallback = Callable[[int, str], None]
BatchSink = Callable[[str, bytes], Optional[Path]]
StateListener = Callable[["BatchState", str], None]


class BatchState(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    PROCESSING_BATCH = "processing_batch"
    PROCESSING_STUDENT = "processing_student"
    SAVING_BATCH_FILE = "saving_batch_file"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_running(self) -> bool:
        return self in _RUNNING


_RUNNING = {
    BatchState.INITIALIZING,
    BatchState.PROCESSING_BATCH,
    BatchState.PROCESSING_STUDENT,
    BatchState.SAVING_BATCH_FILE,
}


# ─────────────────────────────────────────────────────────────────────────────
# Errors
# ─────────────────────────────────────────────────────────────────────────────

class InvalidJobError(ValueError):
    """Batch request rejected before any work started."""
    pass


class BatchExportError(Exception):
    """
    Terminal batch failure.

    Attributes:
        student_id / student_name: Student being processed when it failed
        saved_files: Files completed before the failure (still valid)
    """

    def __init__(
        self,
        message: str,
        *,
        student_id: Optional[str] = None,
        student_name: Optional[str] = None,
        saved_files: Tuple["BatchFile", ...] = (),
    ):
        super().__init__(message)
        self.student_id = student_id
        self.student_name = student_name
        self.saved_files = saved_files


class BatchCancelled(Exception):
    """Cancellation observed between students."""

    def __init__(self, message: str, saved_files: Tuple["BatchFile", ...] = ()):
        super().__init__(message)
        self.saved_files = saved_files


@dataclass(frozen=True)
class BatchFile:
    """
    One saved batch file.

    Attributes:
        index: 0-based batch index
        total: Number of batches in the job
        filename: Output file name
        student_ids: Students in the file, in page order
        path: Where the sink stored it (None if the sink keeps it elsewhere)
    """

    index: int
    total: int
    filename: str
    student_ids: Tuple[str, ...]
    path: Optional[Path] = None

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def page_count(self) -> int:
        return len(self.student_ids)


def partition(students: Sequence[Student], batch_size: int) -> List[Tuple[Student, ...]]:
    """
    Split students into contiguous groups of at most ``batch_size``.

    Example:
        >>> [len(g) for g in partition(students_125, 50)]
        [50, 50, 25]
    """
    if batch_size < 1:
        raise InvalidJobError(f"batch_size must be at least 1: {batch_size}")
    return [tuple(students[i:i + batch_size]) for i in range(0, len(students), batch_size)]


def _progress_percent(processed: int, total: int) -> int:
    """round(100 * processed / total), held below 100 until the last student."""
    percent = int(round(100 * processed / total))
    if processed < total:
        return min(percent, 99)
    return 100


class BatchExporter:
    """
    Sequential batch orchestrator.

    Args:
        renderer: Renderer whose surface is held for each job
        config: Export settings (batch size bounds, output folder, timeout)
        on_state: Listener called with (state, message) on every transition

    Example:
        >>> exporter = BatchExporter(config=ExportConfig(output_dir=Path("out")))
        >>> files = exporter.export_batch(students, cls, school, theme, "portrait", 50)
        >>> [f.filename for f in files]
        ['Class 10_Batch_1_of_3.pdf', 'Class 10_Batch_2_of_3.pdf', 'Class 10_Batch_3_of_3.pdf']
    """

    def __init__(
        self,
        renderer: Optional[Renderer] = None,
        config: Optional[ExportConfig] = None,
        *,
        on_state: Optional[StateListener] = None,
    ) -> None:
        self.config = config or ExportConfig()
        self.renderer = renderer or PillowRenderer(self.config.supersample)
        self.on_state = on_state
        self._state = BatchState.IDLE
        self._status_message = ""
        self._cancel = threading.Event()

    # ─────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> BatchState:
        return self._state

    @property
    def status_message(self) -> str:
        return self._status_message

    def cancel(self) -> None:
        """Request cancellation; honoured before the next student starts."""
        if self._state.is_running:
            logger.info("Batch cancellation requested")
        self._cancel.set()

    def _set_state(self, state: BatchState, message: str) -> None:
        self._state = state
        self._status_message = message
        if self.on_state is not None:
            self.on_state(state, message)

    # ─────────────────────────────────────────────────────────────────────
    # Job
    # ─────────────────────────────────────────────────────────────────────

    def validate(
        self,
        students: Sequence[Student],
        class_config: ClassConfig,
        batch_size: int,
        font_size_px: float = BATCH_FONT_SIZE_PX,
    ) -> None:
        """
        Reject invalid jobs before any work.

        Raises:
            InvalidJobError: No students, batch size outside
                [1, max_batch_size], a non-positive font size, or a
                student from another class
        """
        if not students:
            raise InvalidJobError("No students selected")
        if isinstance(batch_size, bool) or not isinstance(batch_size, int):
            raise InvalidJobError(f"batch_size must be an integer: {batch_size!r}")
        if not (1 <= batch_size <= self.config.max_batch_size):
            raise InvalidJobError(
                f"batch_size must be between 1 and {self.config.max_batch_size}: {batch_size}"
            )
        if (
            isinstance(font_size_px, bool)
            or not isinstance(font_size_px, (int, float))
            or font_size_px <= 0
        ):
            raise InvalidJobError(f"font_size_px must be a positive number: {font_size_px!r}")
        strangers = [s.name for s in students if not s.belongs_to(class_config)]
        if strangers:
            raise InvalidJobError(
                f"{len(strangers)} student(s) are not in {class_config.class_name}: {strangers[:5]}"
            )

    def export_batch(
        self,
        students: Sequence[Student],
        class_config: ClassConfig,
        school: SchoolInfo,
        theme: Union[ThemeConfig, Mapping[str, Any], None],
        orientation: Union[Orientation, str],
        batch_size: Optional[int] = None,
        *,
        progress: Optional[ProgressCallback] = None,
        sink: Optional[BatchSink] = None,
        font_size_px: Optional[float] = None,
    ) -> List[BatchFile]:
        """
        Export students in batches.

        Args:
            students: Students in output order
            class_config: Their class
            school: School header information
            theme: Normalized theme
            orientation: Page orientation
            batch_size: Students per file (config default when None)
            progress: Called with (percent, message) once at start and
                after every student
            sink: Receives (filename, pdf_bytes) per finished batch and
                returns where it stored them; defaults to writing into
                ``config.output_dir``
            font_size_px: Base font size (12px by default)

        Returns:
            Saved files in batch order

        Raises:
            InvalidJobError: Rejected before processing
            BatchExportError: First failure; carries files already saved
            BatchCancelled: cancel() was called
        """
        if self._state.is_running:
            raise InvalidJobError("A batch export is already running")

        students = list(students)
        size = self.config.batch_size if batch_size is None else batch_size
        font_size = font_size_px if font_size_px is not None else BATCH_FONT_SIZE_PX
        self.validate(students, class_config, size, font_size)

        orientation = Orientation.parse(orientation)
        sink = sink or self._write_to_output_dir
        groups = partition(students, size)
        total_files = len(groups)
        total_students = len(students)

        self._cancel.clear()
        saved: List[BatchFile] = []
        current: Optional[Student] = None
        processed = 0
        start_time = time.perf_counter()

        logger.info(
            f"Starting batch export for {class_config.class_name}: "
            f"{total_students} students in {total_files} file(s) of up to {size}"
        )
        self._set_state(BatchState.INITIALIZING, INIT_MESSAGE)
        _notify(progress, 0, INIT_MESSAGE)

        try:
            with self.renderer.surface() as surface:
                for index, group in enumerate(groups):
                    message = BATCH_MESSAGE.format(number=index + 1, total=total_files)
                    self._set_state(BatchState.PROCESSING_BATCH, message)
                    filename = batch_filename(class_config.class_name, index, total_files)
                    document = MarksheetDocument(orientation, title=filename[:-4])

                    for position, student in enumerate(group):
                        if self._cancel.is_set():
                            raise BatchCancelled(CANCELLED_MESSAGE, tuple(saved))
                        current = student
                        self._set_state(BatchState.PROCESSING_STUDENT, message)

                        image = render_student(
                            surface, student, class_config, school, theme, orientation,
                            font_size_px=font_size, timeout=self.config.ready_timeout_s,
                        )
                        if position > 0:
                            document.add_page()
                        placement = fit_to_page(
                            image.width, image.height,
                            document.page_width_mm, document.page_height_mm,
                        )
                        document.place_image(image, placement)

                        processed += 1
                        logger.debug(f"Placed {student.name} ({processed}/{total_students})")
                        _notify(progress, _progress_percent(processed, total_students), message)

                    current = None
                    self._set_state(BatchState.SAVING_BATCH_FILE, f"Saving {filename}...")
                    path = sink(filename, document.to_bytes())
                    saved.append(
                        BatchFile(
                            index=index,
                            total=total_files,
                            filename=filename,
                            student_ids=tuple(s.id for s in group),
                            path=path,
                        )
                    )
                    logger.info(f"Saved batch {index + 1}/{total_files}: {path or filename}")

        except BatchCancelled:
            self._set_state(BatchState.CANCELLED, CANCELLED_MESSAGE)
            logger.info(f"Batch export cancelled after {processed} students, {len(saved)} file(s) kept")
            raise
        except Exception as e:
            self._set_state(BatchState.FAILED, FAILURE_MESSAGE)
            who = f" at {current.name}" if current is not None else ""
            logger.exception(f"Batch export failed{who}: {e!r}")
            raise BatchExportError(
                FAILURE_MESSAGE,
                student_id=current.id if current else None,
                student_name=current.name if current else None,
                saved_files=tuple(saved),
            ) from e
        else:
            self._set_state(BatchState.DONE, DONE_MESSAGE)
        finally:
            if self._state.is_running:
                self._set_state(BatchState.FAILED, FAILURE_MESSAGE)

        elapsed = time.perf_counter() - start_time
        logger.info(f"Batch export completed in {elapsed:.2f}s: {len(saved)} file(s)")
        return saved

    def _write_to_output_dir(self, filename: str, data: bytes) -> Path:
        folder = Path(self.config.output_dir)
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / filename
        path.write_bytes(data)
        return path


def _notify(progress: Optional[ProgressCallback], percent: int, message: str) -> None:
    if progress is not None:
        progress(percent, message)


def export_batch(
    students: Sequence[Student],
    class_config: ClassConfig,
    school: SchoolInfo,
    theme: Union[ThemeConfig, Mapping[str, Any], None],
    orientation: Union[Orientation, str],
    batch_size: int,
    *,
    progress: Optional[ProgressCallback] = None,
    sink: Optional[BatchSink] = None,
    renderer: Optional[Renderer] = None,
    config: Optional[ExportConfig] = None,
    font_size_px: Optional[float] = None,
) -> List[BatchFile]:
    """One-shot batch export with a fresh BatchExporter."""
    exporter = BatchExporter(renderer=renderer, config=config)
    return exporter.export_batch(
        students, class_config, school, theme, orientation, batch_size,
        progress=progress, sink=sink, font_size_px=font_size_px,
    )
