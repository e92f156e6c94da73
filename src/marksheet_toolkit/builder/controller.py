"""
Module: builder.controller

Purpose:
    Orchestrate an export from a persisted state file.
    Load -> Resolve class/students -> Export (single or batch) -> Summarize

Key Functions:
    - export_from_state(): Main entry point for scripted exports

Key Classes:
    - ExportSummary: What an export produced
    - ExportError: Exception for unusable export requests

Dependencies:
    - core.utils.serialization: load_app_state()
    - builder.export: save_one(), BatchExporter

Used By:
    - scripts/export_marksheets.py
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from marksheet_toolkit.core.models import AppState, ClassConfig, Orientation, Student
from marksheet_toolkit.core.schemas import ValidationError
from marksheet_toolkit.core.utils import load_app_state, StateLoadError

from .config import ExportConfig
from .export import BatchExporter, save_one
from .export.batch import ProgressCallback
from .rendering import PillowRenderer

logger = logging.getLogger(__name__)


class ExportError(Exception):
    """Error resolving or loading an export request."""
    pass


@dataclass(frozen=True)
class ExportSummary:
    """
    Export result (immutable).

    Attributes:
        files: Written PDF paths in output order
        student_count: Students exported
        elapsed_s: Wall-clock duration in seconds
        class_name: Class the students belong to

    Example:
        >>> summary = export_from_state(Path("backup.json"), class_name="Class 10")
        >>> print(f"{summary.student_count} students in {len(summary.files)} files")
    """

    files: Tuple[Path, ...]
    student_count: int
    elapsed_s: float
    class_name: str = ""


def export_from_state(
    state_path: Path,
    *,
    class_name: Optional[str] = None,
    student_id: Optional[str] = None,
    batch_size: Optional[int] = None,
    orientation: Union[Orientation, str, None] = None,
    font_size_px: Optional[float] = None,
    output_dir: Path = Path("output"),
    progress: Optional[ProgressCallback] = None,
    strict: bool = False,
) -> ExportSummary:
    """
    Export marksheets straight from a state backup.

    Pass ``student_id`` for a one-page PDF of that student, or
    ``class_name`` for the whole class in batch files.

    Args:
        state_path: JSON backup of the application state
        class_name: Class to export in batches
        student_id: Single student to export
        batch_size: Students per batch file (config default when None)
        orientation: Override for the stored orientation
        font_size_px: Override for the base font size
        output_dir: Folder for generated PDFs
        progress: Batch progress callback (percent, message)
        strict: Validate the backup against the full JSON schema

    Returns:
        ExportSummary

    Raises:
        ExportError: If the state cannot be loaded or the request names
            nothing exportable
        RenderFailure: Single export failed
        InvalidJobError / BatchExportError: Batch export rejected or failed
    """
    if (class_name is None) == (student_id is None):
        raise ExportError("Specify exactly one of class_name or student_id")

    start_time = time.perf_counter()
    state_path = Path(state_path)

    try:
        state = load_app_state(state_path, strict=strict)
    except (StateLoadError, ValidationError) as e:
        raise ExportError(f"Failed to load state: {e}") from e

    page = Orientation.parse(orientation) if orientation is not None else state.orientation
    config = ExportConfig(output_dir=Path(output_dir))
    renderer = PillowRenderer(config.supersample, base_dir=state_path.parent)

    if student_id is not None:
        student, class_config = _resolve_student(state, student_id)
        logger.info(f"Exporting single marksheet for {student.name} ({class_config.class_name})")
        path = save_one(
            student, class_config, state.school_info, state.theme, page,
            output_dir=config.output_dir, font_size_px=font_size_px,
            renderer=renderer, config=config,
        )
        files: Tuple[Path, ...] = (path,)
        count = 1
    else:
        class_config, students = _resolve_class(state, class_name)
        exporter = BatchExporter(renderer=renderer, config=config)
        saved = exporter.export_batch(
            students, class_config, state.school_info, state.theme, page, batch_size,
            progress=progress, font_size_px=font_size_px,
        )
        files = tuple(f.path for f in saved if f.path is not None)
        count = len(students)

    elapsed = time.perf_counter() - start_time
    logger.info(f"Export completed in {elapsed:.2f}s: {count} students, {len(files)} file(s)")
    return ExportSummary(
        files=files,
        student_count=count,
        elapsed_s=elapsed,
        class_name=class_config.class_name,
    )


def _resolve_student(state: AppState, student_id: str) -> Tuple[Student, ClassConfig]:
    student = state.get_student(student_id)
    if student is None:
        raise ExportError(f"No student with id {student_id!r}")
    class_config = state.class_for(student)
    if class_config is None:
        raise ExportError(f"Student {student.name} has no matching class ({student.class_name!r})")
    return student, class_config


def _resolve_class(state: AppState, class_name: str) -> Tuple[ClassConfig, Tuple[Student, ...]]:
    class_config = state.get_class_by_name(class_name) or state.get_class(class_name)
    if class_config is None:
        known = ", ".join(c.class_name for c in state.classes) or "none"
        raise ExportError(f"No class named {class_name!r} (known: {known})")
    students = state.students_in(class_config)
    if not students:
        raise ExportError(f"Class {class_config.class_name} has no students")
    logger.info(f"Resolved {class_config.class_name}: {len(students)} students")
    return class_config, students
