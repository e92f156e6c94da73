"""
Module: builder

Purpose:
    Marksheet export pipeline. Derives each student's results, composes a
    page description, rasterizes it and assembles A4 PDFs, either one
    student at a time or a whole class in batch files.

Key Functions:
    - compute_result(): Totals, percentage, pass state and grades
    - compose_marksheet(): Student -> PageDescription
    - export_one(): One student -> PDF bytes
    - export_batch(): Students -> batch PDF files
    - export_from_state(): Scripted export from a state backup

Key Classes:
    - ExportConfig: Export settings
    - BatchExporter: Batch orchestrator with progress and cancellation
    - PillowRenderer: Raster renderer

Dependencies:
    - PIL: Rasterization
    - reportlab: PDF assembly, text metrics, QR encoding
    - marksheet_toolkit.core.models: Records and theme

Used By:
    - marksheet_toolkit.gui.widgets.bulk_generator
    - scripts/export_marksheets.py
"""

from .config import ExportConfig, DEFAULT_BATCH_SIZE, MAX_BATCH_SIZE
from .results import compute_result, grade_for
from .layout import compose_marksheet, fit_to_page, LayoutConfig
from .rendering import PillowRenderer, Renderer, RenderError, ResourceLoadError
from .output import MarksheetDocument
from .export import (
    export_one,
    save_one,
    export_batch,
    BatchExporter,
    BatchFile,
    BatchState,
    BatchExportError,
    BatchCancelled,
    InvalidJobError,
    RenderFailure,
)
from .controller import export_from_state, ExportSummary, ExportError

__all__ = [
    # Config
    "ExportConfig",
    "DEFAULT_BATCH_SIZE",
    "MAX_BATCH_SIZE",
    "LayoutConfig",
    # Results
    "compute_result",
    "grade_for",
    # Layout
    "compose_marksheet",
    "fit_to_page",
    # Rendering
    "PillowRenderer",
    "Renderer",
    "RenderError",
    "ResourceLoadError",
    # Output
    "MarksheetDocument",
    # Export
    "export_one",
    "save_one",
    "export_batch",
    "BatchExporter",
    "BatchFile",
    "BatchState",
    "BatchExportError",
    "BatchCancelled",
    "InvalidJobError",
    "RenderFailure",
    # Controller
    "export_from_state",
    "ExportSummary",
    "ExportError",
]
