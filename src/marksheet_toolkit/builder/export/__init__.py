"""
Export Package

Single-document and batch marksheet export.
"""

from .single import export_one, save_one, render_student, RenderFailure
from .batch import (
    BatchExporter,
    BatchFile,
    BatchState,
    BatchExportError,
    BatchCancelled,
    InvalidJobError,
    export_batch,
    partition,
    INIT_MESSAGE,
    DONE_MESSAGE,
    FAILURE_MESSAGE,
)

__all__ = [
    "export_one",
    "save_one",
    "render_student",
    "RenderFailure",
    "BatchExporter",
    "BatchFile",
    "BatchState",
    "BatchExportError",
    "BatchCancelled",
    "InvalidJobError",
    "export_batch",
    "partition",
    "INIT_MESSAGE",
    "DONE_MESSAGE",
    "FAILURE_MESSAGE",
]
