"""
Module: builder.config

Purpose:
    Configuration dataclass for the export pipeline. Immutable
    configuration with validation on construction.

Key Classes:
    - ExportConfig: Batch sizing, raster quality, font size, output folder

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - builder.export.single: export_one()
    - builder.export.batch: BatchExporter
    - builder.controller: export_from_state()
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


DEFAULT_BATCH_SIZE = 50
MAX_BATCH_SIZE = 100
SINGLE_FONT_SIZE_PX = 18
BATCH_FONT_SIZE_PX = 12


@dataclass(frozen=True)
class ExportConfig:
    """
    Configuration for exporting marksheets (immutable).

    Attributes:
        batch_size: Students per batch file
        max_batch_size: Upper bound accepted for batch_size
        supersample: Raster scale factor over 96 dpi (2 = 192 dpi)
        font_size_px: Base font size in CSS pixels for single exports
            (batch exports use BATCH_FONT_SIZE_PX unless told otherwise)
        output_dir: Folder for generated PDFs
        ready_timeout_s: How long to wait for the render surface

    Example:
        >>> config = ExportConfig(batch_size=25)
        >>> config.font_size_px
        18
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    max_batch_size: int = MAX_BATCH_SIZE
    supersample: int = 2
    font_size_px: float = SINGLE_FONT_SIZE_PX
    output_dir: Path = Path("output")
    ready_timeout_s: float = 10.0

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.max_batch_size < 1:
            raise ValueError(f"max_batch_size must be positive: {self.max_batch_size}")
        if not (1 <= self.batch_size <= self.max_batch_size):
            raise ValueError(
                f"batch_size must be between 1 and {self.max_batch_size}: {self.batch_size}"
            )
        if self.supersample < 1:
            raise ValueError(f"supersample must be at least 1: {self.supersample}")
        if self.font_size_px <= 0:
            raise ValueError(f"font_size_px must be positive: {self.font_size_px}")
        if self.ready_timeout_s <= 0:
            raise ValueError(f"ready_timeout_s must be positive: {self.ready_timeout_s}")
