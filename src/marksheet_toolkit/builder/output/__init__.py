"""
Output Package

PDF assembly and output file naming.
"""

from .pdf_writer import (
    MarksheetDocument,
    marksheet_filename,
    batch_filename,
    page_size_pt,
)

__all__ = [
    "MarksheetDocument",
    "marksheet_filename",
    "batch_filename",
    "page_size_pt",
]
