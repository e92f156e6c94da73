"""Result aggregation: totals, percentage, pass state and grades."""

from .aggregator import (
    compute_result,
    grade_for,
    format_percentage,
    GRADE_BOUNDARIES,
)

__all__ = [
    "compute_result",
    "grade_for",
    "format_percentage",
    "GRADE_BOUNDARIES",
]
