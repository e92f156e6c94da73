"""
Module: results

Purpose:
    Computed academic results. These are derived from a Student and its
    ClassConfig on every render and are never persisted, so they cannot
    drift from their inputs.

Key Classes:
    - SubjectResult: Totals and grade for one scholastic subject
    - DerivedResult: Grand totals, percentage, pass state, grades

Dependencies:
    - dataclasses (std)

Used By:
    - builder.results.aggregator: Produces DerivedResult
    - builder.layout.composer: Prints totals, grades and result box
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

PASS_LABEL = "PASS"
FAIL_LABEL = "NEEDS IMPROVEMENT"


@dataclass(frozen=True)
class SubjectResult:
    """
    Result of one scholastic subject.

    Attributes:
        subject_id: Subject identifier
        obtained: Sum of obtained marks across the subject's exams
        max_marks: Sum of exam maximums
        percentage: obtained / max_marks * 100, 0 when max_marks is 0
        grade: Letter grade for the subject percentage
        exam_marks: exam_id -> obtained (missing marks recorded as 0)
    """

    subject_id: str
    obtained: float
    max_marks: float
    percentage: float
    grade: str
    exam_marks: Mapping[str, float]

    def obtained_for(self, exam_id: str) -> Optional[float]:
        """Obtained marks for an exam, None when the subject has no such exam."""
        return self.exam_marks.get(exam_id)


@dataclass(frozen=True)
class DerivedResult:
    """
    Complete computed result for a student (immutable, never stored).

    Example:
        >>> result.percentage
        72.5
        >>> result.label
        'PASS'
    """

    grand_total_obtained: float
    grand_total_max: float
    percentage: float
    passed: bool
    overall_grade: str
    subject_results: tuple[SubjectResult, ...] = ()

    @property
    def label(self) -> str:
        return PASS_LABEL if self.passed else FAIL_LABEL

    @property
    def per_subject_grade(self) -> dict[str, str]:
        """subject_id -> letter grade."""
        return {r.subject_id: r.grade for r in self.subject_results}

    def for_subject(self, subject_id: str) -> Optional[SubjectResult]:
        return next((r for r in self.subject_results if r.subject_id == subject_id), None)
