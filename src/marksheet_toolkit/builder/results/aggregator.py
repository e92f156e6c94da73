"""
Module: builder.results.aggregator

Purpose:
    Compute totals, percentage, pass/fail and letter grades for a student
    against their class configuration. Pure functions; results are derived
    on demand and never stored.

Key Functions:
    - compute_result(): Student + ClassConfig -> DerivedResult
    - grade_for(): Percentage -> letter grade
    - format_percentage(): Two-decimal display string

Dependencies:
    - core.models: Records and DerivedResult

Used By:
    - builder.layout.composer: Totals, grades and result box
    - builder.export.single / batch
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from marksheet_toolkit.core.models import (
    ClassConfig,
    DerivedResult,
    Student,
    SubjectResult,
)

logger = logging.getLogger(__name__)


# Lower bounds, checked top-down. Anything below the last bound is "E".
GRADE_BOUNDARIES: Tuple[Tuple[float, str], ...] = (
    (91, "A1"),
    (81, "A2"),
    (71, "B1"),
    (61, "B2"),
    (51, "C1"),
    (41, "C2"),
    (33, "D"),
)
LOWEST_GRADE = "E"


def grade_for(percentage: float) -> str:
    """
    Map a percentage to a letter grade.

    Each bound is inclusive: 91 is "A1", 90.999 is "A2".

    Example:
        >>> grade_for(33)
        'D'
        >>> grade_for(32.999)
        'E'
    """
    for lower, grade in GRADE_BOUNDARIES:
        if percentage >= lower:
            return grade
    return LOWEST_GRADE


def _percentage(obtained: float, maximum: float) -> float:
    if maximum <= 0:
        return 0.0
    return obtained / maximum * 100


def _index_marks(student: Student) -> Dict[Tuple[str, str], float]:
    """(subject_id, exam_id) -> obtained. The first occurrence wins."""
    index: Dict[Tuple[str, str], float] = {}
    for mark in student.marks:
        key = (mark.subject_id, mark.exam_id)
        if key in index:
            logger.debug(f"Duplicate mark for {student.name} {key}, keeping first")
            continue
        index[key] = mark.obtained
    return index


def compute_result(student: Student, class_config: ClassConfig) -> DerivedResult:
    """
    Compute the derived result for a student.

    Rules:
    1. Only scholastic subjects count; co-scholastic grades are display only.
    2. A missing mark counts as 0; marks for unknown subjects or exams
       are ignored.
    3. Percentage is 0 when the maximum is 0 (no scholastic exams).
    4. Passed iff percentage >= pass_percentage.

    Marks are looked up by (subject, exam) key, so the order of the
    student's marks never changes the outcome.

    Args:
        student: Student record
        class_config: The student's class

    Returns:
        DerivedResult (never raises on partial data)

    Example:
        >>> result = compute_result(student, class_config)
        >>> result.grand_total_obtained, result.grand_total_max
        (150.0, 200.0)
    """
    marks = _index_marks(student)

    subject_results = []
    grand_obtained = 0.0
    grand_max = 0.0

    for subject in class_config.scholastic_subjects:
        exam_marks: Dict[str, float] = {}
        for exam in subject.exams:
            exam_marks[exam.id] = marks.get((subject.id, exam.id), 0.0)

        obtained = sum(exam_marks.values())
        maximum = subject.max_marks
        percentage = _percentage(obtained, maximum)

        subject_results.append(
            SubjectResult(
                subject_id=subject.id,
                obtained=obtained,
                max_marks=maximum,
                percentage=percentage,
                grade=grade_for(percentage),
                exam_marks=exam_marks,
            )
        )
        grand_obtained += obtained
        grand_max += maximum

    percentage = _percentage(grand_obtained, grand_max)
    passed = percentage >= class_config.pass_percentage

    return DerivedResult(
        grand_total_obtained=grand_obtained,
        grand_total_max=grand_max,
        percentage=percentage,
        passed=passed,
        overall_grade=grade_for(percentage),
        subject_results=tuple(subject_results),
    )


def format_percentage(percentage: float) -> str:
    """Two decimals, as printed on the marksheet and in the QR payload."""
    return f"{percentage:.2f}"
