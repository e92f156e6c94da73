"""
Unit Tests for result aggregation.

Totals, percentage, pass state and the letter-grade table.
"""

import pytest

from marksheet_toolkit.builder.results import compute_result, format_percentage, grade_for
from marksheet_toolkit.core.models import ClassConfig, Student, StudentMark


class TestGradeFor:
    """Grade boundaries are inclusive lower bounds."""

    @pytest.mark.parametrize(
        "percentage, grade",
        [
            (100, "A1"),
            (91, "A1"),
            (90.99, "A2"),
            (81, "A2"),
            (71, "B1"),
            (61, "B2"),
            (51, "C1"),
            (41, "C2"),
            (33, "D"),
            (32.999, "E"),
            (0, "E"),
        ],
    )
    def test_grade_for_when_on_boundary_then_expected_grade(self, percentage, grade):
        assert grade_for(percentage) == grade


class TestComputeResult:
    def test_when_all_marks_present_then_totals_summed(self, asha, class_config):
        result = compute_result(asha, class_config)

        assert result.grand_total_obtained == 150
        assert result.grand_total_max == 200
        assert result.percentage == 75
        assert result.overall_grade == "B1"
        assert result.passed
        assert result.label == "PASS"

    def test_when_marks_missing_then_counted_as_zero(self, ravi, class_config):
        result = compute_result(ravi, class_config)

        assert result.grand_total_obtained == 15
        assert result.percentage == 7.5
        assert not result.passed
        assert result.label == "NEEDS IMPROVEMENT"
        assert result.for_subject("math").obtained_for("t2") == 0

    def test_per_subject_results_in_class_order(self, asha, class_config):
        result = compute_result(asha, class_config)

        assert [r.subject_id for r in result.subject_results] == ["math", "sci"]
        assert result.per_subject_grade == {"math": "A2", "sci": "B2"}

    def test_co_scholastic_subjects_never_counted(self, asha, class_config):
        result = compute_result(asha, class_config)
        assert result.for_subject("art") is None

    def test_when_percentage_equals_threshold_then_passed(self, class_config):
        student = Student(
            id="s", roll_no="1", name="N", class_name="Class 10",
            marks=(StudentMark("math", "t1", 33), StudentMark("sci", "t1", 33)),
        )
        result = compute_result(student, class_config)

        assert result.percentage == 33
        assert result.passed

    def test_when_marks_order_shuffled_then_same_result(self, asha, class_config):
        shuffled = Student(
            id=asha.id, roll_no=asha.roll_no, name=asha.name, class_name=asha.class_name,
            marks=tuple(reversed(asha.marks)),
        )
        assert compute_result(shuffled, class_config) == compute_result(asha, class_config)

    def test_when_marks_reference_unknown_subject_then_ignored(self, asha, class_config):
        noisy = Student(
            id=asha.id, roll_no=asha.roll_no, name=asha.name, class_name=asha.class_name,
            marks=asha.marks + (StudentMark("history", "t1", 50), StudentMark("math", "t9", 50)),
        )
        assert compute_result(noisy, class_config).grand_total_obtained == 150

    def test_when_obtained_exceeds_max_then_not_clamped(self, class_config):
        student = Student(
            id="s", roll_no="1", name="N", class_name="Class 10",
            marks=(StudentMark("math", "t1", 60),),
        )
        result = compute_result(student, class_config)
        assert result.for_subject("math").obtained == 60

    def test_when_no_scholastic_subjects_then_zero_percentage(self):
        cls = ClassConfig(id="c", class_name="C", pass_percentage=0)
        result = compute_result(Student(id="s", roll_no="1", name="N", class_name="C"), cls)

        assert result.grand_total_max == 0
        assert result.percentage == 0
        assert result.passed
        assert result.overall_grade == "E"

    def test_inputs_not_modified(self, asha, class_config):
        before = (asha.to_dict(), class_config.to_dict())
        compute_result(asha, class_config)
        assert (asha.to_dict(), class_config.to_dict()) == before


class TestFormatPercentage:
    def test_two_decimals(self):
        assert format_percentage(75) == "75.00"
        assert format_percentage(7.456) == "7.46"
