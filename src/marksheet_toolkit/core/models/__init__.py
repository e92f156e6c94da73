"""
Core Models Package

Immutable, validated data models for the marksheet pipeline.

All models in this package are frozen dataclasses. Records are read from
the persisted app state and never written back by the export pipeline;
computed results (DerivedResult) are recalculated on every render.
"""

from .records import (
    ExamConfig,
    SubjectConfig,
    SubjectKind,
    ClassConfig,
    ExamColumn,
    StudentMark,
    CoScholasticGrade,
    Gender,
    Student,
    SchoolInfo,
)
from .theme import Margins, ThemeConfig, Orientation, DEFAULT_THEME, normalize_theme
from .results import DerivedResult, SubjectResult, PASS_LABEL, FAIL_LABEL
from .state import AppState

__all__ = [
    "ExamConfig",
    "SubjectConfig",
    "SubjectKind",
    "ClassConfig",
    "ExamColumn",
    "StudentMark",
    "CoScholasticGrade",
    "Gender",
    "Student",
    "SchoolInfo",
    "Margins",
    "ThemeConfig",
    "Orientation",
    "DEFAULT_THEME",
    "normalize_theme",
    "DerivedResult",
    "SubjectResult",
    "PASS_LABEL",
    "FAIL_LABEL",
    "AppState",
]
