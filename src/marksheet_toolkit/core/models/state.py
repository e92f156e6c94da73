"""
Module: state

Purpose:
    AppState bundles everything the export pipeline reads from a persisted
    backup: school info, classes, students, page orientation and theme.
    Provides the student-to-class lookup (explicit class id first, class
    name as the legacy fallback).

Key Classes:
    - AppState: Immutable snapshot of the persisted application state

Dependencies:
    - .records, .theme

Used By:
    - core.utils.serialization: load_app_state()
    - builder.controller: export_from_state()
    - gui.widgets.bulk_generator
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .records import ClassConfig, SchoolInfo, Student
from .theme import DEFAULT_THEME, Orientation, ThemeConfig


@dataclass(frozen=True)
class AppState:
    """
    Read-only snapshot of the persisted application state.

    Attributes:
        school_info: School header data
        classes: Class configurations
        students: All students, any class
        orientation: Page orientation used for exports
        theme: Normalized theme
    """

    school_info: SchoolInfo = field(default_factory=SchoolInfo)
    classes: tuple[ClassConfig, ...] = ()
    students: tuple[Student, ...] = ()
    orientation: Orientation = Orientation.PORTRAIT
    theme: ThemeConfig = DEFAULT_THEME

    def get_class(self, class_id: str) -> Optional[ClassConfig]:
        return next((c for c in self.classes if c.id == class_id), None)

    def get_class_by_name(self, class_name: str) -> Optional[ClassConfig]:
        return next((c for c in self.classes if c.class_name == class_name), None)

    def class_for(self, student: Student) -> Optional[ClassConfig]:
        """
        Resolve the class that owns a student.

        Uses ``student.class_id`` when it names an existing class, otherwise
        falls back to matching ``class_name``.
        """
        if student.class_id:
            found = self.get_class(student.class_id)
            if found is not None:
                return found
        return self.get_class_by_name(student.class_name)

    def students_in(self, class_config: ClassConfig) -> tuple[Student, ...]:
        """Students of a class in stored order."""
        members = []
        for student in self.students:
            owner = self.class_for(student)
            if owner is not None and owner.id == class_config.id:
                members.append(student)
        return tuple(members)

    def get_student(self, student_id: str) -> Optional[Student]:
        return next((s for s in self.students if s.id == student_id), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schoolInfo": self.school_info.to_dict(),
            "classes": [c.to_dict() for c in self.classes],
            "students": [s.to_dict() for s in self.students],
            "orientation": self.orientation.value,
            "theme": self.theme.to_dict(),
        }
