"""
Schema Validation Utilities

Validates persisted app-state JSON before deserialization.

Two levels:
- Basic checks (always): top-level shape, required keys on classes,
  subjects, exams and students, unique ids, positive exam maximums.
- Strict mode: full JSON Schema validation with ``jsonschema`` against
  ``app_state.schema.json`` shipped next to this module.

Fail fast on structural problems; data-completeness gaps (missing marks,
blank info fields, missing grades) are NOT errors and are left to the
aggregator and composer defaults.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


APP_STATE_SCHEMA = "app_state"

_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_app_state(data: Any, *, strict: bool = False) -> None:
    """
    Validate an app-state payload.

    Args:
        data: Parsed JSON document
        strict: If True, also run full JSON Schema validation

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(
            f"App state must be a JSON object, got {type(data).__name__}",
            path="",
        )

    for key, expected in (("classes", list), ("students", list), ("schoolInfo", dict), ("theme", dict)):
        if key in data and data[key] is not None and not isinstance(data[key], expected):
            raise ValidationError(
                f"{key} must be a {expected.__name__}",
                path=key,
            )

    class_ids: set[str] = set()
    for i, cls in enumerate(data.get("classes") or []):
        path = f"classes[{i}]"
        _validate_class(cls, path)
        if cls["id"] in class_ids:
            raise ValidationError(f"Duplicate class id: {cls['id']!r}", path=f"{path}.id")
        class_ids.add(cls["id"])

    for i, student in enumerate(data.get("students") or []):
        _validate_student(student, f"students[{i}]")

    if strict:
        schema = _load_schema(APP_STATE_SCHEMA)
        try:
            jsonschema.validate(data, schema)
        except jsonschema.ValidationError as e:
            raise ValidationError(
                f"Schema validation failed: {e.message}",
                path=".".join(str(p) for p in e.absolute_path),
                errors=[e.message],
            ) from e


def _require(data: Any, required: list[str], path: str) -> None:
    if not isinstance(data, dict):
        raise ValidationError(f"Expected an object at {path or 'root'}", path=path)
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path=path,
            errors=[f"Missing field: {f}" for f in missing],
        )


def _validate_class(data: Any, path: str) -> None:
    """Validate a class configuration."""
    _require(data, ["id", "className", "subjects"], path)

    pass_pct = data.get("passPercentage", 0)
    if not isinstance(pass_pct, (int, float)) or not (0 <= pass_pct <= 100):
        raise ValidationError(
            f"Invalid passPercentage: {pass_pct!r} (must be 0-100)",
            path=f"{path}.passPercentage",
        )

    subject_ids: set[str] = set()
    for i, subject in enumerate(data.get("subjects") or []):
        sub_path = f"{path}.subjects[{i}]"
        _require(subject, ["id", "name"], sub_path)
        if subject["id"] in subject_ids:
            raise ValidationError(f"Duplicate subject id: {subject['id']!r}", path=f"{sub_path}.id")
        subject_ids.add(subject["id"])

        exam_ids: set[str] = set()
        for j, exam in enumerate(subject.get("exams") or []):
            exam_path = f"{sub_path}.exams[{j}]"
            _require(exam, ["id", "maxMarks"], exam_path)
            max_marks = exam["maxMarks"]
            if not isinstance(max_marks, (int, float)) or isinstance(max_marks, bool) or max_marks <= 0:
                raise ValidationError(
                    f"Invalid maxMarks: {max_marks!r} (must be positive)",
                    path=f"{exam_path}.maxMarks",
                )
            if exam["id"] in exam_ids:
                raise ValidationError(f"Duplicate exam id: {exam['id']!r}", path=f"{exam_path}.id")
            exam_ids.add(exam["id"])


def _validate_student(data: Any, path: str) -> None:
    """Validate a student record. Marks and grades may be partial."""
    _require(data, ["id", "name"], path)
    if "className" not in data and "classId" not in data:
        raise ValidationError(
            "Student must reference a class (className or classId)",
            path=path,
        )
    marks = data.get("marks")
    if marks is not None and not isinstance(marks, list):
        raise ValidationError("marks must be a list", path=f"{path}.marks")
    info = data.get("info")
    if info is not None and not isinstance(info, dict):
        raise ValidationError("info must be an object", path=f"{path}.info")
