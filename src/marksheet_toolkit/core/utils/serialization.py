"""
Serialization Utilities

Reads the persisted application state (the JSON backup written by the
data-entry application) into immutable models.

- `deserialize_app_state()` validates then builds an AppState
- `load_app_state()` reads a file and wraps I/O and JSON failures
- Theme payloads go through `normalize_theme()` exactly once here
- Derived results are never read from disk, they are always recomputed
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..models.records import ClassConfig, SchoolInfo, Student
from ..models.state import AppState
from ..models.theme import Orientation, normalize_theme
from ..schemas.validator import validate_app_state, ValidationError

logger = logging.getLogger(__name__)


class StateLoadError(Exception):
    """Raised when a state file cannot be read or parsed."""
    pass


def serialize_app_state(state: AppState) -> dict[str, Any]:
    """
    Serialize an AppState to a dictionary using the persisted camelCase keys.

    The export pipeline never writes state back; this exists so tests and
    tooling can produce fixture files.
    """
    return state.to_dict()


def deserialize_app_state(
    data: dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
) -> AppState:
    """
    Deserialize an AppState from a dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to validate first
        strict: Run full JSON Schema validation as well

    Returns:
        AppState instance

    Raises:
        ValidationError: If validate=True and data is invalid
        ValueError: If a model rejects the data (duplicate ids, bad maximums)
    """
    if validate:
        validate_app_state(data, strict=strict)

    classes = tuple(ClassConfig.from_dict(c) for c in data.get("classes") or [])
    students = tuple(Student.from_dict(s) for s in data.get("students") or [])

    state = AppState(
        school_info=SchoolInfo.from_dict(data.get("schoolInfo") or {}),
        classes=classes,
        students=students,
        orientation=Orientation.parse(data.get("orientation")),
        theme=normalize_theme(data.get("theme")),
    )

    orphans = [s.name for s in students if state.class_for(s) is None]
    if orphans:
        logger.warning(f"{len(orphans)} student(s) reference no known class: {orphans[:5]}")

    return state


def load_app_state(path: Path, *, strict: bool = False) -> AppState:
    """
    Load and validate a persisted state file.

    Args:
        path: Path to the JSON backup
        strict: Run full JSON Schema validation

    Returns:
        AppState instance

    Raises:
        StateLoadError: If the file cannot be read or is not JSON
        ValidationError: If the content fails validation

    Example:
        >>> state = load_app_state(Path("backup.json"))
        >>> len(state.classes)
        1
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise StateLoadError(f"Cannot read state file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise StateLoadError(f"State file {path} is not valid JSON: {e}") from e

    try:
        state = deserialize_app_state(data, strict=strict)
    except ValueError as e:
        raise StateLoadError(f"State file {path} is inconsistent: {e}") from e

    logger.info(
        f"Loaded state from {path}: {len(state.classes)} classes, "
        f"{len(state.students)} students"
    )
    return state


__all__ = [
    "StateLoadError",
    "ValidationError",
    "serialize_app_state",
    "deserialize_app_state",
    "load_app_state",
]
