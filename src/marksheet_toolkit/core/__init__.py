"""
Marksheet Toolkit Core Package

Shared data models and state loading used by every export path.

1. **Immutable Data Models**
   - Frozen dataclasses; the export pipeline never mutates records.

2. **Calculated Results (Never Stored)**
   - Totals, percentages and grades are recomputed from marks on every render.

3. **One Theme Merge**
   - Persisted theme payloads are normalized once at load time; consumers
     read a fully populated ThemeConfig.
"""

from .models import (
    AppState,
    ClassConfig,
    DerivedResult,
    SchoolInfo,
    Student,
    ThemeConfig,
    Orientation,
)
from .utils import load_app_state, StateLoadError

__all__ = [
    "AppState",
    "ClassConfig",
    "DerivedResult",
    "SchoolInfo",
    "Student",
    "ThemeConfig",
    "Orientation",
    "load_app_state",
    "StateLoadError",
]
