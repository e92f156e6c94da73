"""
Schemas Package

JSON schema definitions and validation utilities for persisted app state.
"""

from .validator import validate_app_state, ValidationError, APP_STATE_SCHEMA

__all__ = [
    "validate_app_state",
    "ValidationError",
    "APP_STATE_SCHEMA",
]
