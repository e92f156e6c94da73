"""
Core Utilities Package

Loading of the persisted application state.
"""

from .serialization import (
    StateLoadError,
    serialize_app_state,
    deserialize_app_state,
    load_app_state,
)

__all__ = [
    "StateLoadError",
    "serialize_app_state",
    "deserialize_app_state",
    "load_app_state",
]
