"""Persisted GUI preferences."""

from .settings import SettingsStore

__all__ = ["SettingsStore"]
