"""
Path utilities for handling dev vs production (frozen) file locations.

Dev mode: Uses local workspace/ directory
Frozen mode: Uses system-standard paths (AppData, Documents)
"""
from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths

APP_NAME = "Marksheet Toolkit"


def is_frozen() -> bool:
    """Check if running as a frozen (PyInstaller) application."""
    return getattr(sys, 'frozen', False) or hasattr(sys, '_MEIPASS')


def get_app_data_dir() -> Path:
    """Directory for internal state files (settings)."""
    if is_frozen():
        return Path(QStandardPaths.writableLocation(
            QStandardPaths.StandardLocation.AppLocalDataLocation
        ))
    return Path.cwd() / "workspace"


def get_default_output_dir() -> Path:
    """Default folder for generated marksheets."""
    if is_frozen():
        docs = Path(QStandardPaths.writableLocation(
            QStandardPaths.StandardLocation.DocumentsLocation
        ))
        return docs / APP_NAME / "Marksheets"
    return Path.cwd() / "workspace" / "marksheets"


def get_settings_path() -> Path:
    return get_app_data_dir() / "settings.json"
