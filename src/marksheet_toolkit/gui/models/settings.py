"""
Settings persistence model for the bulk generator.

Handles persistent GUI preferences: last state file, output folder,
batch size and orientation override. Malformed data falls back to
defaults, never a crash.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from marksheet_toolkit.builder.config import DEFAULT_BATCH_SIZE, MAX_BATCH_SIZE
from marksheet_toolkit.core.models import Orientation

logger = logging.getLogger(__name__)


class SettingsStore:
    """Lightweight JSON-backed store for persisting GUI preferences."""

    CURRENT_VERSION = 1

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.data: Dict[str, object] = {}
        self.load_error: Optional[str] = None

        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                self.load_error = f"Settings file is corrupted: {e}"
                loaded = {}
            except OSError as e:
                self.load_error = f"Failed to read settings: {e}"
                loaded = {}
            if isinstance(loaded, dict):
                self.data = loaded
            else:
                self.load_error = "Settings file does not contain an object"
            if self.load_error:
                logger.warning(f"{self.load_error}; using defaults")

        if "version" not in self.data:
            self.data["version"] = self.CURRENT_VERSION

    # ─────────────────────────────────────────────────────────────────────
    # Preferences
    # ─────────────────────────────────────────────────────────────────────

    def get_state_path(self) -> Optional[str]:
        value = self.data.get("state_path")
        return value if isinstance(value, str) and value else None

    def set_state_path(self, value: str) -> None:
        self.data["state_path"] = value
        self._save()

    def get_output_dir(self) -> Optional[str]:
        value = self.data.get("output_dir")
        return value if isinstance(value, str) and value else None

    def set_output_dir(self, value: str) -> None:
        self.data["output_dir"] = value
        self._save()

    def get_batch_size(self) -> int:
        """Stored batch size clamped to 1..MAX_BATCH_SIZE."""
        size = self._safe_int(self.data.get("batch_size"), DEFAULT_BATCH_SIZE)
        return max(1, min(size, MAX_BATCH_SIZE))

    def set_batch_size(self, value: int) -> None:
        self.data["batch_size"] = int(value)
        self._save()

    def get_orientation_override(self) -> Optional[Orientation]:
        """Orientation chosen in the window, or None to use the stored state's."""
        value = self.data.get("orientation")
        if value not in (Orientation.PORTRAIT.value, Orientation.LANDSCAPE.value):
            return None
        return Orientation(value)

    def set_orientation_override(self, value: Optional[Orientation]) -> None:
        self.data["orientation"] = value.value if value is not None else None
        self._save()

    # ─────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────

    def _safe_int(self, value: Any, default: int) -> int:
        """Safely convert a value to int, returning default on failure."""
        if value is None or isinstance(value, bool):
            return default
        try:
            return int(value)
        except (ValueError, TypeError):
            return default

    def _save(self) -> None:
        """Write settings via a temp file and atomic replace."""
        temp_path = self.path.with_suffix('.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as e:
            logger.warning(f"Failed to save settings: {e}")
            if temp_path.exists():
                temp_path.unlink()
