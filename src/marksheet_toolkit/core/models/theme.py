"""
Module: theme

Purpose:
    Visual styling of the marksheet. A ThemeConfig is always produced by
    normalize_theme(), which merges a persisted (possibly partial or old)
    theme payload over the documented defaults exactly once at load time.
    The result is immutable and fully populated, so no other module needs
    fallback logic.

Key Functions:
    - normalize_theme(raw): Merge raw theme dict over DEFAULT_THEME
    - Orientation.parse(value): Tolerant orientation parsing

Key Classes:
    - Margins: Page padding in millimetres
    - ThemeConfig: Complete immutable theme
    - Orientation: portrait / landscape

Dependencies:
    - dataclasses (std)

Used By:
    - core.utils.serialization: Applies normalization when loading state
    - builder.layout.composer: Reads styling attributes
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"

    @classmethod
    def parse(cls, value: Any) -> Orientation:
        if isinstance(value, Orientation):
            return value
        text = str(value or "").strip().lower()
        if text in ("landscape", "l"):
            return cls.LANDSCAPE
        if text not in ("portrait", "p", ""):
            logger.warning(f"Unknown orientation {value!r}, using portrait")
        return cls.PORTRAIT


@dataclass(frozen=True)
class Margins:
    """Interior page padding in millimetres."""

    top: float = 10.0
    right: float = 10.0
    bottom: float = 10.0
    left: float = 10.0

    def to_dict(self) -> dict[str, float]:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


@dataclass(frozen=True)
class ThemeConfig:
    """
    Complete marksheet theme (immutable).

    Colors are CSS-style strings ("#1e293b", "green"). Sizes ending in
    ``_size`` are em multipliers of the base font size.

    Example:
        >>> theme = normalize_theme({"schoolNameColor": "#123456"})
        >>> theme.school_name_color
        '#123456'
        >>> theme.margins.top
        10.0
    """

    font_family: str = "Inter"

    # Page & watermark
    page_border_color: str = "#1e293b"
    watermark_opacity: float = 0.1
    margins: Margins = field(default_factory=Margins)

    # Header
    school_name_color: str = "#0f172a"
    school_name_size: float = 2.5
    school_name_align: str = "center"
    header_secondary_color: str = "#475569"

    # Session badge
    session_badge_bg: str = "#0f172a"
    session_badge_color: str = "#ffffff"
    session_badge_size: float = 0.85

    # Student info grid
    student_info_bg: str = "#f8fafc"
    student_label_color: str = "#64748b"
    student_value_color: str = "#1e293b"

    # Tables
    table_header_bg: str = "#e2e8f0"
    table_header_color: str = "#1e293b"
    table_border_color: str = "#cbd5e1"
    table_row_odd_bg: str = "#ffffff"
    table_row_even_bg: str = "#f8fafc"
    grade_color: str = "#1e293b"

    # Result
    result_pass_color: str = "#059669"
    result_fail_color: str = "#dc2626"
    result_content_scale: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[_CAMEL_KEYS[f.name]] = value.to_dict() if isinstance(value, Margins) else value
        return data


DEFAULT_THEME = ThemeConfig()

ALIGNMENTS = ("center", "left", "right")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


_CAMEL_KEYS = {f.name: _camel(f.name) for f in fields(ThemeConfig)}
_FIELD_BY_KEY = {camel: name for name, camel in _CAMEL_KEYS.items()}
_NUMERIC_FIELDS = {
    f.name for f in fields(ThemeConfig)
    if isinstance(getattr(DEFAULT_THEME, f.name), float)
}


def _coerce_number(key: str, value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Theme key {key!r} is not numeric ({value!r}), using default {default}")
        return default
    if number != number:  # NaN
        return default
    return number


def _merge_margins(raw: Any, default: Margins) -> Margins:
    """Merge margins key-by-key over the defaults."""
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.warning(f"Theme margins malformed ({raw!r}), using defaults")
        return default
    values = {}
    for name in ("top", "right", "bottom", "left"):
        if raw.get(name) is not None:
            values[name] = max(0.0, _coerce_number(f"margins.{name}", raw[name], getattr(default, name)))
    return replace(default, **values)


def normalize_theme(
    raw: Optional[Mapping[str, Any]],
    defaults: ThemeConfig = DEFAULT_THEME,
) -> ThemeConfig:
    """
    Produce a complete theme from a persisted payload.

    Rules:
    1. Missing or null keys inherit the default value.
    2. ``margins`` is merged key-by-key, so a partial margins object keeps
       the remaining default sides.
    3. Numeric keys that are not numbers fall back to the default.
    4. Unknown keys are ignored.

    Never raises: configuration malformation is recovered locally.

    Args:
        raw: Theme dict using the persisted camelCase keys (or None)
        defaults: Base theme to merge over

    Returns:
        Fully populated, immutable ThemeConfig
    """
    if raw is None:
        return defaults
    if isinstance(raw, ThemeConfig):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning(f"Theme payload is not an object ({type(raw).__name__}), using defaults")
        return defaults

    values: dict[str, Any] = {}
    for key, value in raw.items():
        name = _FIELD_BY_KEY.get(key)
        if name is None:
            logger.debug(f"Ignoring unknown theme key {key!r}")
            continue
        if name == "margins":
            values["margins"] = _merge_margins(value, defaults.margins)
            continue
        if value is None or value == "":
            continue
        default_value = getattr(defaults, name)
        if name in _NUMERIC_FIELDS:
            values[name] = _coerce_number(key, value, default_value)
        else:
            values[name] = str(value)

    # Non-positive sizes and unknown alignments revert to the defaults
    if values.get("result_content_scale", 1.0) <= 0:
        values.pop("result_content_scale")
    if values.get("school_name_size", 1.0) <= 0:
        values.pop("school_name_size")
    if values.get("session_badge_size", 1.0) <= 0:
        values.pop("session_badge_size")
    if "watermark_opacity" in values:
        values["watermark_opacity"] = min(1.0, max(0.0, values["watermark_opacity"]))
    align = values.get("school_name_align")
    if align is not None and align.lower() not in ALIGNMENTS:
        logger.warning(f"Unknown schoolNameAlign {align!r}, using {defaults.school_name_align!r}")
        values.pop("school_name_align")
    elif align is not None:
        values["school_name_align"] = align.lower()

    return replace(defaults, **values)
