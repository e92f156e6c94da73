"""
Module: builder.rendering.resources

Purpose:
    Decode image resources (school logo, student photo) into PIL images.
    Sources are stored in the app state as data URIs, bare base64
    payloads, file paths or http(s) URLs.

Key Functions:
    - decode_image_source(): Source string -> RGBA image

Key Classes:
    - ResourceLoadError: Raised when a source cannot be decoded

Dependencies:
    - PIL: Image decoding
    - requests: Fetching remote logos and photos

Used By:
    - builder.rendering.renderer: RenderSurface.load()
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from pathlib import Path
from typing import Optional
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image

logger = logging.getLogger(__name__)

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/=\s]+$")
_REMOTE_PREFIXES = ("http://", "https://", "//")
REMOTE_TIMEOUT_S = 15


class RenderError(Exception):
    """The renderer could not produce a raster."""
    pass


class ResourceLoadError(RenderError):
    """An embedded image resource could not be loaded."""

    def __init__(self, message: str, source: str = ""):
        super().__init__(message)
        self.source = source


def _describe(source: str) -> str:
    """Short form of a source for messages (data URIs can be megabytes)."""
    return source if len(source) <= 60 else f"{source[:57]}..."


def _existing_file(text: str, base_dir: Optional[Path]) -> Optional[Path]:
    path = Path(text).expanduser()
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    try:
        return path if path.is_file() else None
    except OSError:
        # Over-long base64 payloads are not valid file names
        return None


def _fetch(url: str, source: str) -> bytes:
    if url.startswith("//"):
        url = f"https:{url}"
    try:
        response = requests.get(url, timeout=REMOTE_TIMEOUT_S)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ResourceLoadError(f"Cannot fetch image {_describe(url)}: {e}", source) from e
    logger.debug(f"Fetched {len(response.content)} bytes from {_describe(url)}")
    return response.content


def _read_bytes(source: str, base_dir: Optional[Path]) -> bytes:
    text = source.strip()

    if text.startswith("data:"):
        header, sep, payload = text.partition(",")
        if not sep:
            raise ResourceLoadError(f"Malformed data URI: {_describe(text)}", source)
        if ";base64" in header.lower():
            try:
                return base64.b64decode(payload)
            except (binascii.Error, ValueError) as e:
                raise ResourceLoadError(f"Invalid base64 in data URI: {e}", source) from e
        return unquote_to_bytes(payload)

    if text.lower().startswith(_REMOTE_PREFIXES):
        return _fetch(text, source)

    path = _existing_file(text, base_dir)
    if path is not None:
        try:
            return path.read_bytes()
        except OSError as e:
            raise ResourceLoadError(f"Cannot read image file {path}: {e}", source) from e

    if _BASE64_RE.match(text):
        try:
            return base64.b64decode("".join(text.split()))
        except (binascii.Error, ValueError) as e:
            raise ResourceLoadError(f"Invalid base64 image data: {e}", source) from e

    raise ResourceLoadError(f"Image source is neither a file nor image data: {_describe(text)}", source)


def decode_image_source(source: str, base_dir: Optional[Path] = None) -> Image.Image:
    """
    Decode an image source into an RGBA image.

    Accepted forms:
    - ``data:image/png;base64,...`` (any Pillow-readable format)
    - a bare base64 payload
    - a file path, relative paths resolved against ``base_dir``
    - an ``http://`` or ``https://`` URL (scheme-relative ``//`` uses https)

    Args:
        source: Source string from the app state
        base_dir: Folder for relative paths (usually the state file's folder)

    Returns:
        Fully loaded RGBA image

    Raises:
        ResourceLoadError: If the source is empty, cannot be read or
            fetched, or is not an image

    Example:
        >>> img = decode_image_source("data:image/png;base64,iVBORw0KGgo...")
        >>> img.mode
        'RGBA'
    """
    if not source or not source.strip():
        raise ResourceLoadError("Empty image source", source or "")

    raw = _read_bytes(source, base_dir)
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            decoded = img.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ResourceLoadError(f"Cannot decode image {_describe(source)}: {e}", source) from e

    logger.debug(f"Decoded image resource {_describe(source)} ({decoded.width}x{decoded.height})")
    return decoded
