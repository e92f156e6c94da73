"""Top-level package for the Marksheet Toolkit.

Provides subpackages:
- marksheet_toolkit.core – immutable records, theme normalization, state loading
- marksheet_toolkit.builder – result aggregation, layout, rendering and PDF export
- marksheet_toolkit.gui – PySide6 bulk generator window
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.1.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    from importlib.metadata import version as pkg_version, PackageNotFoundError
    try:
        return pkg_version("marksheet-toolkit")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
