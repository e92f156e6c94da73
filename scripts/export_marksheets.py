#!/usr/bin/env python3
"""
Export marksheet PDFs from a state backup without the GUI.

Examples:
    python scripts/export_marksheets.py backup.json --student s-101
    python scripts/export_marksheets.py backup.json --class "Class 10" --batch-size 25
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root / "src"))

from marksheet_toolkit.builder import (  # noqa: E402
    BatchExportError,
    ExportError,
    InvalidJobError,
    MAX_BATCH_SIZE,
    RenderFailure,
    export_from_state,
)

logger = logging.getLogger("export_marksheets")


def _print_progress(percent: int, message: str) -> None:
    print(f"\r[{percent:3d}%] {message}", end="", flush=True)
    if percent >= 100:
        print()


def main() -> int:
    parser = argparse.ArgumentParser(description="Export marksheet PDFs from a backup file")
    parser.add_argument("state", type=Path, help="Backup JSON exported by the marksheet app")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--student", dest="student_id", help="Export one student by id")
    target.add_argument("--class", dest="class_name", help="Export a whole class in batches")
    parser.add_argument(
        "--batch-size", type=int, default=None,
        help=f"Students per batch file (1-{MAX_BATCH_SIZE}, default 50)",
    )
    parser.add_argument("--orientation", choices=["portrait", "landscape"], default=None)
    parser.add_argument("--font-size", type=float, default=None, help="Base font size in px")
    parser.add_argument("--output", type=Path, default=Path("output"), help="Output folder")
    parser.add_argument("--strict", action="store_true", help="Validate against the JSON schema")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        summary = export_from_state(
            args.state,
            class_name=args.class_name,
            student_id=args.student_id,
            batch_size=args.batch_size,
            orientation=args.orientation,
            font_size_px=args.font_size,
            output_dir=args.output,
            progress=_print_progress if args.class_name else None,
            strict=args.strict,
        )
    except (ExportError, InvalidJobError) as e:
        logger.error(str(e))
        return 2
    except RenderFailure as e:
        logger.error(f"{e} (student {e.student_id})")
        return 1
    except BatchExportError as e:
        logger.error(f"{e} Failed at {e.student_name}; {len(e.saved_files)} file(s) kept")
        return 1

    for path in summary.files:
        print(path)
    print(f"{summary.student_count} student(s) exported in {summary.elapsed_s:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
