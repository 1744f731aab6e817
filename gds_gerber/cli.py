#!/usr/bin/env python
"""
Convert one cell of a GDSII layout into Gerber region files, one per layer.

Usage examples:

    gds-gerber chip.gds TOP
    gds-gerber chip.gds TOP 1 2 5 --output-dir out/ --report out/report.json
    gds-gerber chip.gds TOP --report out/report.md --report-format markdown
    gds-gerber chip.gds --list-cells
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .config import load_config
from .engine import convert_layout
from .errors import StructureNotFoundError
from .io import REPORT_FORMATS, save_report
from .library import load_library
from .report import generate_text_report

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gds-gerber",
        description="Flatten a GDSII cell and write one Gerber file per layer.",
    )
    parser.add_argument(
        "path",
        type=str,
        help="Path to the GDSII file (or a Library JSON dump)",
    )
    parser.add_argument(
        "cell",
        type=str,
        nargs="?",
        help="Name of the cell to generate files for",
    )
    parser.add_argument(
        "layers",
        type=int,
        nargs="*",
        help="Layers to generate files for (default: 1, or default_layers from --config)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=".",
        help="Directory for the Gerber files (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON config file with conversion settings",
    )
    parser.add_argument(
        "--report",
        type=str,
        default=None,
        help="Write the conversion summary to this path",
    )
    parser.add_argument(
        "--report-format",
        choices=REPORT_FORMATS,
        default="json",
        help="Format of the --report file (default: json)",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Convert up to N layers in parallel (overrides max_workers)",
    )
    parser.add_argument(
        "--list-cells",
        action="store_true",
        help="List the cells in the file and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.path)
    if not path.exists():
        raise SystemExit(f"Layout file not found: {path}")

    library = load_library(path)

    if args.list_cells:
        tops = set(library.top_structures())
        for name in library.structure_names():
            print(f"{name} (top)" if name in tops else name)
        return 0

    if not args.cell:
        parser.error("cell is required unless --list-cells is given")

    config = load_config(Path(args.config) if args.config else None)
    if args.jobs is not None:
        if args.jobs < 1:
            parser.error("--jobs must be >= 1")
        config.max_workers = args.jobs

    try:
        result = convert_layout(
            library,
            args.cell,
            args.layers,
            Path(args.output_dir),
            source_name=str(path),
            config=config,
        )
    except StructureNotFoundError as e:
        logger.error("%s", e)
        return 1

    if args.report:
        save_report(result, Path(args.report), args.report_format)
        logger.info("wrote report %s", args.report)

    if args.verbose:
        print(generate_text_report(result))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
