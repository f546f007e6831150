"""Command line interface.

Example:
    plaquecad designs
    plaquecad generate basketball-jersey --set playerName=JORDAN \\
        --set number=23 --out build/
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List

from plaquecad import __version__
from plaquecad.designs import DESIGNS, get_design
from plaquecad.errors import PlaqueCadError
from plaquecad.export import export_regions
from plaquecad.logging_config import level_from_name, setup_logging
from plaquecad.pipeline import generate
from plaquecad.resources import ResourceCache

LOG_LEVEL_ENV_VAR = "PLAQUECAD_LOG_LEVEL"

logger = logging.getLogger(__name__)


def parse_assignments(items: List[str]) -> Dict[str, str]:
    """Turn ``["a=1", "b=x"]`` into ``{"a": "1", "b": "x"}``."""

    fields: Dict[str, str] = {}
    for item in items or ():
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"expected FIELD=VALUE, got {item!r}")
        fields[key.strip()] = value
    return fields


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plaquecad",
        description="Generate multi-colour plaques as per-region STL files.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENV_VAR, "INFO"),
        help="Logging level (default: $PLAQUECAD_LOG_LEVEL or INFO).",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also write the log here.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("designs", help="List the available designs and their inputs.")

    gen = sub.add_parser("generate", help="Generate STL files for a design.")
    gen.add_argument("design", help="Design id, e.g. basketball-jersey.")
    gen.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Set an input field. Repeat for several fields.",
    )
    gen.add_argument("--out", type=Path, default=Path("."), help="Output directory (default: .).")
    gen.add_argument(
        "--font",
        default=None,
        help="Font file or installed font name; 'block' for the built-in face.",
    )
    gen.add_argument(
        "--region",
        action="append",
        default=None,
        help="Only export this region. Repeat for several regions.",
    )
    return parser


def _list_designs() -> int:
    for design_id in sorted(DESIGNS):
        config = DESIGNS[design_id].config
        print(f"{design_id}: {config.name}")
        for spec in config.inputs:
            extra = f" options={list(spec.options)}" if spec.options else ""
            print(f"    {spec.id} ({spec.kind.value}, default={spec.default!r}){extra}")
        print(f"    regions: {', '.join(config.region_ids)}")
    return 0


def _generate(args: argparse.Namespace) -> int:
    fields = parse_assignments(args.assignments)
    design = get_design(args.design)
    cache = ResourceCache(args.font)
    result = asyncio.run(generate(design.id, fields, cache))

    written = export_regions(result, args.out, args.region)
    for region_id, message in result.region_errors.items():
        print(f"region {region_id} unavailable: {message}", file=sys.stderr)
    if not written:
        print("No regions exported.", file=sys.stderr)
        return 1
    for path in written.values():
        print(path)
    if design.config.print_guide:
        logger.info("print guide:\n%s", design.config.print_guide.rstrip())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(level_from_name(args.log_level), args.log_file)

    try:
        if args.command == "designs":
            return _list_designs()
        return _generate(args)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    except PlaqueCadError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
