#!/usr/bin/env python3
"""
Identifier CLI - generate and inspect time-ordered identifiers.

Usage:
    python -m tools.ids_cli generate [-n 5] [--format text|hex|bytes]
    python -m tools.ids_cli inspect <id> [<id> ...]
    python -m tools.ids_cli check <ids.txt | ->

Commands:
    generate  - Print new UUID v7 identifiers from one generator
    inspect   - Decode timestamp, version and byte form of identifiers
    check     - Verify a list of identifiers (one per line) is all v7
                and in non-decreasing order

Generator behaviour honours ACADEMY_IDS_* environment settings.
"""

import argparse
import logging
import os
import sys
from typing import Iterable, List, Optional

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from academy_ids.config import IdSettings
from academy_ids.uuid7 import (
    TimeOrderedIdGenerator,
    extract_datetime,
    extract_timestamp,
    is_uuid7,
    parse,
    to_bytes,
)

logger = logging.getLogger("academy_ids.cli")


# ============================================================
# Generate command
# ============================================================

def cmd_generate(count: int, fmt: str = "text") -> int:
    """Print `count` new identifiers."""
    generator = TimeOrderedIdGenerator.from_settings(IdSettings())
    for _ in range(count):
        value = generator.generate()
        if fmt == "hex":
            print(value.hex)
        elif fmt == "bytes":
            print(to_bytes(value).hex(" "))
        else:
            print(value)
    logger.debug("Generated %d identifier(s)", count)
    return 0


# ============================================================
# Inspect command
# ============================================================

def cmd_inspect(values: Iterable[str]) -> int:
    """Describe each identifier. Returns 1 if any is malformed."""
    status = 0
    for text in values:
        try:
            value = parse(text)
        except ValueError:
            print(f"✗ {text}: not a UUID")
            status = 1
            continue

        print(f"━━━ {value} ━━━")
        if not is_uuid7(value):
            print(f"  version:    {value.version} (not v7)")
            status = 1
            continue
        print(f"  version:    7")
        print(f"  timestamp:  {extract_timestamp(value)} ms")
        print(f"  datetime:   {extract_datetime(value).isoformat()}")
        print(f"  counter:    {(value.int >> 64) & 0xFFF}")
        print(f"  bytes:      {to_bytes(value).hex()}")
    return status


# ============================================================
# Check command
# ============================================================

def cmd_check(lines: List[str]) -> int:
    """Verify format and ordering of a list of identifiers."""
    errors = []
    previous = None
    checked = 0

    for lineno, line in enumerate(lines, start=1):
        text = line.strip()
        if not text:
            continue
        checked += 1
        try:
            value = parse(text)
        except ValueError:
            errors.append(f"line {lineno}: not a UUID ({text!r})")
            continue
        if not is_uuid7(value):
            errors.append(f"line {lineno}: version {value.version}, expected 7")
        if previous is not None and value.int < previous.int:
            errors.append(f"line {lineno}: out of order (after {previous})")
        previous = value

    if not errors:
        print(f"  Result: ✓ {checked} identifier(s) valid and ordered")
        return 0

    print(f"  Result: ✗ {len(errors)} error(s) in {checked} identifier(s)")
    for e in errors:
        print(f"    • {e}")
    return 1


# ============================================================
# Main
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Time-ordered identifier tool",
        prog="python -m tools.ids_cli",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Print new identifiers")
    gen.add_argument("-n", "--count", type=int, default=1)
    gen.add_argument(
        "--format", "-f",
        choices=["text", "hex", "bytes"],
        default="text",
        help="Output form (default: canonical text)",
    )

    ins = sub.add_parser("inspect", help="Decode identifiers")
    ins.add_argument("ids", nargs="+")

    chk = sub.add_parser("check", help="Verify a file of identifiers")
    chk.add_argument("path", help="File with one identifier per line, or -")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "generate":
        if args.count < 1:
            parser.error("--count must be at least 1")
        return cmd_generate(args.count, args.format)

    if args.command == "inspect":
        return cmd_inspect(args.ids)

    if args.path == "-":
        return cmd_check(sys.stdin.readlines())
    if not os.path.exists(args.path):
        print(f"  ERROR: File not found: {args.path}")
        return 1
    with open(args.path, "r", encoding="utf-8") as f:
        return cmd_check(f.readlines())


if __name__ == "__main__":
    sys.exit(main())
