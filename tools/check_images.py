#!/usr/bin/env python3
"""Check image files against the guard's limits without decoding them.

Prints one line per file and exits non-zero if any file is rejected or has
an unreadable header.  Limits default to the environment (see ``config``).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import config  # noqa: E402
from services.admission_service import Limits  # noqa: E402
from services.errors import HeaderParseError  # noqa: E402
from services.guard_service import ImageGuard  # noqa: E402

logger = logging.getLogger(__name__)


def check(paths: list[Path], guard: ImageGuard) -> list[str]:
    """Inspect every path and return the error lines for failures."""
    errors: list[str] = []
    for path in paths:
        try:
            with path.open("rb") as fh:
                metadata, result, replay = guard.inspect(fh)
                replay.close()
        except OSError as exc:
            errors.append(f"{path}: cannot read file: {exc}")
            continue
        except HeaderParseError as exc:
            errors.append(f"{path}: {exc}")
            continue

        summary = f"{metadata.format} {metadata.width}x{metadata.height} {metadata.mode}"
        if result.passed:
            logger.info("%s: ok (%s, ~%d bytes)", path, summary, result.estimated_bytes)
        else:
            errors.append(f"{path}: rejected ({summary}): {result.to_error()}")
    return errors


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("paths", nargs="+", type=Path, help="image files to check")
    parser.add_argument("--max-width", type=int, default=config.MAX_WIDTH, help="0 disables")
    parser.add_argument("--max-height", type=int, default=config.MAX_HEIGHT, help="0 disables")
    parser.add_argument(
        "--max-memory", type=int, default=config.MAX_MEMORY_BYTES, help="bytes, 0 disables"
    )
    parser.add_argument(
        "--max-peek", type=int, default=config.MAX_PEEK_BYTES, help="header byte budget, 0 disables"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = build_parser().parse_args(argv)
    try:
        limits = Limits(args.max_width, args.max_height, args.max_memory)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2
    if args.max_peek < 0:
        logger.error("--max-peek must be >= 0")
        return 2
    errors = check(args.paths, ImageGuard(limits, max_peek_bytes=args.max_peek))
    for err in errors:
        logger.error("%s", err)
    if not errors:
        logger.info("All %d images within limits", len(args.paths))
    return 1 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
