#!/usr/bin/env python3
"""Fake CLI for process runner tests.

This script produces a controllable mix of stdout/stderr output, timing
and exit codes.

Usage:
    python fake_cli.py [--lines N] [--line-size BYTES] [--stderr TEXT]
                       [--sleep SECONDS] [--close-stdout-first] [--exit-code CODE]

Arguments:
    --lines: Number of stdout lines "line1".."lineN" (default: 0)
    --line-size: Pad every stdout line to at least this many characters
    --stderr: Text written to stderr (may contain newlines)
    --sleep: Seconds to sleep before exiting
    --close-stdout-first: Close stdout before sleeping
    --exit-code: Exit code (default: 0)
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from typing import NoReturn


def main() -> NoReturn:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Fake CLI for testing")
    parser.add_argument("--lines", type=int, default=0, help="Number of stdout lines")
    parser.add_argument("--line-size", type=int, default=0, help="Minimum line width")
    parser.add_argument("--stderr", type=str, default="", help="Text for stderr")
    parser.add_argument("--sleep", type=float, default=0.0, help="Sleep before exit")
    parser.add_argument("--close-stdout-first", action="store_true", help="Close stdout early")
    parser.add_argument("--exit-code", type=int, default=0, help="Exit code")
    args = parser.parse_args()

    for i in range(1, args.lines + 1):
        sys.stdout.write(f"line{i}".ljust(args.line_size) + "\n")
    sys.stdout.flush()

    if args.stderr:
        sys.stderr.write(args.stderr)
        sys.stderr.flush()

    if args.close_stdout_first:
        sys.stdout.close()
        os.close(1)

    if args.sleep:
        time.sleep(args.sleep)

    sys.exit(args.exit_code)


if __name__ == "__main__":
    main()
