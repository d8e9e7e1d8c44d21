#!/usr/bin/env python3
"""List Codex session histories with their cwd and first user ask.

Usage:
  codex-history-list
  codex-history-list --dir ~/.codex/sessions --limit 20
  codex-history-list --since 2025-08-30 --cwd-filter my-repo --json
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import re
import sys
import traceback
from typing import Optional, Sequence

from codex_history import config
from codex_history.collector import parse_all
from codex_history.pipeline import ListOptions, filter_and_sort, select_candidates
from codex_history.render import render_json, render_table, terminal_width
from codex_history.scanner import get_mtime, scan_dir

logger = logging.getLogger("codex_history.cli")

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_limit(value: str) -> Optional[int]:
    """Read a leading integer, ignoring trailing text; None when absent."""
    match = _LEADING_INT_RE.match(value or "")
    if not match:
        return None
    return int(match.group(1))


def resolve_dir(value: Optional[str]) -> str:
    target = value or config.SESSIONS_DIR
    if target.startswith("~"):
        return os.path.normpath(os.path.expanduser("~") + "/" + target[1:].lstrip("/\\"))
    return os.path.abspath(target)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codex-history-list",
        description="List Codex session histories with cwd and first user ask",
    )
    parser.add_argument("-d", "--dir", default=None, help="session directory (default: ~/.codex/sessions)")
    parser.add_argument("-n", "--limit", type=parse_limit, default=None, help="limit number of rows")
    parser.add_argument("--json", action="store_true", help="output JSON")
    parser.add_argument("--full", action="store_true", help="do not truncate cwd, ask or path")
    parser.add_argument("--no-color", action="store_true", help="disable colored output")
    parser.add_argument("--sort", default="mtime", help="sort by: mtime|timestamp (default: mtime)")
    parser.add_argument("--order", default="desc", help="sort order: asc|desc (default: desc)")
    parser.add_argument("--since", default=None, help="filter items on/after time (ISO like 2025-08-30)")
    parser.add_argument("--before", default=None, help="filter items before time (ISO)")
    parser.add_argument("--cwd-filter", default=None, help="filter by cwd substring match")
    parser.add_argument("-v", "--verbose", action="store_true", help="log diagnostics to stderr")
    return parser


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def _run(args: argparse.Namespace) -> int:
    options = ListOptions(
        limit=args.limit,
        sort=args.sort,
        order=args.order,
        since=args.since,
        before=args.before,
        cwd_filter=args.cwd_filter,
    )

    sessions_dir = resolve_dir(args.dir)
    files = await asyncio.to_thread(scan_dir, sessions_dir)
    logger.debug("Found %d session files under %s", len(files), sessions_dir)

    files_with_mtimes = [(path, get_mtime(path)) for path in files]
    candidates = select_candidates(files_with_mtimes, options)
    summaries = await parse_all(candidates, concurrency=config.CONCURRENCY)
    output = filter_and_sort(summaries, options)

    if args.json:
        render_json(output, file=sys.stdout)
        return 0

    render_table(
        output,
        term_width=terminal_width(sys.stdout),
        full=args.full,
        color=not args.no_color,
        file=sys.stdout,
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return asyncio.run(_run(args))
    except Exception:
        traceback.print_exc(file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
