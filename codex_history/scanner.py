"""Session file discovery."""
from __future__ import annotations

import logging
import os

from codex_history import config

logger = logging.getLogger("codex_history.scanner")


def _log_walk_error(exc: OSError) -> None:
    logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc)


def scan_dir(root: str) -> list[str]:
    """Recursively collect session files under *root*.

    Ignored directories are pruned, unreadable subtrees and symlinked files
    are skipped. A missing root yields an empty list.
    """
    results: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames[:] = [name for name in dirnames if name not in config.IGNORED_DIRS]
        for name in filenames:
            if not name.endswith(config.SESSION_SUFFIX):
                continue
            path = os.path.join(dirpath, name)
            # Symlinked files are not sessions of their own.
            if os.path.islink(path):
                continue
            results.append(path)
    return results


def get_mtime(path: str) -> float:
    """Return the modification time in epoch milliseconds, or 0 on failure."""
    try:
        return os.stat(path).st_mtime_ns / 1_000_000
    except OSError:
        return 0
