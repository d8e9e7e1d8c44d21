"""codex-history-list configuration."""
import os
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default

# Session discovery
SESSIONS_DIR = os.getenv("CODEX_HISTORY_DIR", str(Path("~") / ".codex" / "sessions"))
SESSION_SUFFIX = ".jsonl"
IGNORED_DIRS = frozenset({".git", "node_modules"})

# Parsing
CONCURRENCY = max(1, _env_int("CODEX_HISTORY_CONCURRENCY", 16))
STOP_EARLY = _env_bool("CODEX_HISTORY_STOP_EARLY", True)

# Newest files parsed when a limit is given and nothing is filtered
FAST_PATH_MIN = max(0, _env_int("CODEX_HISTORY_FAST_PATH_MIN", 50))

# Output
DEFAULT_COLUMNS = max(1, _env_int("CODEX_HISTORY_DEFAULT_COLUMNS", 120))
LOG_LEVEL = os.getenv("CODEX_HISTORY_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
