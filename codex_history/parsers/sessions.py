"""Extract session summaries from JSONL session logs."""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from typing import Any

from codex_history import config
from codex_history.models import SessionSummary
from codex_history.scanner import get_mtime

logger = logging.getLogger("codex_history.parser")

ENVIRONMENT_CONTEXT_MARKER = "<environment_context>"

_CWD_TAG_PATTERN = re.compile(r"<cwd>([^<]+)</cwd>")
# Tolerates a missing closing tag, e.g. `<cwd>/tmp/project` on its own line.
_CWD_OPEN_TAG_PATTERN = re.compile(r"<cwd>\s*([^<]+)\s*")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_LINE_BREAK_PATTERN = re.compile(r"\r?\n")


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token}")


def texts_from_content(content: Any) -> list[str]:
    """Collect text fragments from a string, block list, or single block."""
    if content is None:
        return []
    if isinstance(content, str):
        return [content]
    if isinstance(content, list):
        texts: list[str] = []
        for block in content:
            if not isinstance(block, dict):
                continue
            if isinstance(block.get("text"), str):
                texts.append(block["text"])
            elif isinstance(block.get("content"), str):
                texts.append(block["content"])
        return texts
    if isinstance(content, dict) and isinstance(content.get("text"), str):
        return [content["text"]]
    return []


def is_environment_context(text: str) -> bool:
    return text.lstrip().startswith(ENVIRONMENT_CONTEXT_MARKER)


def extract_cwd(text: str) -> str | None:
    match = _CWD_TAG_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    for line in _LINE_BREAK_PATTERN.split(text):
        match = _CWD_OPEN_TAG_PATTERN.search(line)
        if match:
            return match.group(1).strip()
    return None


def normalize_ask(text: str) -> str:
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def _is_user_message(record: dict[str, Any]) -> bool:
    role = record.get("role")
    if role is None:
        role = record.get("author")
    return record.get("type") == "message" and role == "user"


def summarize_lines(path: str, lines: Iterable[str], stop_early: bool = True) -> SessionSummary:
    """Scan decoded JSONL lines for the first cwd, ask and timestamp.

    Stops pulling from *lines* as soon as both cwd and ask are known when
    *stop_early* is set. The returned summary carries mtime 0; callers that
    read from disk fill it in.
    """
    cwd: str | None = None
    ask: str | None = None
    timestamp: str | None = None

    for line in lines:
        if not line or not line.strip():
            continue
        try:
            record = json.loads(line, parse_constant=_reject_constant)
        except (ValueError, RecursionError):
            logger.debug("Skipping malformed line in %s", path)
            continue
        if not isinstance(record, dict):
            continue

        if not timestamp and isinstance(record.get("timestamp"), str):
            timestamp = record["timestamp"]

        # State snapshots never carry user content.
        if record.get("record_type") == "state":
            continue

        if _is_user_message(record):
            for text in texts_from_content(record.get("content")):
                if is_environment_context(text):
                    if not cwd:
                        found = extract_cwd(text)
                        if found:
                            cwd = found
                elif not ask:
                    ask = normalize_ask(text)

        if stop_early and cwd and ask:
            break

    return SessionSummary(path=path, cwd=cwd, ask=ask, timestamp=timestamp)


def parse_session_file(path: str, stop_early: bool = config.STOP_EARLY) -> SessionSummary:
    """Parse a single JSONL session file into a SessionSummary.

    I/O and text-decoding errors propagate; callers aggregating many files
    treat them as "no summary for this file".
    """
    with open(path, "r", encoding="utf-8", newline=None) as handle:
        summary = summarize_lines(path, (line.rstrip("\n") for line in handle), stop_early=stop_early)
    summary.mtime = get_mtime(path)
    return summary
