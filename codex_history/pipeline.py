"""Candidate selection, filtering and ordering of session summaries."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from codex_history import config
from codex_history.date_utils import to_epoch_ms
from codex_history.models import SessionSummary

SORT_KEYS = ("mtime", "timestamp")
SORT_ORDERS = ("asc", "desc")


@dataclass
class ListOptions:
    limit: Optional[int] = None
    sort: str = "mtime"
    order: str = "desc"
    since: Optional[str] = None
    before: Optional[str] = None
    cwd_filter: Optional[str] = None

    def __post_init__(self) -> None:
        if self.sort not in SORT_KEYS:
            self.sort = "mtime"
        if self.order not in SORT_ORDERS:
            self.order = "desc"
        if self.limit is not None:
            self.limit = max(0, self.limit)

    @property
    def needs_full_scan(self) -> bool:
        """True when the newest-by-mtime files alone cannot answer the query."""
        return bool(
            self.since
            or self.before
            or self.cwd_filter
            or self.sort != "mtime"
            or self.order != "desc"
        )


def effective_time(summary: SessionSummary) -> float:
    """Record timestamp in epoch ms when parseable, else the file mtime."""
    if summary.timestamp:
        parsed = to_epoch_ms(summary.timestamp)
        if parsed is not None:
            return parsed
    return summary.mtime


def select_candidates(
    files_with_mtimes: list[tuple[str, float]],
    options: ListOptions,
    fast_path_min: int = config.FAST_PATH_MIN,
) -> list[str]:
    """Order files newest first and trim them when a limit allows it."""
    ordered = sorted(files_with_mtimes, key=lambda item: item[1], reverse=True)
    paths = [path for path, _ in ordered]
    if options.needs_full_scan or options.limit is None:
        return paths
    return paths[: max(options.limit, fast_path_min)]


def filter_and_sort(summaries: list[SessionSummary], options: ListOptions) -> list[SessionSummary]:
    since_ms = to_epoch_ms(options.since) if options.since else None
    before_ms = to_epoch_ms(options.before) if options.before else None

    filtered: list[SessionSummary] = []
    for summary in summaries:
        if options.cwd_filter and options.cwd_filter not in (summary.cwd or ""):
            continue
        if since_ms is not None and effective_time(summary) < since_ms:
            continue
        if before_ms is not None and effective_time(summary) >= before_ms:
            continue
        filtered.append(summary)

    if options.sort == "timestamp":
        sort_key = effective_time
    else:
        sort_key = lambda summary: summary.mtime  # noqa: E731
    # list.sort is stable in both directions.
    filtered.sort(key=sort_key, reverse=options.order == "desc")

    if options.limit is not None:
        return filtered[: options.limit]
    return filtered
