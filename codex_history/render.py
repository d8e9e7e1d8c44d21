"""Terminal table and JSON output for session summaries.

Column widths are measured in terminal cells rather than characters, so wide
(CJK, emoji) and zero-width (combining) characters pad and truncate
correctly. Layout gives the path column its full width first so paths stay
copy-pasteable, then splits what is left between cwd and ask. When the table
still overflows the terminal, columns shrink in the order ask, cwd, path,
each no further than its minimum.
"""
from __future__ import annotations

import json
import re
import shutil
import sys
from dataclasses import dataclass
from typing import IO, Optional

from rich.cells import cell_len
from rich.console import Console
from rich.text import Text

from codex_history import config
from codex_history.date_utils import format_local_minute
from codex_history.models import SessionSummary

ELLIPSIS = "…"
SEPARATOR = "  "
MISSING = "-"

TIME_WIDTH = 16  # YYYY-MM-DD HH:MM
CWD_MIN_WIDTH = 10
ASK_MIN_WIDTH = 6
PATH_MIN_WIDTH = 4
CWD_MAX_WIDTH = 25
CWD_SHARE = 0.4

COLUMNS = ("time", "cwd", "ask", "path")

# Lone UTF-16 surrogates survive json.loads but cannot be encoded to a stream.
_SURROGATE_PATTERN = re.compile("[\ud800-\udfff]")


@dataclass
class ColumnLayout:
    time: int
    cwd: int
    ask: int
    path: int

    @property
    def widths(self) -> tuple[int, int, int, int]:
        return (self.time, self.cwd, self.ask, self.path)

    @property
    def table_width(self) -> int:
        return sum(self.widths) + len(SEPARATOR) * (len(COLUMNS) - 1)


def terminal_width(stream: Optional[IO[str]] = None) -> int:
    """Columns of the attached terminal, or the configured default."""
    target = stream or sys.stdout
    try:
        if target.isatty():
            return shutil.get_terminal_size((config.DEFAULT_COLUMNS, 24)).columns or config.DEFAULT_COLUMNS
    except (AttributeError, ValueError, OSError):
        pass
    return config.DEFAULT_COLUMNS


def take_start_by_width(text: str, width: int) -> str:
    if width <= 0:
        return ""
    used = 0
    out: list[str] = []
    for char in text:
        char_width = cell_len(char)
        if used + char_width > width:
            break
        out.append(char)
        used += char_width
    return "".join(out)


def take_end_by_width(text: str, width: int) -> str:
    if width <= 0:
        return ""
    used = 0
    out: list[str] = []
    for char in reversed(text):
        char_width = cell_len(char)
        if used + char_width > width:
            break
        out.append(char)
        used += char_width
    return "".join(reversed(out))


def truncate_end(text: str, width: int) -> str:
    """Cut *text* to *width* cells, ending with an ellipsis when shortened."""
    if cell_len(text) <= width:
        return text
    limit = max(1, width - cell_len(ELLIPSIS))
    return take_start_by_width(text, limit) + ELLIPSIS


def truncate_middle(text: str, width: int) -> str:
    """Cut *text* to *width* cells, keeping its head and tail around an ellipsis."""
    if cell_len(text) <= width:
        return text
    content_width = max(1, width - cell_len(ELLIPSIS))
    left_width = content_width // 2
    right_width = content_width - left_width
    return take_start_by_width(text, left_width) + ELLIPSIS + take_end_by_width(text, right_width)


def pad_end(text: str, width: int) -> str:
    used = cell_len(text)
    if used >= width:
        return text
    return text + " " * (width - used)


def _reduction(current: int, minimum: int, excess: int) -> int:
    return min(excess, max(0, current - minimum))


def compute_layout(term_width: int, summaries: list[SessionSummary], full: bool = False) -> ColumnLayout:
    """Allocate column widths for *summaries* on a terminal *term_width* wide."""
    if full:
        return ColumnLayout(
            time=TIME_WIDTH,
            cwd=max([CWD_MIN_WIDTH] + [cell_len(_cwd_text(s)) for s in summaries]),
            ask=max([ASK_MIN_WIDTH] + [cell_len(_ask_text(s)) for s in summaries]),
            path=max([PATH_MIN_WIDTH] + [cell_len(s.path) for s in summaries]),
        )

    fixed = TIME_WIDTH + len(SEPARATOR) * (len(COLUMNS) - 1)
    available = max(CWD_MIN_WIDTH + ASK_MIN_WIDTH + PATH_MIN_WIDTH, term_width - fixed)

    if summaries:
        path_width = max(PATH_MIN_WIDTH, max(cell_len(s.path) for s in summaries))
    else:
        path_width = PATH_MIN_WIDTH

    remaining = max(0, available - path_width)
    cwd_width = max(CWD_MIN_WIDTH, min(CWD_MAX_WIDTH, int(remaining * CWD_SHARE)))
    ask_width = max(ASK_MIN_WIDTH, remaining - cwd_width)

    layout = ColumnLayout(time=TIME_WIDTH, cwd=cwd_width, ask=ask_width, path=path_width)
    excess = layout.table_width - term_width
    if excess > 0:
        cut = _reduction(layout.ask, ASK_MIN_WIDTH, excess)
        layout.ask -= cut
        excess -= cut

        cut = _reduction(layout.cwd, CWD_MIN_WIDTH, excess)
        layout.cwd -= cut
        excess -= cut

        # Paths shrink only as a last resort.
        cut = _reduction(layout.path, PATH_MIN_WIDTH, excess)
        layout.path -= cut
    return layout


def printable(text: str) -> str:
    """Replace lone surrogates with U+FFFD so the text can be written out."""
    return _SURROGATE_PATTERN.sub("\ufffd", text)


def escape_surrogates(text: str) -> str:
    """Escape lone surrogates as `\\uXXXX`, the way JSON.stringify does."""
    return _SURROGATE_PATTERN.sub(lambda match: "\\u%04x" % ord(match.group()), text)


def _cwd_text(summary: SessionSummary) -> str:
    return summary.cwd if summary.cwd is not None else MISSING


def _ask_text(summary: SessionSummary) -> str:
    return summary.ask if summary.ask is not None else MISSING


def format_row(summary: SessionSummary, layout: ColumnLayout, full: bool = False) -> str:
    cwd = printable(_cwd_text(summary))
    ask = printable(_ask_text(summary))
    path = printable(summary.path)
    if not full:
        cwd = truncate_middle(cwd, layout.cwd)
        ask = truncate_end(ask, layout.ask)
        path = truncate_end(path, layout.path)
    cells = (format_local_minute(summary.mtime), cwd, ask, path)
    return SEPARATOR.join(pad_end(cell, width) for cell, width in zip(cells, layout.widths))


def render_table(
    summaries: list[SessionSummary],
    term_width: int,
    full: bool = False,
    color: bool = True,
    file: Optional[IO[str]] = None,
) -> None:
    """Print *summaries* as an aligned table with a bold header."""
    layout = compute_layout(term_width, summaries, full=full)
    # Wide enough that rich never wraps, crops, or strips padding.
    console = Console(
        file=file or sys.stdout,
        width=max(term_width, layout.table_width, 1),
        color_system="auto" if color else None,
        highlight=False,
        markup=False,
        emoji=False,
    )

    header = Text()
    for index, (name, width) in enumerate(zip(COLUMNS, layout.widths)):
        if index:
            header.append(SEPARATOR)
        header.append(name, style="bold")
        header.append(" " * (width - cell_len(name)))
    console.print(header, soft_wrap=True)
    console.print("-" * min(term_width, layout.table_width), soft_wrap=True)

    for summary in summaries:
        console.print(format_row(summary, layout, full=full), soft_wrap=True)


def render_json(summaries: list[SessionSummary], file: Optional[IO[str]] = None) -> None:
    """Write summaries as a two-space indented JSON array."""
    target = file or sys.stdout
    payload = [summary.to_json_dict() for summary in summaries]
    target.write(escape_surrogates(json.dumps(payload, indent=2, ensure_ascii=False)) + "\n")
