"""Summarize Codex session logs into a terminal table."""

__version__ = "0.1.0"
