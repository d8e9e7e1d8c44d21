"""Pydantic models for session summaries."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class SessionSummary(BaseModel):
    path: str
    cwd: Optional[str] = None
    ask: Optional[str] = None
    mtime: float = 0  # epoch ms
    timestamp: Optional[str] = None  # first timestamp seen in the file

    def to_json_dict(self) -> dict[str, Any]:
        """Dump in field order, omitting unset optional fields."""
        payload = self.model_dump(exclude_none=True)
        mtime = payload.get("mtime")
        if isinstance(mtime, float) and mtime.is_integer():
            payload["mtime"] = int(mtime)
        return payload
