"""
Structured per-request usage records.

One JSON line per /api/generate call on the ``pdf_capture.usage`` logger.
This is plain process logging; nothing is shipped anywhere else.
"""

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger("pdf_capture.usage")

TARGET_LIMIT = 100


def truncate_target(content: Optional[str], content_type: str, limit: int = TARGET_LIMIT) -> str:
    """
    Short, single-line identifier for what was rendered.

    URLs are kept as-is up to ``limit`` characters; text is prefixed with
    ``text:`` and has its whitespace collapsed.
    """
    if not content:
        return ""
    if content_type == "text":
        snippet = "text:" + " ".join(content.split())
    else:
        snippet = content.strip()
    if len(snippet) > limit:
        return snippet[: limit - 3] + "..."
    return snippet


@dataclass
class UsageRecord:
    mode: str
    type: str
    target: str
    status: str = "pending"
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    duration_ms: int = 0
    size_bytes: int = 0
    error: Optional[str] = None
    _started: float = field(default_factory=time.monotonic, repr=False)

    def succeed(self, size_bytes: int) -> None:
        self.status = "success"
        self.size_bytes = size_bytes
        self._stop()

    def fail(self, error: str) -> None:
        self.status = "error"
        self.error = error
        self._stop()

    def _stop(self) -> None:
        self.duration_ms = int((time.monotonic() - self._started) * 1000)

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("_started")
        return data


def emit_usage(record: UsageRecord) -> None:
    """Write the record as a single JSON log line."""
    logger.info(json.dumps(record.to_dict(), ensure_ascii=False))
