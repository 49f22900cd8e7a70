"""Transient batch-run models. Nothing here is persisted."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class BatchState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class BatchImage:
    """One uploaded image queued for analysis.

    Attributes:
        image_bytes: Raw image bytes as uploaded.
        mime_type: MIME type sent to the remote analyzer.
        preview_url: Data URL (or other reference) stored on the resulting case.
        filename: Original filename, used only in error messages.
    """

    image_bytes: bytes
    mime_type: str = "image/jpeg"
    preview_url: Optional[str] = None
    filename: Optional[str] = None
