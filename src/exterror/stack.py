"""Bounded snapshots of the current call stack."""

from __future__ import annotations

import sys
import threading
import traceback
from types import FrameType

STACK_BUFFER_SIZE = 4096


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` bytes of UTF-8."""
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text
    # a multi-byte character split at the boundary is dropped
    return encoded[:limit].decode("utf-8", errors="ignore")


def capture_stack(frame: FrameType | None = None, *, limit: int | None = None) -> str:
    """Snapshot the stack from ``frame`` down to the thread's entry point.

    Frames are listed most recent call first, starting at ``frame`` (by default
    the caller of this function). The result never exceeds ``limit`` bytes;
    deeper stacks are cut off silently.
    """
    if limit is None:
        limit = STACK_BUFFER_SIZE
    if frame is None:
        try:
            frame = sys._getframe(1)
        except ValueError:
            return ""
    entries = traceback.extract_stack(frame)
    entries.reverse()
    header = f"Thread {threading.current_thread().name!r} (most recent call first):\n"
    return truncate(header + "".join(traceback.format_list(entries)), limit)
