"""Resolve the source location an error was created from."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from types import FrameType


@dataclass(frozen=True)
class CallerLocation:
    """Source position of a call site.

    Empty strings and a zero line mean the location could not be resolved.
    """

    filename: str = ""
    calling_function: str = ""
    line: int = 0

    def __str__(self) -> str:
        return f"{self.filename}:{self.line} ({self.calling_function})"


def location_of(frame: FrameType | None) -> CallerLocation:
    if frame is None:
        return CallerLocation()
    code = frame.f_code
    module = frame.f_globals.get("__name__", "")
    qualname = code.co_qualname
    return CallerLocation(
        filename=os.path.basename(code.co_filename),
        calling_function=f"{module}.{qualname}" if module else qualname,
        line=frame.f_lineno or 0,
    )


def locate_caller(depth: int = 0) -> CallerLocation:
    """Return the location of the caller, skipping ``depth`` extra frames.

    ``locate_caller()`` resolves to the line that called it. Frames that do not
    exist yield an empty ``CallerLocation`` instead of an error.
    """
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return CallerLocation()
    return location_of(frame)


def constructor_caller(instance: object) -> FrameType | None:
    """Return the first frame outside the ``__init__`` chain building ``instance``.

    Must be called from within ``instance.__init__``. Subclass constructors
    that delegate through ``super().__init__()`` are skipped as well.
    """
    try:
        frame: FrameType | None = sys._getframe(1)
    except ValueError:
        return None
    while frame is not None and frame.f_code.co_name == "__init__" and frame.f_locals.get("self") is instance:
        frame = frame.f_back
    return frame
