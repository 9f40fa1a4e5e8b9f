"""
Trace sink used by the decoder to report diagnostics to its caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Optional

LOG = logging.getLogger(__name__)

TraceCallback = Callable[[Any, int, str], None]


class TraceLevel(IntEnum):
    QUIET = 0
    ERROR = 1 << 0
    WARNING = 1 << 1
    INFO = 1 << 2
    DEBUG = 1 << 3
    DETAIL = 1 << 4

    @classmethod
    def default(cls) -> "TraceLevel":
        return cls.WARNING


_LOGGING_LEVELS = {
    TraceLevel.ERROR: logging.ERROR,
    TraceLevel.WARNING: logging.WARNING,
    TraceLevel.INFO: logging.INFO,
    TraceLevel.DEBUG: logging.DEBUG,
    TraceLevel.DETAIL: logging.DEBUG,
}


@dataclass(frozen=True)
class OpaqueHandle:
    """
    Reference the decoder stores and hands back without ever inspecting.

    ``OpaqueHandle(None)`` stands for a null pointer.
    """

    ref: Any = None

    @property
    def is_null(self) -> bool:
        return self.ref is None


NULL_HANDLE = OpaqueHandle()


@dataclass
class TraceSink:
    level: int = TraceLevel.default()
    callback: Optional[TraceCallback] = None
    context: OpaqueHandle = field(default=NULL_HANDLE)

    @property
    def enabled(self) -> bool:
        return self.callback is not None and self.level != TraceLevel.QUIET

    def accepts(self, level: int) -> bool:
        return int(level) != TraceLevel.QUIET and int(level) <= int(self.level)

    def emit(self, level: int, message: str) -> None:
        if not self.accepts(level):
            return
        LOG.log(_LOGGING_LEVELS.get(level, logging.DEBUG), message)
        if self.callback is None:
            return
        try:
            self.callback(self.context.ref, int(level), message)
        except Exception:
            LOG.exception("Trace callback %r failed.", self.callback)
