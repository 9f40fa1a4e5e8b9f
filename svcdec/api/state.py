"""
Shared decoder state used by the control API.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Deque, List, Optional

from ..codec_def import OptionId, StatusCode
from ..config import PROFILES_PATH, get_profile
from ..decoder import Decoder, OptionResult, create_decoder, destroy_decoder
from ..options import describe_options
from ..params import DecodingParam
from ..trace import OpaqueHandle, TraceLevel

LOG = logging.getLogger(__name__)

TRACE_BUFFER_SIZE = 256


@dataclass
class TraceRecord:
    level: int
    message: str
    context: Optional[str] = None

    def to_dict(self) -> dict:
        return {"level": int(self.level), "message": self.message, "context": self.context}


@dataclass
class DecoderService:
    """
    Owns one decoder on behalf of the API and serialises every call to it.

    After each successful initialisation the service installs its own trace
    callback so recent decoder diagnostics can be inspected over HTTP.
    """

    profiles_path: Path = PROFILES_PATH
    active_profile: Optional[str] = None
    trace_level: int = TraceLevel.INFO
    decoder: Decoder = field(default_factory=create_decoder)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _trace_records: Deque[TraceRecord] = field(
        default_factory=lambda: deque(maxlen=TRACE_BUFFER_SIZE), repr=False
    )

    def _on_trace(self, context: Any, level: int, message: str) -> None:
        label = context if isinstance(context, str) else None
        self._trace_records.append(TraceRecord(level=level, message=message, context=label))

    def _install_trace(self, label: str) -> None:
        self.decoder.set_option(OptionId.TRACE_CALLBACK_CONTEXT, OpaqueHandle(label))
        self.decoder.set_option(OptionId.TRACE_CALLBACK, self._on_trace)
        self.decoder.set_option(OptionId.TRACE_LEVEL, int(self.trace_level))

    def initialize(self, param: Optional[DecodingParam], *, label: str = "api") -> StatusCode:
        with self._lock:
            status = self.decoder.initialize(param)
            if status is StatusCode.SUCCESS:
                self._install_trace(label)
            return status

    def initialize_profile(self, name: str) -> StatusCode:
        """Initialise from a named profile; raises ``ProfileError`` for unknown names."""

        param = get_profile(name, self.profiles_path)
        with self._lock:
            status = self.initialize(param, label=name)
            if status is StatusCode.SUCCESS:
                self.active_profile = name
            return status

    def uninitialize(self) -> StatusCode:
        with self._lock:
            self.active_profile = None
            return self.decoder.uninitialize()

    def set_option(self, option: Any, value: Any) -> StatusCode:
        with self._lock:
            return self.decoder.set_option(option, value)

    def get_option(self, option: Any) -> OptionResult:
        with self._lock:
            return self.decoder.get_option(option)

    def options(self) -> List[dict]:
        return describe_options()

    def trace_records(self) -> List[dict]:
        with self._lock:
            return [record.to_dict() for record in self._trace_records]

    def snapshot(self) -> dict:
        with self._lock:
            payload = self.decoder.describe()
            payload["profile"] = self.active_profile
            return payload

    def close(self) -> None:
        with self._lock:
            destroy_decoder(self.decoder)
            LOG.info("Decoder service closed.")
