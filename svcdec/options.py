"""
Static option registry.

Every :class:`~svcdec.codec_def.OptionId` maps to exactly one
:class:`OptionDescriptor` describing its access mode, the value it carries and
how a written value is coerced before it is stored.  The table is built once at
import time and is read-only; per-decoder values live in :class:`OptionState`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from .codec_def import (
    CANONICAL_OUTPUT_FORMAT,
    ERROR_CONCEALMENT_MASK,
    ErrorConcealment,
    OptionId,
    StatusCode,
)
from .params import DecodingParam
from .trace import OpaqueHandle, TraceSink

OptionKey = Union[OptionId, int, str]


class OptionError(Exception):
    """Base class for option dispatch failures."""

    status = StatusCode.INVALID_ARGUMENT

    def __init__(self, option: object, message: str) -> None:
        super().__init__(message)
        self.option = option


class UnsupportedOption(OptionError):
    """Raised when the identifier does not name a known option."""

    status = StatusCode.UNSUPPORTED_OPTION


class OptionNotWritable(OptionError):
    """Raised when a read-only option is written."""

    status = StatusCode.NOT_WRITABLE


class OptionNotReadable(OptionError):
    """Raised when a write-only option is read."""

    status = StatusCode.NOT_READABLE


class InvalidOptionValue(OptionError):
    """Raised when the supplied value is null or of the wrong type."""

    status = StatusCode.INVALID_ARGUMENT


class AccessMode(str, Enum):
    READ_ONLY = "read-only"
    WRITE_ONLY = "write-only"
    READ_WRITE = "read-write"


@dataclass
class StreamStatus:
    """Values reported by the decoding pipeline; ``-1`` until something is decoded."""

    temporal_id: int = -1
    frame_num: int = -1
    idr_pic_id: int = -1
    ltr_marked_frame_num: int = -1

    def to_dict(self) -> dict:
        return {
            "temporal_id": int(self.temporal_id),
            "frame_num": int(self.frame_num),
            "idr_pic_id": int(self.idr_pic_id),
            "ltr_marked_frame_num": int(self.ltr_marked_frame_num),
        }


@dataclass
class OptionState:
    """Mutable option values owned by one initialised decoder."""

    data_format: int = CANONICAL_OUTPUT_FORMAT
    end_of_stream: bool = False
    vcl_nal: bool = False
    ltr_marking_flag: bool = False
    error_con_idc: int = ErrorConcealment.DISABLE
    trace: TraceSink = field(default_factory=TraceSink)
    stream: StreamStatus = field(default_factory=StreamStatus)

    @classmethod
    def from_param(cls, param: DecodingParam, trace: Optional[TraceSink] = None) -> "OptionState":
        return cls(
            data_format=_coerce_data_format(param.output_color_format),
            error_con_idc=_coerce_error_concealment(param.ec_active_idc),
            trace=trace if trace is not None else TraceSink(),
        )

    def to_dict(self) -> dict:
        return {
            "data_format": int(self.data_format),
            "end_of_stream": bool(self.end_of_stream),
            "vcl_nal": bool(self.vcl_nal),
            "ltr_marking_flag": bool(self.ltr_marking_flag),
            "error_con_idc": int(self.error_con_idc),
            "trace_level": int(self.trace.level),
            "trace_enabled": self.trace.enabled,
            "stream": self.stream.to_dict(),
        }


# ---------------------------------------------------------------------- coercers


def _require_int(value: object) -> int:
    if not isinstance(value, int):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    return int(value)


def _coerce_data_format(value: object) -> int:
    _require_int(value)
    return CANONICAL_OUTPUT_FORMAT


def _coerce_flag(value: object) -> bool:
    return bool(_require_int(value))


def _coerce_error_concealment(value: object) -> int:
    return ErrorConcealment(_require_int(value) & ERROR_CONCEALMENT_MASK)


def _coerce_trace_level(value: object) -> int:
    level = _require_int(value)
    if level < 0:
        raise ValueError(f"trace level must be non-negative, got {level}")
    return level


def _coerce_trace_callback(value: object) -> Optional[Callable[..., None]]:
    if isinstance(value, OpaqueHandle):
        value = value.ref
        if value is None:
            return None
    if not callable(value):
        raise TypeError(f"trace callback must be callable, got {type(value).__name__}")
    return value


def _coerce_trace_context(value: object) -> OpaqueHandle:
    if isinstance(value, OpaqueHandle):
        return value
    return OpaqueHandle(value)


# ---------------------------------------------------------------------- registry


@dataclass(frozen=True)
class OptionDescriptor:
    option: OptionId
    access: AccessMode
    value_type: str
    attribute: str
    coerce: Optional[Callable[[Any], Any]] = None

    @property
    def readable(self) -> bool:
        return self.access is not AccessMode.WRITE_ONLY

    @property
    def writable(self) -> bool:
        return self.access is not AccessMode.READ_ONLY

    def read(self, state: OptionState) -> Any:
        target: Any = state
        for part in self.attribute.split("."):
            target = getattr(target, part)
        return target

    def coerce_value(self, value: Any) -> Any:
        if value is None:
            raise InvalidOptionValue(self.option, f"{self.option.name} requires a value")
        try:
            effective = self.coerce(value) if self.coerce is not None else value
        except (TypeError, ValueError) as exc:
            raise InvalidOptionValue(self.option, f"{self.option.name}: {exc}") from exc
        return effective

    def store(self, state: OptionState, effective: Any) -> None:
        owner_path, _, name = self.attribute.rpartition(".")
        target: Any = state
        if owner_path:
            for part in owner_path.split("."):
                target = getattr(target, part)
        setattr(target, name, effective)

    def to_dict(self) -> dict:
        return {
            "name": self.option.name,
            "id": int(self.option),
            "access": self.access.value,
            "type": self.value_type,
        }


def _build_table() -> Mapping[OptionId, OptionDescriptor]:
    rw, ro, wo = AccessMode.READ_WRITE, AccessMode.READ_ONLY, AccessMode.WRITE_ONLY
    descriptors = [
        OptionDescriptor(OptionId.DATAFORMAT, rw, "int", "data_format", _coerce_data_format),
        OptionDescriptor(OptionId.END_OF_STREAM, rw, "bool", "end_of_stream", _coerce_flag),
        OptionDescriptor(OptionId.VCL_NAL, rw, "bool", "vcl_nal", _coerce_flag),
        OptionDescriptor(OptionId.TEMPORAL_ID, ro, "int", "stream.temporal_id"),
        OptionDescriptor(OptionId.FRAME_NUM, ro, "int", "stream.frame_num"),
        OptionDescriptor(OptionId.IDR_PIC_ID, ro, "int", "stream.idr_pic_id"),
        OptionDescriptor(OptionId.LTR_MARKING_FLAG, rw, "bool", "ltr_marking_flag", _coerce_flag),
        OptionDescriptor(OptionId.LTR_MARKED_FRAME_NUM, ro, "int", "stream.ltr_marked_frame_num"),
        OptionDescriptor(
            OptionId.ERROR_CON_IDC, rw, "int", "error_con_idc", _coerce_error_concealment
        ),
        OptionDescriptor(OptionId.TRACE_LEVEL, rw, "int", "trace.level", _coerce_trace_level),
        OptionDescriptor(
            OptionId.TRACE_CALLBACK, wo, "callable", "trace.callback", _coerce_trace_callback
        ),
        OptionDescriptor(
            OptionId.TRACE_CALLBACK_CONTEXT, wo, "opaque", "trace.context", _coerce_trace_context
        ),
    ]
    table: Dict[OptionId, OptionDescriptor] = {entry.option: entry for entry in descriptors}
    missing = set(OptionId) - set(table)
    if missing:  # pragma: no cover - import time guard
        raise RuntimeError(f"Option registry is missing {sorted(m.name for m in missing)}")
    return MappingProxyType(table)


OPTION_TABLE: Mapping[OptionId, OptionDescriptor] = _build_table()


def lookup(option: OptionKey) -> OptionDescriptor:
    try:
        return OPTION_TABLE[OptionId.parse(option)]
    except (KeyError, ValueError) as exc:
        raise UnsupportedOption(option, f"Unsupported decoder option {option!r}") from exc


def prepare_write(option: OptionKey, value: Any) -> Tuple[OptionDescriptor, Any]:
    """
    Resolve ``option`` and coerce ``value`` without storing anything.

    Returns the descriptor and the effective value, which can differ from
    ``value`` for normalising options.
    """

    descriptor = lookup(option)
    if not descriptor.writable:
        raise OptionNotWritable(descriptor.option, f"{descriptor.option.name} is read-only")
    return descriptor, descriptor.coerce_value(value)


def set_option(state: OptionState, option: OptionKey, value: Any) -> Any:
    """Validate ``value``, store it for ``option`` and return the effective value."""

    descriptor, effective = prepare_write(option, value)
    descriptor.store(state, effective)
    return effective


def get_option(state: OptionState, option: OptionKey) -> Any:
    descriptor = lookup(option)
    if not descriptor.readable:
        raise OptionNotReadable(descriptor.option, f"{descriptor.option.name} is write-only")
    return descriptor.read(state)


def describe_options() -> List[dict]:
    return [OPTION_TABLE[option].to_dict() for option in OptionId]


__all__ = [
    "AccessMode",
    "InvalidOptionValue",
    "OPTION_TABLE",
    "OptionDescriptor",
    "OptionError",
    "OptionNotReadable",
    "OptionNotWritable",
    "OptionState",
    "StreamStatus",
    "UnsupportedOption",
    "describe_options",
    "get_option",
    "lookup",
    "prepare_write",
    "set_option",
]
