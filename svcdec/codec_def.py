"""
Enumerations shared by the decoder facade and the option registry.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Union


class StatusCode(IntEnum):
    """Result codes surfaced by every public decoder call."""

    SUCCESS = 0
    INVALID_ARGUMENT = 1
    NOT_INITIALIZED = 4
    UNSUPPORTED_OPTION = 5
    NOT_WRITABLE = 6
    NOT_READABLE = 7
    CONFIG_ERROR = 8

    @property
    def ok(self) -> bool:
        return self is StatusCode.SUCCESS


class VideoFormatType(IntEnum):
    RGB = 1
    RGBA = 2
    RGB555 = 3
    RGB565 = 4
    BGR = 5
    BGRA = 6
    ABGR = 7
    ARGB = 8

    YUY2 = 20
    YVYU = 21
    UYVY = 22
    I420 = 23
    YV12 = 24
    INTERNAL = 25

    NV12 = 26


# The decoder only ever emits planar 4:2:0.
CANONICAL_OUTPUT_FORMAT = VideoFormatType.I420


class ErrorConcealment(IntEnum):
    DISABLE = 0
    FRAME_COPY = 1
    SLICE_COPY = 2
    RESERVED = 3


ERROR_CONCEALMENT_MASK = 0x3


class VideoBitstreamType(IntEnum):
    AVC = 0
    SVC = 1

    @classmethod
    def default(cls) -> "VideoBitstreamType":
        return cls.SVC


class OptionId(IntEnum):
    """Closed set of runtime options understood by the decoder."""

    DATAFORMAT = 0
    END_OF_STREAM = 1
    VCL_NAL = 2
    TEMPORAL_ID = 3
    FRAME_NUM = 4
    IDR_PIC_ID = 5
    LTR_MARKING_FLAG = 6
    LTR_MARKED_FRAME_NUM = 7
    ERROR_CON_IDC = 8
    TRACE_LEVEL = 9
    TRACE_CALLBACK = 10
    TRACE_CALLBACK_CONTEXT = 11

    @classmethod
    def parse(cls, value: Union["OptionId", int, str]) -> "OptionId":
        """
        Resolve ``value`` to an :class:`OptionId`.

        Accepts members, their integer values and case-insensitive names with or
        without underscores (``"data_format"``, ``"DATAFORMAT"``, ``"vcl-nal"``).
        Raises ``ValueError`` for anything else.
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Unknown decoder option {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_")
            if key.startswith("DECODER_OPTION_"):
                key = key[len("DECODER_OPTION_"):]
            if key.isdigit():
                return cls(int(key))
            compact = key.replace("_", "")
            for member in cls:
                if member.name == key or member.name.replace("_", "") == compact:
                    return member
        raise ValueError(f"Unknown decoder option {value!r}")
