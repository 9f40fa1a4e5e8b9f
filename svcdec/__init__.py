"""
svcdec: configuration and lifecycle interface of an SVC/AVC decoder.

The package exposes a stateful :class:`~svcdec.decoder.Decoder` facade that is
initialised with a :class:`~svcdec.params.DecodingParam` snapshot and then
tuned through a fixed set of runtime options (see :mod:`svcdec.options`).
The bitstream decoding pipeline itself lives behind the
:class:`~svcdec.decoder.DecodingPipeline` protocol and is not part of this
package.
"""

from __future__ import annotations

from .codec_def import (
    CANONICAL_OUTPUT_FORMAT,
    ErrorConcealment,
    OptionId,
    StatusCode,
    VideoBitstreamType,
    VideoFormatType,
)
from .decoder import (
    Decoder,
    DecodingPipeline,
    LifecycleState,
    OptionResult,
    create_decoder,
    destroy_decoder,
)
from .params import VIDEO_PROPERTY_SIZE, DecodingParam, VideoProperty
from .trace import NULL_HANDLE, OpaqueHandle, TraceLevel

__all__ = [
    "CANONICAL_OUTPUT_FORMAT",
    "Decoder",
    "DecodingParam",
    "DecodingPipeline",
    "ErrorConcealment",
    "LifecycleState",
    "NULL_HANDLE",
    "OpaqueHandle",
    "OptionId",
    "OptionResult",
    "StatusCode",
    "TraceLevel",
    "VIDEO_PROPERTY_SIZE",
    "VideoBitstreamType",
    "VideoFormatType",
    "VideoProperty",
    "create_decoder",
    "destroy_decoder",
]
