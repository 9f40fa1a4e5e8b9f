"""
Decoding parameter snapshot supplied at initialisation time.

The video property block carries an explicit ``size`` tag so callers built
against an older layout can be detected.  The tag must equal
:data:`VIDEO_PROPERTY_SIZE`, the size of the packed ``<Ii`` layout
(unsigned size followed by the signed bitstream type enum).
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, replace
from typing import Optional

from .codec_def import VideoBitstreamType, VideoFormatType

_VIDEO_PROPERTY_STRUCT = struct.Struct("<Ii")
VIDEO_PROPERTY_SIZE = _VIDEO_PROPERTY_STRUCT.size

UINT32_MAX = 0xFFFFFFFF
UINT8_MAX = 0xFF


class SnapshotError(ValueError):
    """Raised when a decoding parameter snapshot is malformed."""


def _require_int(name: str, value: object) -> int:
    if not isinstance(value, int):
        raise SnapshotError(f"{name} must be an integer, got {type(value).__name__}")
    return int(value)


@dataclass(frozen=True)
class VideoProperty:
    size: int = VIDEO_PROPERTY_SIZE
    bitstream_type: int = VideoBitstreamType.default()

    def pack(self) -> bytes:
        return _VIDEO_PROPERTY_STRUCT.pack(int(self.size), int(self.bitstream_type))

    @classmethod
    def unpack(cls, buffer: bytes) -> "VideoProperty":
        if len(buffer) < VIDEO_PROPERTY_SIZE:
            raise SnapshotError(
                f"video property needs {VIDEO_PROPERTY_SIZE} bytes, got {len(buffer)}"
            )
        size, bitstream_type = _VIDEO_PROPERTY_STRUCT.unpack_from(buffer)
        return cls(size=size, bitstream_type=bitstream_type)

    def effective_bitstream_type(self) -> VideoBitstreamType:
        try:
            return VideoBitstreamType(int(self.bitstream_type))
        except ValueError:
            return VideoBitstreamType.default()


@dataclass(frozen=True)
class DecodingParam:
    """
    Immutable set of parameters handed to :meth:`svcdec.decoder.Decoder.initialize`.

    Enumerated fields are stored as plain integers; values outside the
    enumerations are accepted here and normalised by whoever consumes them.
    """

    output_color_format: int = VideoFormatType.I420
    cpu_load: int = 0
    target_dq_layer: int = UINT8_MAX
    ec_active_idc: int = 0
    video_property: VideoProperty = field(default_factory=VideoProperty)
    reconstructed_file: Optional[str] = None

    def validate(self) -> None:
        if not isinstance(self.video_property, VideoProperty):
            raise SnapshotError("video_property must be a VideoProperty")
        size = _require_int("video_property.size", self.video_property.size)
        if size != VIDEO_PROPERTY_SIZE:
            raise SnapshotError(
                f"video property size tag {size} does not match {VIDEO_PROPERTY_SIZE}"
            )
        _require_int("video_property.bitstream_type", self.video_property.bitstream_type)
        _require_int("output_color_format", self.output_color_format)
        _require_int("ec_active_idc", self.ec_active_idc)

        cpu_load = _require_int("cpu_load", self.cpu_load)
        if not 0 <= cpu_load <= UINT32_MAX:
            raise SnapshotError(f"cpu_load {cpu_load} is out of range")
        target_dq_layer = _require_int("target_dq_layer", self.target_dq_layer)
        if not 0 <= target_dq_layer <= UINT8_MAX:
            raise SnapshotError(f"target_dq_layer {target_dq_layer} is out of range")

        if self.reconstructed_file is not None and not isinstance(self.reconstructed_file, str):
            raise SnapshotError("reconstructed_file must be a string path")

    def copy(self) -> "DecodingParam":
        return replace(self, video_property=replace(self.video_property))

    def to_dict(self) -> dict:
        return {
            "output_color_format": int(self.output_color_format),
            "cpu_load": int(self.cpu_load),
            "target_dq_layer": int(self.target_dq_layer),
            "ec_active_idc": int(self.ec_active_idc),
            "video_property": {
                "size": int(self.video_property.size),
                "bitstream_type": int(self.video_property.bitstream_type),
            },
            "reconstructed_file": self.reconstructed_file,
        }
