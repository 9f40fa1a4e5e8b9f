"""
Pydantic schemas for the decoder control API and the profile file.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, validator

from ..codec_def import VideoBitstreamType, VideoFormatType
from ..params import VIDEO_PROPERTY_SIZE, DecodingParam, VideoProperty


class VideoPropertyModel(BaseModel):
    size: int = VIDEO_PROPERTY_SIZE
    bitstream_type: int = Field(
        default=int(VideoBitstreamType.default()),
        alias="bitstreamType",
    )
    model_config = ConfigDict(populate_by_name=True)

    @validator("bitstream_type", pre=True)
    def _parse_bitstream(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().upper() in VideoBitstreamType.__members__:
            return int(VideoBitstreamType[value.strip().upper()])
        return value


class DecodingParamModel(BaseModel):
    output_color_format: int = Field(default=int(VideoFormatType.I420), alias="outputColorFormat")
    cpu_load: int = Field(default=0, alias="cpuLoad")
    target_dq_layer: int = Field(default=0xFF, alias="targetDqLayer")
    ec_active_idc: int = Field(default=0, alias="ecActiveIdc")
    video_property: VideoPropertyModel = Field(
        default_factory=VideoPropertyModel, alias="videoProperty"
    )
    reconstructed_file: Optional[str] = Field(default=None, alias="reconstructedFile")
    model_config = ConfigDict(populate_by_name=True)

    @validator("output_color_format", pre=True)
    def _parse_format(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().upper() in VideoFormatType.__members__:
            return int(VideoFormatType[value.strip().upper()])
        return value

    def to_param(self) -> DecodingParam:
        return DecodingParam(
            output_color_format=self.output_color_format,
            cpu_load=self.cpu_load,
            target_dq_layer=self.target_dq_layer,
            ec_active_idc=self.ec_active_idc,
            video_property=VideoProperty(
                size=self.video_property.size,
                bitstream_type=self.video_property.bitstream_type,
            ),
            reconstructed_file=self.reconstructed_file,
        )


class InitializeRequest(BaseModel):
    profile: Optional[str] = None
    param: Optional[DecodingParamModel] = None

    @validator("profile", pre=True)
    def _normalise_profile(cls, value: object) -> Optional[str]:
        result = str(value or "").strip()
        return result or None


class OptionWriteRequest(BaseModel):
    value: Any = None


class OptionValueResponse(BaseModel):
    option: str
    status: str
    value: Any = None


class StatusResponse(BaseModel):
    status: str
    code: int


class OptionDescriptorModel(BaseModel):
    name: str
    id: int
    access: str
    type: str


class OptionListResponse(BaseModel):
    options: List[OptionDescriptorModel] = Field(default_factory=list)


class TraceRecordModel(BaseModel):
    level: int
    message: str
    context: Optional[str] = None


class TraceResponse(BaseModel):
    records: List[TraceRecordModel] = Field(default_factory=list)


class ProfilesResponse(BaseModel):
    profiles: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
