"""Tests covering the initialise / uninitialise state machine of the decoder."""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any, List, Tuple

import pytest

from svcdec import (
    CANONICAL_OUTPUT_FORMAT,
    DecodingParam,
    LifecycleState,
    OptionId,
    StatusCode,
    VideoProperty,
    create_decoder,
    destroy_decoder,
)


class FakePipeline:
    def __init__(self) -> None:
        self.events: List[Tuple[str, Any]] = []

    def configure(self, param: DecodingParam) -> None:
        self.events.append(("configure", param))

    def option_changed(self, option: OptionId, value: Any) -> None:
        self.events.append(("option", (option, value)))

    def reset(self) -> None:
        self.events.append(("reset", None))


class FailingPipeline(FakePipeline):
    def __init__(self, fail_on: str) -> None:
        super().__init__()
        self.fail_on = fail_on

    def configure(self, param: DecodingParam) -> None:
        if self.fail_on == "configure":
            raise RuntimeError("backend down")
        super().configure(param)

    def option_changed(self, option: OptionId, value: Any) -> None:
        if self.fail_on == "option":
            raise RuntimeError("backend down")
        super().option_changed(option, value)

    def reset(self) -> None:
        if self.fail_on == "reset":
            raise RuntimeError("backend down")
        super().reset()


def test_init_uninit_scenario() -> None:
    decoder = create_decoder()

    decoder.uninitialize()
    result = decoder.get_option(OptionId.DATAFORMAT)
    assert result.status is StatusCode.NOT_INITIALIZED
    assert result.value is None

    assert decoder.initialize(DecodingParam(output_color_format=20)) is StatusCode.SUCCESS
    result = decoder.get_option(OptionId.DATAFORMAT)
    assert result.status is StatusCode.SUCCESS
    assert result.value == CANONICAL_OUTPUT_FORMAT

    assert decoder.uninitialize() is StatusCode.SUCCESS
    output = 21
    result = decoder.get_option(OptionId.DATAFORMAT)
    assert result.status is StatusCode.NOT_INITIALIZED
    assert result.value is None
    assert output == 21


@pytest.mark.parametrize("option", list(OptionId))
def test_every_option_requires_initialisation(option: OptionId) -> None:
    decoder = create_decoder()

    assert decoder.set_option(option, 1) is StatusCode.NOT_INITIALIZED
    assert decoder.set_option(option, None) is StatusCode.NOT_INITIALIZED
    result = decoder.get_option(option)
    assert result.status is StatusCode.NOT_INITIALIZED
    assert result.value is None


def test_unknown_option_before_initialise_reports_not_initialized() -> None:
    decoder = create_decoder()
    assert decoder.set_option("bogus", 1) is StatusCode.NOT_INITIALIZED


@pytest.mark.parametrize("requested", [0, 1, 20, 23, 26, 99, -5])
def test_initialised_format_is_canonical(requested: int) -> None:
    decoder = create_decoder()
    assert decoder.initialize(DecodingParam(output_color_format=requested)) is StatusCode.SUCCESS

    first = decoder.get_option(OptionId.DATAFORMAT)
    second = decoder.get_option(OptionId.DATAFORMAT)
    assert first.value == CANONICAL_OUTPUT_FORMAT
    assert second == first


def test_uninitialize_is_idempotent() -> None:
    decoder = create_decoder()
    assert decoder.uninitialize() is StatusCode.SUCCESS
    assert decoder.uninitialize() is StatusCode.SUCCESS

    decoder.initialize(DecodingParam())
    assert decoder.uninitialize() is StatusCode.SUCCESS
    assert decoder.uninitialize() is StatusCode.SUCCESS
    assert decoder.state is LifecycleState.UNINITIALIZED
    assert decoder.param is None


def test_initialize_rejects_missing_param() -> None:
    decoder = create_decoder()
    assert decoder.initialize(None) is StatusCode.INVALID_ARGUMENT
    assert decoder.is_initialized is False


def test_initialize_rejects_wrong_size_tag() -> None:
    decoder = create_decoder()
    param = DecodingParam(video_property=VideoProperty(size=12))

    assert decoder.initialize(param) is StatusCode.CONFIG_ERROR
    assert decoder.state is LifecycleState.UNINITIALIZED
    assert decoder.get_option(OptionId.DATAFORMAT).status is StatusCode.NOT_INITIALIZED


def test_initialize_rejects_foreign_objects() -> None:
    decoder = create_decoder()
    assert decoder.initialize({"output_color_format": 23}) is StatusCode.CONFIG_ERROR  # type: ignore[arg-type]


def test_failed_reinitialise_keeps_previous_configuration() -> None:
    decoder = create_decoder()
    good = DecodingParam(cpu_load=42)
    decoder.initialize(good)
    decoder.set_option(OptionId.END_OF_STREAM, True)

    bad = replace(good, target_dq_layer=300)
    assert decoder.initialize(bad) is StatusCode.CONFIG_ERROR

    assert decoder.is_initialized
    assert decoder.param == good
    assert decoder.get_option(OptionId.END_OF_STREAM).value is True


def test_reinitialise_resets_options_but_keeps_trace_sink() -> None:
    received: List[str] = []
    decoder = create_decoder()
    decoder.initialize(DecodingParam())
    decoder.set_option(OptionId.TRACE_CALLBACK, lambda ctx, level, msg: received.append(msg))
    decoder.set_option(OptionId.END_OF_STREAM, True)

    assert decoder.initialize(DecodingParam(cpu_load=1)) is StatusCode.SUCCESS
    assert decoder.get_option(OptionId.END_OF_STREAM).value is False

    decoder.set_option(OptionId.FRAME_NUM, 3)
    assert any("FRAME_NUM" in message for message in received)


def test_uninitialize_discards_trace_sink() -> None:
    received: List[str] = []
    decoder = create_decoder()
    decoder.initialize(DecodingParam())
    decoder.set_option(OptionId.TRACE_CALLBACK, lambda ctx, level, msg: received.append(msg))
    decoder.uninitialize()

    decoder.initialize(DecodingParam())
    decoder.set_option(OptionId.FRAME_NUM, 3)
    assert received == []


def test_stored_param_is_private_copy() -> None:
    decoder = create_decoder()
    param = DecodingParam(cpu_load=10, reconstructed_file="/tmp/rec.yuv")
    decoder.initialize(param)

    assert decoder.param == param
    assert decoder.param is not param
    assert decoder.param.video_property is not param.video_property


def test_pipeline_receives_lifecycle_and_option_events() -> None:
    pipeline = FakePipeline()
    decoder = create_decoder(pipeline)

    decoder.initialize(DecodingParam())
    decoder.set_option(OptionId.END_OF_STREAM, 1)
    decoder.set_option(OptionId.TEMPORAL_ID, 1)
    decoder.set_option(OptionId.DATAFORMAT, 20)
    decoder.uninitialize()

    kinds = [kind for kind, _ in pipeline.events]
    assert kinds == ["configure", "option", "option", "reset"]
    assert pipeline.events[1][1] == (OptionId.END_OF_STREAM, True)
    assert pipeline.events[2][1] == (OptionId.DATAFORMAT, CANONICAL_OUTPUT_FORMAT)


def test_destroyed_decoder_cannot_be_reused() -> None:
    pipeline = FakePipeline()
    decoder = create_decoder(pipeline)
    decoder.initialize(DecodingParam())

    destroy_decoder(decoder)

    assert pipeline.events[-1] == ("reset", None)
    assert decoder.get_option(OptionId.DATAFORMAT).status is StatusCode.NOT_INITIALIZED
    assert decoder.initialize(DecodingParam()) is StatusCode.INVALID_ARGUMENT
    destroy_decoder(None)


def test_publish_stream_status() -> None:
    decoder = create_decoder()
    assert decoder.publish_stream_status(frame_num=1) is StatusCode.NOT_INITIALIZED

    decoder.initialize(DecodingParam())
    assert decoder.get_option(OptionId.FRAME_NUM).value == -1

    assert decoder.publish_stream_status(temporal_id=2, frame_num=7) is StatusCode.SUCCESS
    assert decoder.get_option(OptionId.TEMPORAL_ID).value == 2
    assert decoder.get_option(OptionId.FRAME_NUM).value == 7

    status = decoder.publish_stream_status(idr_pic_id=4, unknown=1)
    assert status is StatusCode.INVALID_ARGUMENT
    assert decoder.get_option(OptionId.IDR_PIC_ID).value == -1


def test_describe_is_json_serialisable() -> None:
    decoder = create_decoder()
    assert decoder.describe()["state"] == "uninitialized"

    decoder.initialize(DecodingParam(ec_active_idc=2))
    snapshot = decoder.describe()

    json.dumps(snapshot, sort_keys=True)
    assert snapshot["state"] == "initialized"
    assert snapshot["options"]["error_con_idc"] == 2


def test_pipeline_configure_failure_leaves_decoder_uninitialised() -> None:
    decoder = create_decoder(FailingPipeline("configure"))

    assert decoder.initialize(DecodingParam()) is StatusCode.CONFIG_ERROR
    assert decoder.state is LifecycleState.UNINITIALIZED
    assert decoder.param is None
    assert decoder.get_option(OptionId.DATAFORMAT).status is StatusCode.NOT_INITIALIZED


def test_pipeline_configure_failure_keeps_previous_configuration() -> None:
    pipeline = FailingPipeline("none")
    decoder = create_decoder(pipeline)
    first = DecodingParam(cpu_load=5)
    decoder.initialize(first)
    decoder.set_option(OptionId.VCL_NAL, True)

    pipeline.fail_on = "configure"
    assert decoder.initialize(DecodingParam(cpu_load=9)) is StatusCode.CONFIG_ERROR

    assert decoder.param == first
    assert decoder.get_option(OptionId.VCL_NAL).value is True


def test_pipeline_option_failure_is_not_applied() -> None:
    pipeline = FailingPipeline("none")
    decoder = create_decoder(pipeline)
    decoder.initialize(DecodingParam())

    pipeline.fail_on = "option"
    assert decoder.set_option(OptionId.END_OF_STREAM, True) is StatusCode.INVALID_ARGUMENT

    result = decoder.get_option(OptionId.END_OF_STREAM)
    assert result.status is StatusCode.SUCCESS
    assert result.value is False


def test_pipeline_reset_failure_still_uninitialises() -> None:
    decoder = create_decoder(FailingPipeline("reset"))
    decoder.initialize(DecodingParam())

    assert decoder.uninitialize() is StatusCode.SUCCESS
    assert decoder.state is LifecycleState.UNINITIALIZED
