"""
Decoder lifecycle facade.

A :class:`Decoder` starts out uninitialised.  :meth:`Decoder.initialize` stores
a private copy of a :class:`~svcdec.params.DecodingParam` and enables the option
interface; :meth:`Decoder.uninitialize` discards everything again.  Every
public call reports its outcome as a :class:`~svcdec.codec_def.StatusCode`;
failures never raise and never leave a partially applied change behind.

The facade performs no locking.  Callers sharing a decoder between threads
must serialise access themselves (see :class:`svcdec.api.state.DecoderService`).
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, NamedTuple, Optional, Protocol

from . import options as registry
from .codec_def import OptionId, StatusCode
from .options import OptionError, OptionKey, OptionState
from .params import DecodingParam, SnapshotError
from .trace import TraceLevel, TraceSink

LOG = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


class OptionResult(NamedTuple):
    """Outcome of :meth:`Decoder.get_option`; ``value`` is ``None`` unless successful."""

    status: StatusCode
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.status is StatusCode.SUCCESS


class DecodingPipeline(Protocol):
    """The decoding backend configured through the facade."""

    def configure(self, param: DecodingParam) -> None:
        ...

    def option_changed(self, option: OptionId, value: Any) -> None:
        ...

    def reset(self) -> None:
        ...


class Decoder:
    def __init__(self, pipeline: Optional[DecodingPipeline] = None) -> None:
        self._pipeline = pipeline
        self._state = LifecycleState.UNINITIALIZED
        self._param: Optional[DecodingParam] = None
        self._options: Optional[OptionState] = None
        self._destroyed = False

    # ------------------------------------------------------------------ helpers

    def _trace(self, level: TraceLevel, message: str) -> None:
        if self._options is not None:
            self._options.trace.emit(level, message)
        else:
            LOG.debug(message)

    def _reject(self, status: StatusCode, message: str) -> StatusCode:
        self._trace(TraceLevel.WARNING, message)
        return status

    # ------------------------------------------------------------------ lifecycle

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is LifecycleState.INITIALIZED

    @property
    def param(self) -> Optional[DecodingParam]:
        return self._param

    def initialize(self, param: Optional[DecodingParam]) -> StatusCode:
        """
        Apply ``param`` and move to :attr:`LifecycleState.INITIALIZED`.

        Calling this on an initialised decoder resets it with the new snapshot
        while keeping the installed trace sink.  A malformed snapshot yields
        :attr:`StatusCode.CONFIG_ERROR` and leaves the current state untouched.
        """

        if self._destroyed:
            return self._reject(StatusCode.INVALID_ARGUMENT, "initialize on a destroyed decoder")
        if param is None:
            return self._reject(StatusCode.INVALID_ARGUMENT, "initialize requires a decoding param")
        if not isinstance(param, DecodingParam):
            return self._reject(
                StatusCode.CONFIG_ERROR,
                f"initialize expects DecodingParam, got {type(param).__name__}",
            )
        try:
            param.validate()
        except SnapshotError as exc:
            return self._reject(StatusCode.CONFIG_ERROR, f"invalid decoding param: {exc}")

        stored = param.copy()
        if self._pipeline is not None:
            try:
                self._pipeline.configure(stored)
            except Exception as exc:
                LOG.exception("Decoding pipeline rejected the decoding param.")
                return self._reject(StatusCode.CONFIG_ERROR, f"pipeline configure failed: {exc}")

        trace: Optional[TraceSink] = None
        if self._options is not None:
            LOG.info("Re-initialising decoder with a new decoding param.")
            trace = self._options.trace

        self._param = stored
        self._options = OptionState.from_param(stored, trace=trace)
        self._state = LifecycleState.INITIALIZED

        bitstream = stored.video_property.effective_bitstream_type()
        if bitstream != stored.video_property.bitstream_type:
            self._trace(
                TraceLevel.WARNING,
                f"unknown bitstream type {stored.video_property.bitstream_type}, "
                f"using {bitstream.name}",
            )
        LOG.info(
            "Decoder initialised (format=%s, ec=%s, bitstream=%s).",
            int(stored.output_color_format),
            int(self._options.error_con_idc),
            bitstream.name,
        )
        return StatusCode.SUCCESS

    def _teardown(self) -> None:
        self._param = None
        self._options = None
        self._state = LifecycleState.UNINITIALIZED
        if self._pipeline is not None:
            try:
                self._pipeline.reset()
            except Exception:
                LOG.exception("Decoding pipeline failed to reset.")

    def uninitialize(self) -> StatusCode:
        if self._state is LifecycleState.INITIALIZED:
            self._teardown()
            LOG.info("Decoder uninitialised.")
        return StatusCode.SUCCESS

    def destroy(self) -> None:
        self.uninitialize()
        self._pipeline = None
        self._destroyed = True

    # ------------------------------------------------------------------ options

    def set_option(self, option: OptionKey, value: Any) -> StatusCode:
        if self._options is None:
            return self._reject(StatusCode.NOT_INITIALIZED, f"set_option({option!r}) before initialize")
        try:
            descriptor, effective = registry.prepare_write(option, value)
        except OptionError as exc:
            return self._reject(exc.status, str(exc))

        option_id = descriptor.option
        if self._pipeline is not None:
            try:
                self._pipeline.option_changed(option_id, effective)
            except Exception as exc:
                LOG.exception("Decoding pipeline rejected %s.", option_id.name)
                return self._reject(
                    StatusCode.INVALID_ARGUMENT, f"pipeline refused {option_id.name}: {exc}"
                )

        descriptor.store(self._options, effective)
        self._trace(TraceLevel.DEBUG, f"{option_id.name} set to {effective!r}")
        return StatusCode.SUCCESS

    def get_option(self, option: OptionKey) -> OptionResult:
        if self._options is None:
            status = self._reject(
                StatusCode.NOT_INITIALIZED, f"get_option({option!r}) before initialize"
            )
            return OptionResult(status)
        try:
            value = registry.get_option(self._options, option)
        except OptionError as exc:
            return OptionResult(self._reject(exc.status, str(exc)))
        return OptionResult(StatusCode.SUCCESS, value)

    def publish_stream_status(self, **fields: int) -> StatusCode:
        """
        Record the read-only stream values reported by the decoding pipeline.

        Accepted keywords: ``temporal_id``, ``frame_num``, ``idr_pic_id`` and
        ``ltr_marked_frame_num``.
        """

        if self._options is None:
            return self._reject(StatusCode.NOT_INITIALIZED, "stream status before initialize")
        stream = self._options.stream
        for name, value in fields.items():
            if not hasattr(stream, name) or not isinstance(value, int):
                return self._reject(
                    StatusCode.INVALID_ARGUMENT, f"invalid stream status {name}={value!r}"
                )
        for name, value in fields.items():
            setattr(stream, name, int(value))
        return StatusCode.SUCCESS

    def describe(self) -> dict:
        return {
            "state": self._state.value,
            "param": self._param.to_dict() if self._param is not None else None,
            "options": self._options.to_dict() if self._options is not None else None,
        }


def create_decoder(pipeline: Optional[DecodingPipeline] = None) -> Decoder:
    return Decoder(pipeline=pipeline)


def destroy_decoder(decoder: Optional[Decoder]) -> None:
    if decoder is not None:
        decoder.destroy()
