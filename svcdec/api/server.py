"""
FastAPI control surface for the decoder service.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Path as PathParam
from fastapi.middleware.cors import CORSMiddleware

from ..codec_def import OptionId, StatusCode
from ..config import ProfileError, ServiceConfig, UnknownProfile, read_profiles_file
from ..options import lookup
from . import schemas
from .state import DecoderService

LOG = logging.getLogger(__name__)

HTTP_STATUS = {
    StatusCode.SUCCESS: 200,
    StatusCode.NOT_INITIALIZED: 409,
    StatusCode.INVALID_ARGUMENT: 422,
    StatusCode.CONFIG_ERROR: 422,
    StatusCode.UNSUPPORTED_OPTION: 404,
    StatusCode.NOT_WRITABLE: 405,
    StatusCode.NOT_READABLE: 405,
}


def _status_body(status: StatusCode) -> dict:
    return {"status": status.name, "code": int(status)}


def _raise_for_status(status: StatusCode) -> None:
    if status is StatusCode.SUCCESS:
        return
    raise HTTPException(status_code=HTTP_STATUS.get(status, 400), detail=_status_body(status))


def _plain(value: object) -> object:
    # IntEnum -> int
    if isinstance(value, int) and not isinstance(value, bool):
        return int(value)
    return value


def _option_label(name: str) -> str:
    try:
        return OptionId.parse(name).name
    except ValueError:
        return name


def create_app(
    *,
    service: Optional[DecoderService] = None,
    config: Optional[ServiceConfig] = None,
    lifespan: Optional[Callable[..., object]] = None,
) -> FastAPI:
    service_config = config or ServiceConfig()
    decoder_service = service or DecoderService(profiles_path=service_config.profiles_path)

    app = FastAPI(title="svcdec Decoder API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.decoder_service = decoder_service

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"status": "ok", "profile": decoder_service.active_profile}

    @app.get("/profiles", response_model=schemas.ProfilesResponse)
    async def list_profiles() -> schemas.ProfilesResponse:
        try:
            profiles = read_profiles_file(decoder_service.profiles_path)
        except ProfileError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return schemas.ProfilesResponse(profiles=profiles)

    @app.get("/decoder")
    async def describe_decoder() -> dict:
        return decoder_service.snapshot()

    @app.post("/decoder/initialize", response_model=schemas.StatusResponse)
    async def initialize(payload: schemas.InitializeRequest) -> dict:
        if payload.profile and payload.param is not None:
            raise HTTPException(status_code=400, detail="Provide either profile or param, not both")
        if payload.profile:
            try:
                status = decoder_service.initialize_profile(payload.profile)
            except UnknownProfile as exc:
                raise HTTPException(status_code=404, detail=str(exc)) from exc
            except ProfileError as exc:
                raise HTTPException(status_code=422, detail=str(exc)) from exc
        else:
            model = payload.param or schemas.DecodingParamModel()
            status = decoder_service.initialize(model.to_param())
        _raise_for_status(status)
        return _status_body(status)

    @app.post("/decoder/uninitialize", response_model=schemas.StatusResponse)
    async def uninitialize() -> dict:
        return _status_body(decoder_service.uninitialize())

    @app.get("/decoder/options", response_model=schemas.OptionListResponse)
    async def list_options() -> dict:
        return {"options": decoder_service.options()}

    @app.get("/decoder/options/{name}", response_model=schemas.OptionValueResponse)
    async def read_option(name: str = PathParam(..., min_length=1)) -> dict:
        result = decoder_service.get_option(name)
        _raise_for_status(result.status)
        return {
            "option": _option_label(name),
            "status": result.status.name,
            "value": _plain(result.value),
        }

    @app.put("/decoder/options/{name}", response_model=schemas.OptionValueResponse)
    async def write_option(
        payload: schemas.OptionWriteRequest,
        name: str = PathParam(..., min_length=1),
    ) -> dict:
        status = decoder_service.set_option(name, payload.value)
        _raise_for_status(status)
        LOG.debug("Option %s written over HTTP.", name)
        value = payload.value
        if lookup(name).readable:
            value = decoder_service.get_option(name).value
        return {"option": _option_label(name), "status": status.name, "value": _plain(value)}

    @app.get("/decoder/trace", response_model=schemas.TraceResponse)
    async def read_trace() -> dict:
        return {"records": decoder_service.trace_records()}

    return app
