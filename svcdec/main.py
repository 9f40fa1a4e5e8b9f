"""
Decoder control service entrypoint.

Resolves configuration, initialises logging, optionally initialises the decoder
from a profile and serves the control API with uvicorn.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from .api.server import create_app
from .api.state import DecoderService
from .codec_def import StatusCode
from .config import ProfileError, ServiceConfig
from .utils.logging import configure_logging

LOG = logging.getLogger(__name__)


def build_service(config: ServiceConfig) -> DecoderService:
    service = DecoderService(profiles_path=config.profiles_path)
    if not config.profile:
        return service
    try:
        status = service.initialize_profile(config.profile)
    except ProfileError:
        LOG.exception("Failed to load profile '%s'; decoder left uninitialised.", config.profile)
        return service
    if status is not StatusCode.SUCCESS:
        LOG.warning("Profile '%s' was rejected with %s.", config.profile, status.name)
    return service


def serve(config: ServiceConfig) -> None:
    """
    Run the control API until interrupted.
    """

    import uvicorn

    configure_logging(config.log_level)
    service = build_service(config)

    @asynccontextmanager
    async def app_lifespan(_app) -> AsyncIterator[None]:
        LOG.info("Decoder service starting on %s:%s", config.host, config.port)
        try:
            yield
        finally:
            service.close()

    app = create_app(service=service, config=config, lifespan=app_lifespan)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None, log_level="info")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    defaults = ServiceConfig.from_env()
    parser = argparse.ArgumentParser(description="svcdec decoder control service")
    parser.add_argument("--profile", default=defaults.profile, help="decoding profile to initialise with")
    parser.add_argument("--profiles", default=str(defaults.profiles_path), help="path to profiles.yaml")
    parser.add_argument("--host", default=defaults.host, help="bind host for the API server")
    parser.add_argument("--port", type=int, default=defaults.port, help="bind port for the API server")
    parser.add_argument("--log-level", default=defaults.log_level, help="root logging level")
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> ServiceConfig:
    return ServiceConfig(
        profile=args.profile,
        host=args.host,
        port=args.port,
        log_level=str(args.log_level).upper(),
        profiles_path=Path(args.profiles).expanduser(),
    )


def run(argv: Optional[list[str]] = None) -> None:
    config = config_from_args(parse_args(argv))
    try:
        serve(config)
    except KeyboardInterrupt:
        LOG.info("Decoder service interrupted by user.")


if __name__ == "__main__":
    run()
