"""Walk a decoder through its lifecycle and print every option.

Useful to eyeball the access policy and normalisation rules of the option
registry without starting the HTTP service.

Examples
--------
Initialise from the bundled default profile::

    python scripts/demo_decoder_options.py

Use another profile and show trace output down to DEBUG::

    python scripts/demo_decoder_options.py --profile avc_concealment --trace-level 8
"""

from __future__ import annotations

import argparse
import sys
from typing import Iterable

from svcdec import OpaqueHandle, OptionId, StatusCode, create_decoder, destroy_decoder
from svcdec.config import ProfileError, get_profile
from svcdec.utils.logging import configure_logging


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="svcdec option demo")
    parser.add_argument("--profile", default="default", help="Decoding profile to initialise with.")
    parser.add_argument("--profiles", default=None, help="Alternative profiles.yaml path.")
    parser.add_argument(
        "--trace-level",
        type=int,
        default=4,
        help="Trace level bitmask threshold (0 quiet .. 16 detail).",
    )
    return parser.parse_args(argv)


def _print_trace(context, level: int, message: str) -> None:
    print(f"  [trace {context} L{level}] {message}")


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging()

    try:
        param = get_profile(args.profile, args.profiles)
    except ProfileError as exc:
        print(exc, file=sys.stderr)
        return 2

    decoder = create_decoder()
    try:
        before = decoder.get_option(OptionId.DATAFORMAT)
        print(f"before initialize: DATAFORMAT -> {before.status.name}")

        status = decoder.initialize(param)
        print(f"initialize({args.profile}) -> {status.name}")
        if status is not StatusCode.SUCCESS:
            return 1

        decoder.set_option(OptionId.TRACE_CALLBACK_CONTEXT, OpaqueHandle(args.profile))
        decoder.set_option(OptionId.TRACE_CALLBACK, _print_trace)
        decoder.set_option(OptionId.TRACE_LEVEL, args.trace_level)

        for option in OptionId:
            result = decoder.get_option(option)
            print(f"{option.name:<24} {result.status.name:<16} {result.value!r}")

        print(f"uninitialize -> {decoder.uninitialize().name}")
    finally:
        destroy_decoder(decoder)

    return 0


if __name__ == "__main__":
    sys.exit(main())
