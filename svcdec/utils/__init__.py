"""Utility helpers for the decoder package."""

from .logging import configure_logging

__all__ = ["configure_logging"]
