"""Shared helpers."""

from .streams import copy_stream

__all__ = ["copy_stream"]
