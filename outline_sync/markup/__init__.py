"""Inline markup codec."""

from .codec import parse, serialize

__all__ = ["parse", "serialize"]
