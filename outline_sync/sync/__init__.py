"""Synchronization of shared pages."""

from .page_sync import PageSync

__all__ = ["PageSync"]
