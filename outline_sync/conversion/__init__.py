"""Conversion between outline trees and flat documents."""

from .flattener import flatten_tree
from .forward import to_document, tree_to_document
from .reconciler import (
    MutationQueue,
    Reconciler,
    build_expected_blocks,
    locate,
    render_expected_blocks,
)

__all__ = [
    "flatten_tree",
    "to_document",
    "tree_to_document",
    "MutationQueue",
    "Reconciler",
    "build_expected_blocks",
    "locate",
    "render_expected_blocks"
]
