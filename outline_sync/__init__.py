"""
outline-sync: Keeps outliner trees and flat annotated documents in step.

Flattens outline trees with inline markup into offset-annotated documents and
reconciles trees back toward documents received from a sync layer.
"""

__version__ = "0.1.0"
__author__ = "outline-sync Project"

# Import main components
from .models import OutlineNode, OutlineTree, FlatEntry, Annotation, Document
from .markup import parse, serialize
from .conversion import flatten_tree, to_document, tree_to_document, Reconciler
from .hosts import BaseHost, InMemoryHost, LogseqEDNHost
from .store import DocumentStore, get_document_store
from .sync import PageSync
from .errors import HostError, ReconcileError

__all__ = [
    "OutlineNode",
    "OutlineTree",
    "FlatEntry",
    "Annotation",
    "Document",
    "parse",
    "serialize",
    "flatten_tree",
    "to_document",
    "tree_to_document",
    "Reconciler",
    "BaseHost",
    "InMemoryHost",
    "LogseqEDNHost",
    "DocumentStore",
    "get_document_store",
    "PageSync",
    "HostError",
    "ReconcileError"
]
