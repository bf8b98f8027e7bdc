"""Data models for outline-sync."""

from .outline import OutlineNode, OutlineTree, FlatEntry, ViewType
from .document import Annotation, AnnotationType, Document, ExpectedBlock, ReconcileSummary

__all__ = [
    "OutlineNode",
    "OutlineTree",
    "FlatEntry",
    "ViewType",
    "Annotation",
    "AnnotationType",
    "Document",
    "ExpectedBlock",
    "ReconcileSummary"
]
