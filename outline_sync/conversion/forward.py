"""
Forward conversion for outline-sync.

Turns an outline tree into a flat document: the parsed text of every node is
appended in pre-order, each node gets exactly one ``block`` annotation over
its own text, and the node's inline annotations are moved into document
coordinates.
"""

import logging
from typing import List, Optional, Sequence

from ..config import config
from ..markup import parse
from ..models import Annotation, AnnotationType, Document, OutlineNode, OutlineTree, ViewType


def _collect(nodes: Sequence[OutlineNode], level: int, offset: int,
             view_type: Optional[ViewType], parts: List[str],
             annotations: List[Annotation]) -> int:
    """Append the nodes' content and annotations, returning the new offset."""
    for node in nodes:
        content, local_annotations = parse(node.text)
        end = offset + len(content)

        annotations.append(Annotation(
            start=offset,
            end=end,
            type=AnnotationType.BLOCK,
            attributes={
                "level": level,
                "viewType": view_type.value if view_type else None,
            },
        ))
        annotations.extend(a.shifted(offset) for a in local_annotations)
        parts.append(content)

        # Children follow the parent's own text; they are not nested in its span.
        offset = _collect(
            node.children,
            level + 1,
            end,
            node.view_type or view_type,
            parts,
            annotations,
        )
    return offset


def to_document(nodes: Sequence[OutlineNode], level: int = 1,
                view_type: Optional[ViewType] = None) -> Document:
    """
    Convert a list of sibling nodes (and their subtrees) into a document.

    Args:
        nodes: Nodes at ``level``
        level: Depth of ``nodes``
        view_type: View type inherited from the nodes' parent

    Returns:
        Document whose block annotations partition its content
    """
    parts: List[str] = []
    annotations: List[Annotation] = []
    _collect(nodes, level, 0, view_type, parts, annotations)
    return Document(content="".join(parts), annotations=annotations)


def tree_to_document(tree: OutlineTree) -> Document:
    """Convert a page snapshot, falling back to the configured default view type."""
    view_type = tree.view_type or ViewType(config.default_view_type)
    document = to_document(tree.children, view_type=view_type)
    logging.debug(
        f"Converted page {tree.uid} into {len(document.blocks)} blocks "
        f"({len(document.content)} characters)"
    )
    return document
