"""
Tree flattening for outline-sync.

Projects an outline tree onto the pre-order list of entries the reconciler
compares positions against.
"""

from typing import List, Optional, Sequence

from ..models import FlatEntry, OutlineNode


def flatten_tree(nodes: Sequence[OutlineNode], level: int = 1,
                 parent_uid: Optional[str] = None) -> List[FlatEntry]:
    """
    Flatten nodes and their descendants in document (pre-order) order.

    Args:
        nodes: Sibling nodes to flatten
        level: Depth of ``nodes``; root children are level 1
        parent_uid: Identifier of the node (or page root) holding ``nodes``

    Returns:
        One FlatEntry per node
    """
    entries: List[FlatEntry] = []
    for node in nodes:
        entries.append(FlatEntry(uid=node.uid, text=node.text, level=level, parent_uid=parent_uid))
        entries.extend(flatten_tree(node.children, level + 1, node.uid))
    return entries
