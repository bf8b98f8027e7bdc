"""
In-memory host for outline-sync.

Keeps pages as OutlineTree objects and applies mutations directly to them.
Used as the reference host in tests, as the backing store of file-based
hosts, and by the command line tool for JSON tree files.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from ..errors import HostError
from ..models import OutlineNode, OutlineTree, ViewType
from .base import BaseHost

Container = Union[OutlineNode, OutlineTree]


class InMemoryHost(BaseHost):
    """
    Host whose pages live in memory.

    Every mutation call is recorded in ``calls`` as a tuple, in the order it
    was received.
    """

    def __init__(self, pages: Optional[Dict[str, OutlineTree]] = None):
        self.pages: Dict[str, OutlineTree] = dict(pages or {})
        self.calls: List[Tuple[Any, ...]] = []
        self._containers: Dict[str, Container] = {}
        self._parents: Dict[str, Container] = {}
        self._deleted: Set[str] = set()
        self._reindex()

    def _reindex(self) -> None:
        """Rebuild the uid lookup tables from the page trees."""
        self._containers = {}
        self._parents = {}
        for tree in self.pages.values():
            self._containers[tree.uid] = tree
            self._index_children(tree)

    def _index_children(self, container: Container) -> None:
        for child in container.children:
            self._containers[child.uid] = child
            self._parents[child.uid] = container
            self._index_children(child)

    def _forget_subtree(self, node: OutlineNode) -> None:
        self._containers.pop(node.uid, None)
        self._parents.pop(node.uid, None)
        self._deleted.add(node.uid)
        for child in node.children:
            self._forget_subtree(child)

    def _detach(self, node: OutlineNode) -> None:
        siblings = self._parents[node.uid].children
        siblings[:] = [c for c in siblings if c is not node]

    def _node(self, uid: str) -> OutlineNode:
        node = self._containers.get(uid)
        if not isinstance(node, OutlineNode):
            raise HostError(f"Unknown node: {uid}")
        return node

    def _container(self, uid: str) -> Container:
        container = self._containers.get(uid)
        if container is None:
            raise HostError(f"Unknown parent: {uid}")
        return container

    def add_page(self, page: str, children: Optional[List[OutlineNode]] = None,
                 view_type: Optional[ViewType] = None, uid: Optional[str] = None) -> OutlineTree:
        """
        Add (or replace) a page.

        Args:
            page: The page key
            children: Top-level nodes of the page
            view_type: View type set on the page root
            uid: Identifier of the page root, defaults to the page key

        Returns:
            The stored page tree
        """
        tree = OutlineTree(uid=uid or page, view_type=view_type, children=children or [])
        self.pages[page] = tree
        self._reindex()
        return tree

    def get_tree(self, page: str) -> OutlineTree:
        tree = self.pages.get(page)
        if tree is None:
            raise HostError(f"Page not found: {page}")
        return tree.model_copy(deep=True)

    async def update_text(self, uid: str, text: str) -> None:
        self.calls.append(("update_text", uid, text))
        self._node(uid).text = text

    async def move_node(self, uid: str, parent_uid: str, order: int) -> None:
        self.calls.append(("move_node", uid, parent_uid, order))
        node = self._node(uid)
        parent = self._container(parent_uid)

        ancestor: Optional[Container] = parent
        while ancestor is not None:
            if ancestor is node:
                raise HostError(f"Cannot move {uid} under its own subtree")
            ancestor = self._parents.get(ancestor.uid) if isinstance(ancestor, OutlineNode) else None

        self._detach(node)
        position = max(0, min(order, len(parent.children)))
        parent.children.insert(position, node)
        self._parents[uid] = parent

    async def create_node(self, parent_uid: str, order: int, text: str) -> str:
        self.calls.append(("create_node", parent_uid, order, text))
        parent = self._container(parent_uid)
        node = OutlineNode(uid=str(uuid.uuid4()), text=text)
        position = max(0, min(order, len(parent.children)))
        parent.children.insert(position, node)
        self._containers[node.uid] = node
        self._parents[node.uid] = parent
        return node.uid

    async def delete_node(self, uid: str) -> None:
        self.calls.append(("delete_node", uid))
        if uid in self._deleted:
            logging.debug(f"Node {uid} was already removed with its parent")
            return
        node = self._node(uid)
        self._detach(node)
        self._forget_subtree(node)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages": {
                page: tree.model_dump(mode="json", exclude_none=True)
                for page, tree in self.pages.items()
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryHost":
        pages = {
            page: OutlineTree.model_validate(tree)
            for page, tree in (data.get("pages") or {}).items()
        }
        return cls(pages)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryHost":
        """
        Load pages from a JSON file of the form ``{"pages": {name: tree}}``.
        """
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        host = cls.from_dict(data)
        logging.info(f"Loaded {len(host.pages)} pages from {path}")
        return host

    def to_json_file(self, path: Union[str, Path]) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        logging.info(f"Saved {len(self.pages)} pages to {path}")
