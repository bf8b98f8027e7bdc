"""
Base host interface for outline-sync.

This module defines the abstract interface every host outliner adapter must
implement: one synchronous read and four asynchronous mutation primitives.
"""

from abc import ABC, abstractmethod

from ..models import OutlineTree


class BaseHost(ABC):
    """
    Abstract base class for host adapters.

    Each adapter exposes a host's native outline (a Logseq export, an
    in-memory tree, ...) through the same small set of primitives. Mutations
    raise ``HostError`` on failure.
    """

    @abstractmethod
    def get_tree(self, page: str) -> OutlineTree:
        """
        Read the current outline of a page.

        Args:
            page: The page key

        Returns:
            Snapshot of the page's tree
        """
        pass

    @abstractmethod
    async def update_text(self, uid: str, text: str) -> None:
        """Replace the raw text of a node."""
        pass

    @abstractmethod
    async def move_node(self, uid: str, parent_uid: str, order: int) -> None:
        """
        Move a node (with its subtree) under a new parent.

        Args:
            uid: Node to move
            parent_uid: New parent, a node or a page root
            order: Position among the new parent's children
        """
        pass

    @abstractmethod
    async def create_node(self, parent_uid: str, order: int, text: str) -> str:
        """
        Create a leaf node.

        Returns:
            The identifier assigned by the host
        """
        pass

    @abstractmethod
    async def delete_node(self, uid: str) -> None:
        """Delete a node together with its subtree."""
        pass
