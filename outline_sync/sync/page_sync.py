"""
Page synchronization for outline-sync.

Ties a host, the converters and the document store together for shared pages:
computing the document a page currently corresponds to, applying documents
received from the synchronization layer, and remembering the last document
each page was synchronized with.
"""

import logging
from typing import Optional

from ..config import config
from ..conversion import Reconciler, tree_to_document
from ..hosts import BaseHost
from ..models import Document, ReconcileSummary
from ..store import DocumentStore, get_document_store


class PageSync:
    """
    Synchronizes the pages of one host workspace.
    """

    def __init__(self, host: BaseHost, store: Optional[DocumentStore] = None,
                 workspace: Optional[str] = None):
        """
        Initialize the page synchronizer.

        Args:
            host: Host adapter owning the pages
            store: Document store, defaults to the process-wide store
            workspace: Workspace name used in document keys (defaults to config value)
        """
        self.host = host
        self._store = store
        self.workspace = workspace or config.workspace
        self.reconciler = Reconciler(host)

    @property
    def store(self) -> DocumentStore:
        if self._store is None:
            self._store = get_document_store()
        return self._store

    def doc_key(self, page: str) -> str:
        return DocumentStore.make_key(self.workspace, page)

    def calculate_state(self, page: str) -> Document:
        """Convert the page's current tree into a document."""
        return tree_to_document(self.host.get_tree(page))

    async def apply_state(self, page: str, document: Document,
                          save: bool = False) -> ReconcileSummary:
        """
        Reconcile a page with a document.

        Args:
            page: The page key
            document: The target document
            save: Store the document once the page has converged

        Returns:
            Counts of the mutations issued

        Raises:
            ReconcileError: When a mutation fails; the document is not stored
        """
        summary = await self.reconciler.apply_document(page, document)
        if save:
            self.save_state(page, document)
        return summary

    def load_state(self, page: str) -> Optional[Document]:
        return self.store.load_state(self.doc_key(page))

    def save_state(self, page: str, document: Document) -> None:
        self.store.save_state(self.doc_key(page), document)
        logging.info(f"Saved state of page '{page}'")

    def remove_state(self, page: str) -> bool:
        removed = self.store.remove_state(self.doc_key(page))
        if removed:
            logging.info(f"Removed state of page '{page}'")
        return removed

    def has_local_changes(self, page: str) -> bool:
        """
        Whether the page differs from the last document it was synchronized with.

        Pages without a stored document always count as changed.
        """
        stored = self.load_state(page)
        if stored is None:
            return True
        return stored != self.calculate_state(page)
