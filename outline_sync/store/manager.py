"""
Document store for outline-sync.

This module keeps the last synchronized document of every shared page in
DuckDB, so a later pass can tell what the page looked like when it was last
in sync.
"""

import duckdb
import json
import logging
import threading
from datetime import datetime
from typing import List, Optional

from ..config import config
from ..models import Document


class DocumentStore:
    """
    Manages the DuckDB database holding stored documents.

    Documents are keyed by ``<workspace>/<page>``.
    """

    def __init__(self, db_path: str = "outline_sync.db"):
        """
        Initialize the document store.

        Args:
            db_path: Path to the DuckDB database file
        """
        self.db_path = db_path
        self.connection = None

    def connect(self):
        """Establish connection to the database and create the schema."""
        self.connection = duckdb.connect(self.db_path)
        self.initialize_database()

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def initialize_database(self):
        """
        Create the documents table if it doesn't exist.
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        self.connection.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                doc_key VARCHAR PRIMARY KEY,
                content TEXT NOT NULL,
                annotations TEXT NOT NULL,
                saved_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    def make_key(workspace: str, page: str) -> str:
        return f"{workspace}/{page}"

    def save_state(self, doc_key: str, document: Document) -> None:
        """
        Store a document, replacing any previous one under the same key.

        Args:
            doc_key: The document key
            document: The document to store
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        annotations = json.dumps(
            [a.model_dump(mode="json") for a in document.annotations],
            ensure_ascii=False,
        )
        self.connection.execute("DELETE FROM documents WHERE doc_key = ?", [doc_key])
        self.connection.execute("""
            INSERT INTO documents (doc_key, content, annotations, saved_at)
            VALUES (?, ?, ?, ?)
        """, [doc_key, document.content, annotations, datetime.now()])
        logging.debug(f"Stored document {doc_key} ({len(document.annotations)} annotations)")

    def load_state(self, doc_key: str) -> Optional[Document]:
        """
        Retrieve a stored document.

        Args:
            doc_key: The document key

        Returns:
            The document if found, None otherwise
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        result = self.connection.execute("""
            SELECT content, annotations FROM documents WHERE doc_key = ?
        """, [doc_key]).fetchone()

        if not result:
            return None
        return Document(content=result[0], annotations=json.loads(result[1]))

    def remove_state(self, doc_key: str) -> bool:
        """
        Delete a stored document.

        Returns:
            True if a document was removed
        """
        if not self.connection:
            raise RuntimeError("Database connection not established")

        existed = self.connection.execute(
            "SELECT COUNT(*) FROM documents WHERE doc_key = ?", [doc_key]
        ).fetchone()[0] > 0
        self.connection.execute("DELETE FROM documents WHERE doc_key = ?", [doc_key])
        return existed

    def list_keys(self) -> List[str]:
        """List the keys of all stored documents."""
        if not self.connection:
            raise RuntimeError("Database connection not established")

        rows = self.connection.execute(
            "SELECT doc_key FROM documents ORDER BY doc_key"
        ).fetchall()
        return [row[0] for row in rows]


_store: Optional[DocumentStore] = None
_store_lock = threading.Lock()


def get_document_store(db_path: Optional[str] = None) -> DocumentStore:
    """
    Get the process-wide document store, connecting it on first use.

    Later calls return the same connected instance; ``db_path`` only matters
    for the call that opens it.

    Args:
        db_path: Database file, defaults to the configured store filename

    Returns:
        The connected DocumentStore
    """
    global _store
    with _store_lock:
        if _store is None:
            store = DocumentStore(db_path or config.store_filename)
            store.connect()
            logging.info(f"Opened document store at {store.db_path}")
            _store = store
        return _store


def reset_document_store() -> None:
    """Close and forget the process-wide document store."""
    global _store
    with _store_lock:
        if _store is not None:
            _store.disconnect()
            _store = None
