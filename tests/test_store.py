"""
Tests for the DuckDB document store.
"""

import shutil
import tempfile
import unittest
from pathlib import Path

from outline_sync.models import Annotation, AnnotationType, Document
from outline_sync.store import DocumentStore, get_document_store, reset_document_store


def sample_document():
    return Document(content="hello", annotations=[
        Annotation(start=0, end=5, type=AnnotationType.BLOCK,
                   attributes={"level": 1, "viewType": "bullet"}),
        Annotation(start=0, end=2, type=AnnotationType.LINK, attributes={"href": "x"}),
    ])


class TestDocumentStore(unittest.TestCase):
    """Test document persistence."""

    def setUp(self):
        """Set up test database."""
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.temp_dir) / "test.db"

    def tearDown(self):
        """Clean up test database."""
        reset_document_store()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_save_and_load(self):
        with DocumentStore(str(self.db_path)) as store:
            store.save_state("ws/page", sample_document())
            self.assertEqual(store.load_state("ws/page"), sample_document())

        self.assertTrue(self.db_path.exists())

    def test_save_replaces_previous_document(self):
        with DocumentStore(str(self.db_path)) as store:
            store.save_state("ws/page", sample_document())
            store.save_state("ws/page", Document(content="new"))

            self.assertEqual(store.load_state("ws/page"), Document(content="new"))
            self.assertEqual(store.list_keys(), ["ws/page"])

    def test_persists_across_connections(self):
        with DocumentStore(str(self.db_path)) as store:
            store.save_state("ws/page", sample_document())

        with DocumentStore(str(self.db_path)) as store:
            self.assertEqual(store.load_state("ws/page"), sample_document())

    def test_missing_key(self):
        with DocumentStore(str(self.db_path)) as store:
            self.assertIsNone(store.load_state("ws/none"))
            self.assertFalse(store.remove_state("ws/none"))

    def test_remove(self):
        with DocumentStore(str(self.db_path)) as store:
            store.save_state("ws/a", sample_document())
            store.save_state("ws/b", sample_document())

            self.assertTrue(store.remove_state("ws/a"))
            self.assertIsNone(store.load_state("ws/a"))
            self.assertEqual(store.list_keys(), ["ws/b"])

    def test_requires_connection(self):
        store = DocumentStore(str(self.db_path))
        with self.assertRaises(RuntimeError):
            store.load_state("ws/page")

    def test_make_key(self):
        self.assertEqual(DocumentStore.make_key("graph", "Inbox"), "graph/Inbox")

    def test_global_store_is_opened_once(self):
        first = get_document_store(str(self.db_path))
        second = get_document_store(str(Path(self.temp_dir) / "other.db"))

        self.assertIs(first, second)
        self.assertEqual(first.db_path, str(self.db_path))
        self.assertIsNotNone(first.connection)

    def test_reset_closes_global_store(self):
        store = get_document_store(str(self.db_path))
        reset_document_store()

        self.assertIsNone(store.connection)
        self.assertIsNot(get_document_store(str(self.db_path)), store)


if __name__ == '__main__':
    unittest.main()
