"""Persistence of synchronized documents."""

from .manager import DocumentStore, get_document_store, reset_document_store

__all__ = ["DocumentStore", "get_document_store", "reset_document_store"]
