"""Database connection and document storage."""

from .connection import get_pool, close_pool, test_connection, init_schema
from .store import DocumentStore, PostgresDocumentStore, MemoryDocumentStore, DELETE_FIELD

__all__ = [
    'get_pool', 'close_pool', 'test_connection', 'init_schema',
    'DocumentStore', 'PostgresDocumentStore', 'MemoryDocumentStore', 'DELETE_FIELD',
]
