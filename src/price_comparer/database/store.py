"""Document store used by the services.

Documents are plain JSON-compatible dicts grouped into named collections.
Reads return a copy of the document with its ``id`` added.
"""

import copy
import json
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

import asyncpg

from ..errors import NotFoundError

logger = logging.getLogger(__name__)


class _DeleteField:
    """Marker value that removes a field in ``update_fields``."""
    
    def __repr__(self):
        return 'DELETE_FIELD'


DELETE_FIELD = _DeleteField()


class DocumentStore(ABC):
    """Abstract base for document storage."""
    
    @abstractmethod
    async def insert_one(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a document under a new id and return the id."""
        
        raise NotImplementedError
    
    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]):
        """Create or replace the document with a caller-chosen id."""
        
        raise NotImplementedError
    
    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by id (or None)."""
        
        raise NotImplementedError
    
    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Dict[str, Any]]:
        """Find documents whose fields equal every value in ``filters``.
        
        Without ``order_by`` documents come back in insertion order.
        """
        
        raise NotImplementedError
    
    async def get_all(self, collection: str) -> List[Dict[str, Any]]:
        """Get every document in a collection."""
        
        return await self.find(collection)
    
    @abstractmethod
    async def update_fields(self, collection: str, doc_id: str, fields: Dict[str, Any]):
        """Merge ``fields`` into an existing document.
        
        Raises NotFoundError if the document does not exist.
        """
        
        raise NotImplementedError
    
    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document; returns whether it existed."""
        
        raise NotImplementedError
    
    @abstractmethod
    async def delete_many(self, collection: str, doc_ids: Iterable[str]) -> int:
        """Delete several documents; returns how many existed."""
        
        raise NotImplementedError


def _split_update(fields: Dict[str, Any]):
    updates = {k: v for k, v in fields.items() if v is not DELETE_FIELD}
    removals = [k for k, v in fields.items() if v is DELETE_FIELD]
    return updates, removals


def _with_id(doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    document = dict(data)
    document['id'] = doc_id
    return document


class PostgresDocumentStore(DocumentStore):
    """Documents stored as JSONB rows in the ``documents`` table."""
    
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool
    
    async def insert_one(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        query = """
            INSERT INTO documents (collection, id, data)
            VALUES ($1, $2, $3::jsonb)
        """
        async with self.pool.acquire() as conn:
            await conn.execute(query, collection, doc_id, json.dumps(data))
        
        logger.debug("Inserted %s/%s", collection, doc_id)
        return doc_id
    
    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]):
        query = """
            INSERT INTO documents (collection, id, data)
            VALUES ($1, $2, $3::jsonb)
            ON CONFLICT (collection, id) DO UPDATE SET data = EXCLUDED.data
        """
        async with self.pool.acquire() as conn:
            await conn.execute(query, collection, doc_id, json.dumps(data))
    
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        query = "SELECT id, data FROM documents WHERE collection = $1 AND id = $2"
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, collection, doc_id)
            
            if not row:
                return None
            
            return self._map_row(row)
    
    async def find(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Dict[str, Any]]:
        query = 'SELECT id, data FROM documents WHERE collection = $1'
        values: List[Any] = [collection]
        
        if filters:
            values.append(json.dumps(filters))
            query += f' AND data @> ${len(values)}::jsonb'
        
        direction = 'DESC' if descending else 'ASC'
        if order_by:
            values.append(order_by)
            query += f' ORDER BY data->>${len(values)} {direction}, created_at {direction}'
        else:
            query += ' ORDER BY created_at ASC'
        
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, *values)
            
            return [self._map_row(row) for row in rows]
    
    async def update_fields(self, collection: str, doc_id: str, fields: Dict[str, Any]):
        updates, removals = _split_update(fields)
        query = """
            UPDATE documents
            SET data = (data || $3::jsonb) - $4::text[]
            WHERE collection = $1 AND id = $2
            RETURNING id
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, collection, doc_id, json.dumps(updates), removals)
        
        if not row:
            raise NotFoundError(f"Document {collection}/{doc_id} not found")
    
    async def delete(self, collection: str, doc_id: str) -> bool:
        query = "DELETE FROM documents WHERE collection = $1 AND id = $2"
        async with self.pool.acquire() as conn:
            status = await conn.execute(query, collection, doc_id)
        
        return status.endswith(' 1')
    
    async def delete_many(self, collection: str, doc_ids: Iterable[str]) -> int:
        query = "DELETE FROM documents WHERE collection = $1 AND id = ANY($2::text[])"
        async with self.pool.acquire() as conn:
            status = await conn.execute(query, collection, list(doc_ids))
        
        return int(status.split()[-1])
    
    @staticmethod
    def _map_row(row: Any) -> Dict[str, Any]:
        """Helper method to map a database row to a document dict."""
        data = row['data']
        if isinstance(data, str):
            data = json.loads(data)
        return _with_id(row['id'], data)


class MemoryDocumentStore(DocumentStore):
    """In-process document store for local development and tests."""
    
    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
    
    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.setdefault(collection, {})
    
    async def insert_one(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        return doc_id
    
    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]):
        self._collection(collection)[doc_id] = copy.deepcopy(data)
    
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        data = self._collection(collection).get(doc_id)
        if data is None:
            return None
        return _with_id(doc_id, copy.deepcopy(data))
    
    async def find(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Dict[str, Any]]:
        filters = filters or {}
        documents = [
            _with_id(doc_id, copy.deepcopy(data))
            for doc_id, data in self._collection(collection).items()
            if all(data.get(key) == value for key, value in filters.items())
        ]
        
        if order_by:
            # Missing values sort last, as NULLs do in Postgres
            present = [d for d in documents if d.get(order_by) is not None]
            missing = [d for d in documents if d.get(order_by) is None]
            present.sort(key=lambda d: d[order_by], reverse=descending)
            documents = missing + present if descending else present + missing
        elif descending:
            documents.reverse()
        
        return documents
    
    async def update_fields(self, collection: str, doc_id: str, fields: Dict[str, Any]):
        data = self._collection(collection).get(doc_id)
        if data is None:
            raise NotFoundError(f"Document {collection}/{doc_id} not found")
        
        updates, removals = _split_update(fields)
        data.update(copy.deepcopy(updates))
        for key in removals:
            data.pop(key, None)
    
    async def delete(self, collection: str, doc_id: str) -> bool:
        return self._collection(collection).pop(doc_id, None) is not None
    
    async def delete_many(self, collection: str, doc_ids: Iterable[str]) -> int:
        return sum([await self.delete(collection, doc_id) for doc_id in doc_ids])
