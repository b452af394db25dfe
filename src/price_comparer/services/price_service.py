"""Price entry service for document store operations."""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..database.store import DELETE_FIELD, DocumentStore
from ..errors import BulkDeleteError, NotFoundError, PermissionDeniedError
from ..models.price import PriceEntry, PriceEntryFilters, PriceSuggestions
from ..models.user import utc_now
from .user_service import UserService

logger = logging.getLogger(__name__)

PRICE_ENTRIES_COLLECTION = 'price_entries'

# Fields an administrator may change on an existing entry
EDITABLE_FIELDS = {
    'grocery_type', 'brand_name', 'price', 'currency', 'quantity', 'amount',
    'unit', 'store', 'country', 'date',
}


class PriceEntryService:
    """Service for price entry operations."""
    
    def __init__(self, store: DocumentStore, user_service: UserService):
        self.store = store
        self.user_service = user_service
    
    async def create(self, entry: PriceEntry) -> PriceEntry:
        """Store a new entry for a contributor (or administrator).
        
        Raises:
            PermissionDeniedError: the submitting user may not contribute
        """
        if not (self.user_service.is_admin(entry.user_email)
                or await self.user_service.get_contributor_status(entry.user_id)):
            raise PermissionDeniedError('You do not have permission to submit prices')
        
        entry = entry.model_copy(update={'id': None, 'created_at': utc_now()})
        entry_id = await self.store.insert_one(PRICE_ENTRIES_COLLECTION, entry.to_document())
        logger.info("Created price entry %s for '%s'", entry_id, entry.grocery_type)
        return entry.model_copy(update={'id': entry_id})
    
    async def get_by_id(self, entry_id: str) -> Optional[PriceEntry]:
        document = await self.store.get(PRICE_ENTRIES_COLLECTION, entry_id)
        if not document:
            return None
        return PriceEntry.from_document(document)
    
    async def get_entries(self, filters: Optional[PriceEntryFilters] = None) -> List[PriceEntry]:
        """Get entries, oldest first, with optional filtering."""
        filters = filters or PriceEntryFilters()
        documents = await self.store.find(PRICE_ENTRIES_COLLECTION, filters.equality_filters() or None)
        
        entries = [PriceEntry.from_document(document) for document in documents]
        
        # Date ranges are not an equality filter, so they are applied here
        if filters.start_date or filters.end_date:
            entries = [entry for entry in entries if filters.matches_dates(entry)]
        
        return entries
    
    async def update(self, entry_id: str, fields: Dict[str, Any], admin_email: str) -> PriceEntry:
        """Change fields of an existing entry."""
        self.user_service.require_admin(admin_email)
        
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        
        current = await self.get_by_id(entry_id)
        if current is None:
            raise NotFoundError('Price entry not found')
        
        # Validate the merged entry before writing any of it
        updated = PriceEntry.model_validate({**current.model_dump(), **fields})
        document = updated.to_document()
        # Cleared optional fields are removed from the document
        await self.store.update_fields(
            PRICE_ENTRIES_COLLECTION,
            entry_id,
            {key: document.get(key, DELETE_FIELD) for key in fields},
        )
        logger.info("Price entry %s updated by %s", entry_id, admin_email)
        return updated
    
    async def delete(self, entry_id: str, admin_email: str):
        self.user_service.require_admin(admin_email)
        if not await self.store.delete(PRICE_ENTRIES_COLLECTION, entry_id):
            raise NotFoundError('Price entry not found')
        logger.info("Price entry %s deleted by %s", entry_id, admin_email)
    
    async def delete_many(self, entry_ids: Iterable[str], admin_email: str) -> int:
        """Delete several entries concurrently.
        
        Only the aggregate outcome is reported: BulkDeleteError if any delete
        failed, otherwise the number of entries deleted.
        """
        self.user_service.require_admin(admin_email)
        entry_ids = list(entry_ids)
        
        results = await asyncio.gather(
            *(self.store.delete(PRICE_ENTRIES_COLLECTION, entry_id) for entry_id in entry_ids),
            return_exceptions=True,
        )
        
        failed = [r for r in results if isinstance(r, Exception)]
        if failed:
            logger.error("Bulk delete failed for %d of %d entries: %s", len(failed), len(entry_ids), failed[0])
            raise BulkDeleteError('Failed to delete entries', failed=len(failed), total=len(entry_ids))
        
        deleted = sum(1 for r in results if r)
        logger.info("Bulk deleted %d price entries", deleted)
        return deleted
    
    async def get_suggestions(self) -> PriceSuggestions:
        """Distinct grocery types, brand names and stores seen so far."""
        entries = await self.get_entries()
        return PriceSuggestions(
            grocery_types=_unique(entry.grocery_type for entry in entries),
            brand_names=_unique(entry.brand_name for entry in entries),
            stores=_unique(entry.store for entry in entries),
        )


def suggest(values: Iterable[str], text: str) -> List[str]:
    """Values containing ``text``, case-insensitively; nothing for blank text."""
    text = text.strip().lower()
    if not text:
        return []
    return [value for value in values if text in value.lower()]


def _unique(values: Iterable[Optional[str]]) -> List[str]:
    return list(dict.fromkeys(value for value in values if value))
