"""Exchange rate service with a document-store cache."""

import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from ..config import exchange_rate_config
from ..database.store import DocumentStore
from ..models.exchange_rate import ExchangeRate

logger = logging.getLogger(__name__)

EXCHANGE_RATE_COLLECTION = 'app_config'
EXCHANGE_RATE_DOC = 'exchange_rate'


class ExchangeRateService:
    """Service for the SEK to DKK exchange rate."""
    
    def __init__(
        self,
        store: DocumentStore,
        url: Optional[str] = None,
        cache_hours: Optional[float] = None,
        fallback_rate: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.store = store
        self.url = url or exchange_rate_config.url
        self.cache_hours = cache_hours if cache_hours is not None else exchange_rate_config.cache_hours
        self.fallback_rate = fallback_rate if fallback_rate is not None else exchange_rate_config.fallback_rate
        self.transport = transport
    
    async def get_exchange_rate(self) -> float:
        """Get the current rate, refreshing the cached copy when it is stale.
        
        Any failure falls back to the configured constant rate.
        """
        try:
            cached = await self.get_cached_rate()
            now = datetime.now(timezone.utc)
            
            if cached:
                age = cached.age_hours(now)
                if age < self.cache_hours:
                    logger.info("Using cached exchange rate: %s (%.1f hours old)", cached.sek_to_dkk, age)
                    return cached.sek_to_dkk
                logger.info("Cached rate expired (%.1f hours old), fetching new rate", age)
            else:
                logger.info("No cached rate found, fetching from API")
            
            rate = await self.fetch_exchange_rate()
            
            await self.store.set(
                EXCHANGE_RATE_COLLECTION,
                EXCHANGE_RATE_DOC,
                ExchangeRate(
                    sek_to_dkk=rate,
                    last_updated=now,
                    source=exchange_rate_config.source,
                ).to_document(),
            )
            logger.info("Stored new exchange rate: %s", rate)
            return rate
        except Exception as e:
            logger.error("Error getting exchange rate: %s", e)
            logger.info("Using fallback rate: %s", self.fallback_rate)
            return self.fallback_rate
    
    async def fetch_exchange_rate(self) -> float:
        """Fetch the rate from the HTTP endpoint."""
        async with httpx.AsyncClient(timeout=exchange_rate_config.timeout, transport=self.transport) as client:
            response = await client.get(self.url)
            response.raise_for_status()
            data = response.json()
        
        rates = data.get('rates') or {}
        if not rates.get('DKK'):
            raise ValueError('Invalid API response format')
        
        rate = float(rates['DKK'])
        logger.info("Fetched exchange rate from API: 1 SEK = %s DKK", rate)
        return rate
    
    async def get_cached_rate(self) -> Optional[ExchangeRate]:
        document = await self.store.get(EXCHANGE_RATE_COLLECTION, EXCHANGE_RATE_DOC)
        if not document:
            return None
        return ExchangeRate.from_document(document)
    
    async def get_last_update_time(self) -> Optional[datetime]:
        """When the cached rate was last refreshed, for display."""
        try:
            cached = await self.get_cached_rate()
        except Exception as e:
            logger.error("Error getting last update time: %s", e)
            return None
        return cached.last_updated if cached else None
