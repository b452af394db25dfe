"""Country price comparison built from stored entries."""

from typing import List, Optional, Tuple

from ..models.price import AggregatedPrice, PriceEntryFilters
from .aggregation import aggregate
from .currency_service import ExchangeRateService
from .price_service import PriceEntryService


class ComparisonService:
    """Service producing the per-item comparison table."""
    
    def __init__(self, prices: PriceEntryService, rates: ExchangeRateService):
        self.prices = prices
        self.rates = rates
    
    async def get_comparison(
        self,
        filters: Optional[PriceEntryFilters] = None,
        search: Optional[str] = None
    ) -> Tuple[float, List[AggregatedPrice]]:
        """Return the rate used and the aggregated prices, optionally searched by item name."""
        entries = await self.prices.get_entries(filters)
        rate = await self.rates.get_exchange_rate()
        
        results = aggregate(entries, rate)
        if search and search.strip():
            needle = search.strip().lower()
            results = [r for r in results if needle in r.grocery_type]
        
        return rate, results
