"""Price comparer data models."""

from .price import (
    AggregatedPrice, Country, Currency, PriceEntry, PriceEntryFilters,
    PriceSuggestions, Unit, COUNTRY_CURRENCY,
)
from .user import (
    AppUser, ApprovedState, AuthUser, PendingState, RejectedState, UserRequest,
)
from .translation import Language, Translation
from .exchange_rate import ExchangeRate

__all__ = [
    'AggregatedPrice', 'Country', 'Currency', 'PriceEntry', 'PriceEntryFilters',
    'PriceSuggestions', 'Unit', 'COUNTRY_CURRENCY',
    'AppUser', 'ApprovedState', 'AuthUser', 'PendingState', 'RejectedState', 'UserRequest',
    'Language', 'Translation', 'ExchangeRate',
]
