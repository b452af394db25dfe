"""Price comparer services."""

from .aggregation import aggregate, normalize_price
from .access_service import AccessRequestService, AuthService
from .comparison_service import ComparisonService
from .currency_service import ExchangeRateService
from .identity_provider import IdentityProvider, MemoryIdentityProvider
from .price_service import PriceEntryService
from .supabase_auth import SupabaseIdentityProvider
from .translation_service import TranslationService, Translator
from .user_service import UserService, is_admin

__all__ = [
    'aggregate', 'normalize_price',
    'AccessRequestService', 'AuthService', 'ComparisonService', 'ExchangeRateService',
    'IdentityProvider', 'MemoryIdentityProvider', 'PriceEntryService',
    'SupabaseIdentityProvider', 'TranslationService', 'Translator',
    'UserService', 'is_admin',
]
