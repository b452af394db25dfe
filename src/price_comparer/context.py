"""Application context passed to the command line interface."""

from dataclasses import dataclass
from typing import Optional

from .config import app_config
from .database import get_pool
from .database.store import DocumentStore, PostgresDocumentStore
from .models.translation import Language
from .services.access_service import AccessRequestService, AuthService
from .services.comparison_service import ComparisonService
from .services.currency_service import ExchangeRateService
from .services.identity_provider import IdentityProvider
from .services.price_service import PriceEntryService
from .services.supabase_auth import SupabaseIdentityProvider
from .services.translation_service import TranslationService, Translator
from .services.user_service import UserService


@dataclass
class AppContext:
    """Everything one session needs: collaborators, services and language."""
    
    store: DocumentStore
    identity: IdentityProvider
    users: UserService
    requests: AccessRequestService
    auth: AuthService
    prices: PriceEntryService
    rates: ExchangeRateService
    comparison: ComparisonService
    translations: TranslationService
    translator: Translator
    
    @property
    def language(self) -> Language:
        return self.translator.language
    
    def t(self, key: str) -> str:
        return self.translator.t(key)


async def build_context(
    store: DocumentStore,
    identity: IdentityProvider,
    language: Optional[str] = None,
    rates: Optional[ExchangeRateService] = None
) -> AppContext:
    """Wire the services around a store and identity provider."""
    users = UserService(store)
    requests = AccessRequestService(store, users)
    prices = PriceEntryService(store, users)
    rates = rates or ExchangeRateService(store)
    translations = TranslationService(store)
    translator = await translations.load_translator(Language(language or app_config.default_language))
    
    return AppContext(
        store=store,
        identity=identity,
        users=users,
        requests=requests,
        auth=AuthService(identity, requests, users),
        prices=prices,
        rates=rates,
        comparison=ComparisonService(prices, rates),
        translations=translations,
        translator=translator,
    )


async def create_context(language: Optional[str] = None) -> AppContext:
    """Context backed by PostgreSQL and Supabase."""
    pool = await get_pool()
    return await build_context(PostgresDocumentStore(pool), SupabaseIdentityProvider(), language)
