"""Shared fixtures for unit tests."""

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Add src to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))

from price_comparer.database.store import MemoryDocumentStore
from price_comparer.models.price import PriceEntry
from price_comparer.services.access_service import AccessRequestService, AuthService
from price_comparer.services.identity_provider import MemoryIdentityProvider
from price_comparer.services.price_service import PriceEntryService
from price_comparer.services.user_service import UserService

ADMIN_EMAIL = 'admin@prices.se'


def make_entry(**overrides) -> PriceEntry:
    """Build a PriceEntry with sensible defaults."""
    values = dict(
        grocery_type='milk',
        price=Decimal('20'),
        currency='SEK',
        amount=Decimal('1'),
        unit='liter',
        country='SE',
        date=date(2025, 1, 10),
        user_id='user-1',
    )
    values.update(overrides)
    return PriceEntry(**values)


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def identity():
    return MemoryIdentityProvider()


@pytest.fixture
def users(store):
    return UserService(store, admin_emails=[ADMIN_EMAIL])


@pytest.fixture
def requests(store, users):
    return AccessRequestService(store, users, materialize_temp_users=True)


@pytest.fixture
def auth(identity, requests, users):
    return AuthService(identity, requests, users)


@pytest.fixture
def prices(store, users):
    return PriceEntryService(store, users)
