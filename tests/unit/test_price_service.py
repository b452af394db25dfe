"""Tests for the price entry service."""

from datetime import date
from decimal import Decimal
import pytest

from conftest import ADMIN_EMAIL, make_entry
from price_comparer.database.store import MemoryDocumentStore
from price_comparer.errors import BulkDeleteError, NotFoundError, PermissionDeniedError
from price_comparer.models.price import Country, PriceEntryFilters
from price_comparer.services.price_service import PriceEntryService, suggest


async def _contributor(users, user_id='user-1', email='anna@mail.se'):
    await users.create_or_update_user(user_id, email, is_contributor=True)


@pytest.mark.asyncio
async def test_create_requires_contributor(prices, users):
    """Test that only contributors may submit."""
    await users.create_or_update_user('user-1', 'anna@mail.se')
    
    with pytest.raises(PermissionDeniedError):
        await prices.create(make_entry(user_email='anna@mail.se'))
    
    assert await prices.get_entries() == []


@pytest.mark.asyncio
async def test_create_as_contributor(prices, users):
    """Test that a contributor's entry is stored with a creation time."""
    await _contributor(users)
    
    created = await prices.create(make_entry(brand_name='Arla'))
    
    assert created.id
    assert created.created_at is not None
    stored = await prices.get_by_id(created.id)
    assert stored.brand_name == 'Arla'
    assert stored.price == Decimal('20')


@pytest.mark.asyncio
async def test_admin_can_always_create(prices):
    """Test that administrators do not need the contributor flag."""
    created = await prices.create(make_entry(user_id='admin', user_email=ADMIN_EMAIL))
    
    assert created.id


@pytest.mark.asyncio
async def test_get_entries_with_filters(prices, users):
    """Test equality and date filters."""
    await _contributor(users)
    await prices.create(make_entry(country='SE', store='ICA', date=date(2025, 1, 1)))
    await prices.create(make_entry(country='DK', currency='DKK', store='Netto', date=date(2025, 2, 1)))
    await prices.create(make_entry(grocery_type='bread', country='DK', currency='DKK', store='Netto', date=date(2025, 3, 1)))
    
    assert len(await prices.get_entries()) == 3
    assert len(await prices.get_entries(PriceEntryFilters(country=Country.DK))) == 2
    assert len(await prices.get_entries(PriceEntryFilters(store='Netto', grocery_type='milk'))) == 1
    
    in_range = await prices.get_entries(PriceEntryFilters(start_date=date(2025, 1, 15), end_date=date(2025, 2, 1)))
    assert [entry.date for entry in in_range] == [date(2025, 2, 1)]


@pytest.mark.asyncio
async def test_update_entry(prices, users):
    """Test an administrator edit."""
    await _contributor(users)
    created = await prices.create(make_entry())
    
    updated = await prices.update(created.id, {'price': '24.90', 'store': 'Coop'}, ADMIN_EMAIL)
    
    assert updated.price == Decimal('24.90')
    stored = await prices.get_by_id(created.id)
    assert stored.price == Decimal('24.90')
    assert stored.store == 'Coop'
    assert stored.created_at == created.created_at


@pytest.mark.asyncio
async def test_update_clears_optional_field(prices, users, store):
    """Test that clearing an optional field removes it from the document."""
    await _contributor(users)
    created = await prices.create(make_entry(brand_name='Arla'))
    
    updated = await prices.update(created.id, {'brand_name': None}, ADMIN_EMAIL)
    
    assert updated.brand_name is None
    document = await store.get('price_entries', created.id)
    assert 'brand_name' not in document
    assert (await prices.get_by_id(created.id)).brand_name is None


@pytest.mark.asyncio
async def test_update_checks(prices, users):
    """Test edit permission, field and existence checks."""
    await _contributor(users)
    created = await prices.create(make_entry())
    
    with pytest.raises(PermissionDeniedError):
        await prices.update(created.id, {'price': '1'}, 'anna@mail.se')
    with pytest.raises(ValueError):
        await prices.update(created.id, {'user_id': 'someone-else'}, ADMIN_EMAIL)
    with pytest.raises(ValueError):
        await prices.update(created.id, {'price': '-5'}, ADMIN_EMAIL)
    with pytest.raises(NotFoundError):
        await prices.update('missing', {'price': '1'}, ADMIN_EMAIL)


@pytest.mark.asyncio
async def test_delete_entry(prices, users):
    """Test deleting a single entry."""
    await _contributor(users)
    created = await prices.create(make_entry())
    
    with pytest.raises(PermissionDeniedError):
        await prices.delete(created.id, 'anna@mail.se')
    
    await prices.delete(created.id, ADMIN_EMAIL)
    
    assert await prices.get_by_id(created.id) is None
    with pytest.raises(NotFoundError):
        await prices.delete(created.id, ADMIN_EMAIL)


@pytest.mark.asyncio
async def test_delete_many(prices, users):
    """Test bulk delete."""
    await _contributor(users)
    ids = [(await prices.create(make_entry())).id for _ in range(3)]
    keep = await prices.create(make_entry(grocery_type='bread'))
    
    deleted = await prices.delete_many(ids, ADMIN_EMAIL)
    
    assert deleted == 3
    assert [entry.id for entry in await prices.get_entries()] == [keep.id]


class FlakyStore(MemoryDocumentStore):
    """Store whose deletes fail for one id."""
    
    async def delete(self, collection, doc_id):
        if doc_id == 'broken':
            raise ConnectionError('connection reset')
        return await super().delete(collection, doc_id)


@pytest.mark.asyncio
async def test_delete_many_reports_aggregate_failure(users):
    """Test that one failing delete fails the whole batch report."""
    store = FlakyStore()
    prices = PriceEntryService(store, users)
    await store.set('price_entries', 'ok', make_entry().to_document())
    
    with pytest.raises(BulkDeleteError) as exc_info:
        await prices.delete_many(['ok', 'broken'], ADMIN_EMAIL)
    
    assert exc_info.value.failed == 1
    assert exc_info.value.total == 2


@pytest.mark.asyncio
async def test_suggestions(prices, users):
    """Test distinct values for autocomplete."""
    await _contributor(users)
    await prices.create(make_entry(grocery_type='Milk', brand_name='Arla', store='ICA'))
    await prices.create(make_entry(grocery_type='Milk', store='ICA'))
    await prices.create(make_entry(grocery_type='Oat milk', brand_name='Oatly', store='Netto'))
    
    suggestions = await prices.get_suggestions()
    
    assert suggestions.grocery_types == ['Milk', 'Oat milk']
    assert suggestions.brand_names == ['Arla', 'Oatly']
    assert suggestions.stores == ['ICA', 'Netto']
    assert suggest(suggestions.grocery_types, 'MILK') == ['Milk', 'Oat milk']
    assert suggest(suggestions.grocery_types, '  ') == []
