"""Tests for the command-line interface."""

import asyncio

from click.testing import CliRunner
import pytest

from conftest import ADMIN_EMAIL, make_entry
from price_comparer.cli import commands
from price_comparer.context import build_context
from price_comparer.database.store import MemoryDocumentStore
from price_comparer.models.translation import Translation
from price_comparer.services.identity_provider import MemoryIdentityProvider
from price_comparer.services.price_service import PriceEntryService
from price_comparer.services.translation_service import TranslationService
from price_comparer.services.user_service import UserService


@pytest.fixture
def memory_context(monkeypatch):
    """Point the CLI at in-memory collaborators shared across invocations."""
    store = MemoryDocumentStore()
    identity = MemoryIdentityProvider()
    
    async def create_context(language=None):
        ctx = await build_context(store, identity, language)
        ctx.users.admin_emails = [ADMIN_EMAIL]
        return ctx
    
    monkeypatch.setattr(commands, 'create_context', create_context)
    return store, identity


def test_translate(memory_context):
    """Test translating text in the selected language."""
    store, _ = memory_context
    asyncio.run(TranslationService(store).create(Translation(en='Sweden', da='Sverige', sv='Sverige')))
    
    runner = CliRunner()
    result = runner.invoke(commands.main, ['--language', 'da', 'translate', 'Sweden'])
    
    assert result.exit_code == 0
    assert result.output.strip() == 'Sverige'


def test_signup_and_duplicate(memory_context):
    """Test the sign-up flow and its duplicate message."""
    runner = CliRunner()
    args = ['signup', '--email', 'anna@mail.se', '--password', 'secret1']
    
    first = runner.invoke(commands.main, args)
    second = runner.invoke(commands.main, args)
    
    assert first.exit_code == 0
    assert 'submitted' in first.output
    assert second.exit_code == 1
    assert 'already pending approval' in second.output


def test_signin_without_request(memory_context):
    """Test that an unknown account fails the command."""
    runner = CliRunner()
    
    result = runner.invoke(commands.main, ['signin', '--email', 'nobody@mail.se', '--password', 'secret1'])
    
    assert result.exit_code == 1
    assert 'User not found' in result.output


def test_suggest(memory_context):
    """Test listing known item names that contain the text."""
    store, _ = memory_context
    prices = PriceEntryService(store, UserService(store, admin_emails=[ADMIN_EMAIL]))
    for name in ('Milk', 'Oat milk', 'Bread'):
        asyncio.run(prices.create(make_entry(grocery_type=name, user_email=ADMIN_EMAIL)))
    
    runner = CliRunner()
    result = runner.invoke(commands.main, ['suggest', 'milk'])
    
    assert result.exit_code == 0
    assert result.output.splitlines() == ['Milk', 'Oat milk']
