"""Command-line interface commands."""

import asyncio
import sys
import click
from datetime import date
from decimal import Decimal
from typing import Optional

from ..config import app_config
from ..context import AppContext, create_context
from ..database import test_connection, close_pool, init_schema
from ..errors import PriceComparerError
from ..logger import setup_logging
from ..models.price import Country, Currency, PriceEntry, PriceEntryFilters, Unit, COUNTRY_CURRENCY
from ..models.translation import Language, Translation
from ..models.user import AuthUser
from ..services.price_service import suggest
from ..utils.json_processor import JSONProcessor

LANGUAGES = [language.value for language in Language]
COUNTRIES = [country.value for country in Country]
CURRENCIES = [currency.value for currency in Currency]
UNITS = [unit.value for unit in Unit]
STATUSES = ['pending', 'approved', 'rejected']


def _fail(message: str):
    click.echo(f"❌ {message}")
    sys.exit(1)


def _format_price(value: Optional[float]) -> str:
    return f"{value:.2f}" if value is not None else '-'


def credentials_options(func):
    """Email/password options for commands that act as a signed-in user."""
    func = click.option('--password', prompt=True, hide_input=True, envvar='PRICES_PASSWORD',
                        help='Account password')(func)
    func = click.option('--email', prompt=True, envvar='PRICES_EMAIL', help='Account email')(func)
    return func


async def _sign_in_admin(ctx: AppContext, email: str, password: str) -> AuthUser:
    user = await ctx.auth.sign_in(email, password)
    ctx.users.require_admin(user.email)
    return user


async def _run(language: str, action):
    """Run one command against a fresh context, closing the pool afterwards."""
    setup_logging()
    try:
        ctx = await create_context(language)
        await action(ctx)
    except PriceComparerError as e:
        _fail(str(e))
    except click.Abort:
        raise
    except Exception as e:
        if app_config.debug:
            import traceback
            click.echo(traceback.format_exc())
        _fail(f"Error: {type(e).__name__}: {str(e)}")
    finally:
        await close_pool()


@click.group()
@click.option('--language', type=click.Choice(LANGUAGES), default=app_config.default_language,
              help='Language for headings')
@click.pass_context
def main(click_ctx, language: str):
    """Grocery price comparer CLI - Sweden vs. Denmark grocery prices."""
    click_ctx.ensure_object(dict)
    click_ctx.obj['language'] = language


@main.command()
def test_db():
    """Test database connection."""
    asyncio.run(_test_db())


async def _test_db():
    """Test database connection."""
    try:
        success = await test_connection()
        if success:
            click.echo("✅ Database connection successful!")
        else:
            _fail("Database connection failed!")
    finally:
        await close_pool()


@main.command()
def init_db():
    """Create the document table."""
    asyncio.run(_init_db())


async def _init_db():
    """Create the document table."""
    try:
        await init_schema()
        click.echo("✅ Schema created")
    except Exception as e:
        _fail(f"Error creating schema: {str(e)}")
    finally:
        await close_pool()


# Access requests and accounts

@main.command()
@click.option('--email', prompt=True, help='Email to request access for')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password to use once approved')
@click.pass_context
def signup(click_ctx, email: str, password: str):
    """Request access to the system."""
    async def action(ctx: AppContext):
        message = await ctx.auth.sign_up(email, password)
        click.echo(f"📨 {ctx.t(message)}")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command()
@credentials_options
@click.pass_context
def signin(click_ctx, email: str, password: str):
    """Sign in; creates the account on the first sign-in after approval."""
    async def action(ctx: AppContext):
        user = await ctx.auth.sign_in(email, password)
        app_user = await ctx.users.get_by_id(user.id)
        click.echo(f"✅ Signed in as {user.email}")
        click.echo(f"🆔 User ID: {user.id}")
        if app_user:
            click.echo(f"✍️  Contributor: {'yes' if app_user.is_contributor else 'no'}")
        if ctx.users.is_admin(user.email):
            click.echo("🔑 Administrator")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('requests')
@click.option('--status', type=click.Choice(STATUSES), help='Only show requests with this status')
@credentials_options
@click.pass_context
def list_requests(click_ctx, status: Optional[str], email: str, password: str):
    """List access requests (administrators only)."""
    async def action(ctx: AppContext):
        await _sign_in_admin(ctx, email, password)
        requests = await ctx.requests.get_requests(status)

        if not requests:
            click.echo("📭 No requests found")
            return

        for i, request in enumerate(requests, 1):
            click.echo(f"{i}. {request.email} [{request.status}]")
            click.echo(f"   🆔 Request ID: {request.id}")
            click.echo(f"   📅 Requested: {request.requested_at:%Y-%m-%d %H:%M}")
            if request.reviewed_at:
                click.echo(f"   👤 Reviewed by {request.reviewed_by} at {request.reviewed_at:%Y-%m-%d %H:%M}")
            click.echo()

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command()
@click.argument('request_id')
@credentials_options
@click.pass_context
def approve(click_ctx, request_id: str, email: str, password: str):
    """Approve a pending access request."""
    async def action(ctx: AppContext):
        admin = await _sign_in_admin(ctx, email, password)
        request = await ctx.requests.approve(request_id, admin.email)
        click.echo(f"✅ Approved {request.email}")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command()
@click.argument('request_id')
@credentials_options
@click.pass_context
def reject(click_ctx, request_id: str, email: str, password: str):
    """Reject a pending access request."""
    async def action(ctx: AppContext):
        admin = await _sign_in_admin(ctx, email, password)
        request = await ctx.requests.reject(request_id, admin.email)
        click.echo(f"🚫 Rejected {request.email}")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('delete-request')
@click.argument('request_id')
@credentials_options
@click.pass_context
def delete_request(click_ctx, request_id: str, email: str, password: str):
    """Permanently delete an access request."""
    async def action(ctx: AppContext):
        admin = await _sign_in_admin(ctx, email, password)
        request = await ctx.requests.get_by_id(request_id)
        if request and request.status == 'pending':
            click.confirm(f"Request from {request.email} is still pending. Delete anyway?", abort=True)
        await ctx.requests.delete(request_id, admin.email)
        click.echo("🗑️  Request deleted")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('users')
@credentials_options
@click.pass_context
def list_users(click_ctx, email: str, password: str):
    """List user records (administrators only)."""
    async def action(ctx: AppContext):
        await _sign_in_admin(ctx, email, password)
        users = await ctx.users.get_all_users()

        if not users:
            click.echo("📭 No users found")
            return

        for i, user in enumerate(users, 1):
            flags = []
            if user.is_contributor:
                flags.append('contributor')
            if user.is_pending:
                flags.append('awaiting first sign-in')
            click.echo(f"{i}. {user.email}{' (' + ', '.join(flags) + ')' if flags else ''}")
            click.echo(f"   🆔 User ID: {user.id}")
            click.echo(f"   📅 Created: {user.created_at:%Y-%m-%d}  Last login: {user.last_login:%Y-%m-%d %H:%M}")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('set-contributor')
@click.argument('user_id')
@click.option('--revoke', is_flag=True, help='Remove contributor access instead of granting it')
@credentials_options
@click.pass_context
def set_contributor(click_ctx, user_id: str, revoke: bool, email: str, password: str):
    """Grant or revoke permission to submit prices."""
    async def action(ctx: AppContext):
        admin = await _sign_in_admin(ctx, email, password)
        await ctx.users.set_contributor(user_id, not revoke, admin.email)
        click.echo(f"✅ {'Revoked' if revoke else 'Granted'} contributor access for {user_id}")

    asyncio.run(_run(click_ctx.obj['language'], action))


# Price entries

@main.command('submit-price')
@click.option('--item', 'grocery_type', required=True, help='Grocery type, e.g. milk')
@click.option('--price', type=Decimal, required=True, help='Price paid')
@click.option('--country', type=click.Choice(COUNTRIES), required=True, help='Country of the store')
@click.option('--currency', type=click.Choice(CURRENCIES), help='Defaults to the country currency')
@click.option('--brand', help='Brand name')
@click.option('--quantity', type=Decimal, default=Decimal('1'), show_default=True, help='Number of packages')
@click.option('--amount', type=Decimal, help='Package size')
@click.option('--unit', type=click.Choice(UNITS), default=Unit.LITER.value, show_default=True, help='Unit of the package size')
@click.option('--store', 'store_name', help='Store name')
@click.option('--date', 'observed', type=click.DateTime(formats=['%Y-%m-%d']), help='Date seen (default today)')
@credentials_options
@click.pass_context
def submit_price(click_ctx, grocery_type: str, price: Decimal, country: str, currency: Optional[str],
                 brand: Optional[str], quantity: Decimal, amount: Optional[Decimal], unit: str,
                 store_name: Optional[str], observed, email: str, password: str):
    """Submit a price observation (contributors only)."""
    async def action(ctx: AppContext):
        user = await ctx.auth.sign_in(email, password)
        entry = PriceEntry(
            grocery_type=grocery_type.strip(),
            brand_name=brand.strip() if brand and brand.strip() else None,
            price=price,
            currency=currency or COUNTRY_CURRENCY[Country(country)],
            quantity=quantity,
            amount=amount,
            unit=unit,
            store=store_name.strip() if store_name and store_name.strip() else None,
            country=country,
            date=observed.date() if observed else date.today(),
            user_id=user.id,
            user_email=user.email,
        )
        created = await ctx.prices.create(entry)
        click.echo(f"✅ Saved price for {created.grocery_type}")
        click.echo(f"🆔 Entry ID: {created.id}")

    asyncio.run(_run(click_ctx.obj['language'], action))


def _filters(grocery_type, country, store_name, start, end) -> PriceEntryFilters:
    return PriceEntryFilters(
        grocery_type=grocery_type,
        country=country,
        store=store_name,
        start_date=start.date() if start else None,
        end_date=end.date() if end else None,
    )


def filter_options(func):
    func = click.option('--to', 'end', type=click.DateTime(formats=['%Y-%m-%d']), help='Last date (inclusive)')(func)
    func = click.option('--from', 'start', type=click.DateTime(formats=['%Y-%m-%d']), help='First date (inclusive)')(func)
    func = click.option('--store', 'store_name', help='Filter by store')(func)
    func = click.option('--country', type=click.Choice(COUNTRIES), help='Filter by country')(func)
    func = click.option('--item', 'grocery_type', help='Filter by exact grocery type')(func)
    return func


@main.command('list-entries')
@filter_options
@click.pass_context
def list_entries(click_ctx, grocery_type, country, store_name, start, end):
    """List price entries."""
    async def action(ctx: AppContext):
        entries = await ctx.prices.get_entries(_filters(grocery_type, country, store_name, start, end))

        if not entries:
            click.echo("📭 No entries found")
            return

        for i, entry in enumerate(entries, 1):
            brand = f" ({entry.brand_name})" if entry.brand_name else ''
            click.echo(f"{i}. {entry.grocery_type}{brand}")
            click.echo(f"   💰 {entry.price} {entry.currency.value} for {entry.quantity or 1} x {entry.amount or 1} {entry.unit.value if entry.unit else ''}".rstrip())
            click.echo(f"   🏪 {entry.store or '-'}, {entry.country}  📅 {entry.date}")
            click.echo(f"   🆔 {entry.id}")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('suggest')
@click.argument('text')
@click.option('--field', type=click.Choice(['item', 'brand', 'store']), default='item', show_default=True,
              help='Which values to search')
@click.pass_context
def suggest_values(click_ctx, text: str, field: str):
    """Show known item names, brands or stores containing TEXT."""
    async def action(ctx: AppContext):
        suggestions = await ctx.prices.get_suggestions()
        values = {
            'item': suggestions.grocery_types,
            'brand': suggestions.brand_names,
            'store': suggestions.stores,
        }[field]

        matches = suggest(values, text)
        if not matches:
            click.echo("📭 No suggestions")
            return
        for value in matches:
            click.echo(value)

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command()
@click.option('--search', help='Only items whose name contains this text')
@filter_options
@click.pass_context
def compare(click_ctx, search, grocery_type, country, store_name, start, end):
    """Compare average prices between Sweden and Denmark."""
    async def action(ctx: AppContext):
        filters = _filters(grocery_type, country, store_name, start, end)
        rate, results = await ctx.comparison.get_comparison(filters, search)

        click.echo(f"💱 1 SEK = {rate:.4f} DKK")
        if not results:
            click.echo(f"📭 {ctx.t('No price data available')}")
            return

        click.echo(
            f"{ctx.t('Grocery Type'):<24}{ctx.t('Sweden'):>12}{ctx.t('Denmark'):>12}"
            f"{ctx.t('Difference'):>12}{'%':>9}  {ctx.t('Cheaper')}"
        )
        for item in results:
            percent = f"{item.percent_difference:.1f}" if item.percent_difference is not None else '-'
            cheaper = item.cheaper_country.value if item.cheaper_country else '-'
            click.echo(
                f"{item.grocery_type:<24}"
                f"{_format_price(item.avg_price_se) + ' (' + str(item.count_se) + ')':>12}"
                f"{_format_price(item.avg_price_dk) + ' (' + str(item.count_dk) + ')':>12}"
                f"{_format_price(item.difference):>12}{percent:>9}  {cheaper}"
            )
        click.echo(f"ℹ️  {ctx.t('Prices in SEK per kg, per liter or per piece')}")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('edit-entry')
@click.argument('entry_id')
@click.option('--set', 'assignments', multiple=True, required=True, metavar='FIELD=VALUE',
              help='Field to change, e.g. --set price=24.90')
@credentials_options
@click.pass_context
def edit_entry(click_ctx, entry_id: str, assignments, email: str, password: str):
    """Edit a price entry (administrators only)."""
    fields = {}
    for assignment in assignments:
        if '=' not in assignment:
            _fail(f"Expected FIELD=VALUE, got '{assignment}'")
        key, value = assignment.split('=', 1)
        fields[key.strip()] = value.strip() or None

    async def action(ctx: AppContext):
        admin = await _sign_in_admin(ctx, email, password)
        updated = await ctx.prices.update(entry_id, fields, admin.email)
        click.echo(f"✅ Updated entry {entry_id} ({updated.grocery_type})")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('delete-entries')
@click.argument('entry_ids', nargs=-1, required=True)
@credentials_options
@click.pass_context
def delete_entries(click_ctx, entry_ids, email: str, password: str):
    """Delete one or more price entries (administrators only)."""
    async def action(ctx: AppContext):
        admin = await _sign_in_admin(ctx, email, password)
        if len(entry_ids) == 1:
            await ctx.prices.delete(entry_ids[0], admin.email)
            click.echo("🗑️  Entry deleted")
        else:
            deleted = await ctx.prices.delete_many(entry_ids, admin.email)
            click.echo(f"🗑️  Deleted {deleted} entries")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('export-entries')
@click.argument('output_path')
@filter_options
@click.pass_context
def export_entries(click_ctx, output_path: str, grocery_type, country, store_name, start, end):
    """Export price entries to a JSON file."""
    async def action(ctx: AppContext):
        entries = await ctx.prices.get_entries(_filters(grocery_type, country, store_name, start, end))
        path = await JSONProcessor().save_entries_json(entries, output_path)
        click.echo(f"💾 Exported {len(entries)} entries to {path}")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('load-entries')
@click.argument('json_file_path')
@click.option('--dry-run', is_flag=True, help='Validate the file without saving entries')
@credentials_options
@click.pass_context
def load_entries(click_ctx, json_file_path: str, dry_run: bool, email: str, password: str):
    """Load price entries from a JSON file as the signed-in user."""
    async def action(ctx: AppContext):
        entries = await JSONProcessor().load_entries(json_file_path)
        if dry_run:
            click.echo(f"✅ {len(entries)} valid entries in {json_file_path}")
            return

        user = await ctx.auth.sign_in(email, password)
        for entry in entries:
            await ctx.prices.create(entry.model_copy(update={'user_id': user.id, 'user_email': user.email}))
        click.echo(f"✅ Loaded {len(entries)} entries")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('exchange-rate')
@click.pass_context
def exchange_rate(click_ctx):
    """Show the SEK to DKK rate used for comparisons."""
    async def action(ctx: AppContext):
        rate = await ctx.rates.get_exchange_rate()
        updated = await ctx.rates.get_last_update_time()
        click.echo(f"💱 1 SEK = {rate:.4f} DKK")
        if updated:
            click.echo(f"🕒 Last updated: {updated:%Y-%m-%d %H:%M} UTC")
        else:
            click.echo("⚠️  Using fallback rate")

    asyncio.run(_run(click_ctx.obj['language'], action))


# Translations

@main.command('translations')
@click.pass_context
def list_translations(click_ctx):
    """List interface translations."""
    async def action(ctx: AppContext):
        translations = await ctx.translations.get_all()
        if not translations:
            click.echo("📭 No translations found")
            return
        for translation in translations:
            click.echo(f"🇬🇧 {translation.en}")
            click.echo(f"   🇩🇰 {translation.da or '-'}")
            click.echo(f"   🇸🇪 {translation.sv or '-'}")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('add-translation')
@click.argument('english')
@click.option('--da', 'danish', default='', help='Danish text')
@click.option('--sv', 'swedish', default='', help='Swedish text')
@credentials_options
@click.pass_context
def add_translation(click_ctx, english: str, danish: str, swedish: str, email: str, password: str):
    """Add (or replace) a translation (administrators only)."""
    async def action(ctx: AppContext):
        await _sign_in_admin(ctx, email, password)
        await ctx.translations.create(Translation(en=english, da=danish, sv=swedish))
        click.echo(f"✅ Saved translation for '{english}'")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('update-translation')
@click.argument('english')
@click.option('--da', 'danish', help='Danish text')
@click.option('--sv', 'swedish', help='Swedish text')
@credentials_options
@click.pass_context
def update_translation(click_ctx, english: str, danish: Optional[str], swedish: Optional[str], email: str, password: str):
    """Change the Danish or Swedish text of a translation (administrators only)."""
    async def action(ctx: AppContext):
        await _sign_in_admin(ctx, email, password)
        await ctx.translations.update(english, da=danish, sv=swedish)
        click.echo(f"✅ Updated translation for '{english}'")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command('delete-translation')
@click.argument('english')
@credentials_options
@click.pass_context
def delete_translation(click_ctx, english: str, email: str, password: str):
    """Delete a translation (administrators only)."""
    async def action(ctx: AppContext):
        await _sign_in_admin(ctx, email, password)
        await ctx.translations.delete(english)
        click.echo(f"🗑️  Deleted translation for '{english}'")

    asyncio.run(_run(click_ctx.obj['language'], action))


@main.command()
@click.argument('text')
@click.pass_context
def translate(click_ctx, text: str):
    """Show TEXT in the selected --language."""
    async def action(ctx: AppContext):
        click.echo(ctx.t(text))

    asyncio.run(_run(click_ctx.obj['language'], action))
