"""Tests for the access request workflow and sign-in."""

from datetime import datetime, timezone

import pytest

from conftest import ADMIN_EMAIL
from price_comparer.errors import (
    AccessRequestError, DuplicateRequestError, InvalidTransitionError, NotFoundError,
    PermissionDeniedError, RejectedRequestError, UserNotFoundError, WeakPasswordError,
)
from price_comparer.models.user import UserRequest
from price_comparer.services.access_service import (
    PENDING_MESSAGE, REJECTED_MESSAGE, SIGNUP_MESSAGE, USER_REQUESTS_COLLECTION,
)
from price_comparer.services.user_service import USERS_COLLECTION
from price_comparer.utils.identifiers import hash_password, temp_user_id


@pytest.mark.asyncio
async def test_submit_creates_pending_request(requests, store):
    """Test that a submission stores a pending request with a digest."""
    request_id = await requests.submit('Anna@Mail.se', 'secret1')
    
    request = await requests.get_by_id(request_id)
    
    assert request.email == 'anna@mail.se'
    assert request.status == 'pending'
    assert request.password_hash == hash_password('secret1')
    assert len(await store.get_all(USER_REQUESTS_COLLECTION)) == 1


@pytest.mark.asyncio
async def test_duplicate_pending_request_fails(requests, store):
    """Test that a second pending request is refused without a new document."""
    await requests.submit('anna@mail.se', 'secret1')
    
    with pytest.raises(DuplicateRequestError):
        await requests.submit('anna@mail.se', 'other-password')
    
    assert len(await store.get_all(USER_REQUESTS_COLLECTION)) == 1


@pytest.mark.asyncio
async def test_rejected_email_cannot_resubmit(requests):
    """Test that a rejected email must go through an administrator."""
    request_id = await requests.submit('anna@mail.se', 'secret1')
    await requests.reject(request_id, ADMIN_EMAIL)
    
    with pytest.raises(RejectedRequestError):
        await requests.submit('anna@mail.se', 'secret1')


@pytest.mark.asyncio
async def test_approved_email_can_resubmit(requests):
    """Test that re-submission after approval is not blocked."""
    request_id = await requests.submit('anna@mail.se', 'secret1')
    await requests.approve(request_id, ADMIN_EMAIL)
    
    assert await requests.submit('anna@mail.se', 'secret1')


@pytest.mark.asyncio
async def test_approve_records_reviewer_and_keeps_request(requests, users):
    """Test approval fields and the placeholder user record."""
    request_id = await requests.submit('anna@mail.se', 'secret1')
    
    await requests.approve(request_id, ADMIN_EMAIL)
    
    request = await requests.get_by_id(request_id)
    assert request.status == 'approved'
    assert request.reviewed_by == ADMIN_EMAIL
    assert request.reviewed_at is not None
    
    temp_user = await users.get_by_id(temp_user_id('anna@mail.se'))
    assert temp_user.is_pending
    assert not temp_user.is_contributor


@pytest.mark.asyncio
async def test_approve_without_placeholder(store, users):
    """Test the deployment variant that skips the placeholder record."""
    from price_comparer.services.access_service import AccessRequestService
    
    requests = AccessRequestService(store, users, materialize_temp_users=False)
    request_id = await requests.submit('anna@mail.se', 'secret1')
    
    await requests.approve(request_id, ADMIN_EMAIL)
    
    assert await store.get_all(USERS_COLLECTION) == []


@pytest.mark.asyncio
async def test_reject_clears_password_hash(requests):
    """Test rejection fields."""
    request_id = await requests.submit('anna@mail.se', 'secret1')
    
    await requests.reject(request_id, ADMIN_EMAIL)
    
    request = await requests.get_by_id(request_id)
    assert request.status == 'rejected'
    assert request.reviewed_by == ADMIN_EMAIL
    assert request.password_hash is None


@pytest.mark.asyncio
async def test_review_only_from_pending(requests):
    """Test that a reviewed request cannot be reviewed again."""
    request_id = await requests.submit('anna@mail.se', 'secret1')
    await requests.approve(request_id, ADMIN_EMAIL)
    
    with pytest.raises(InvalidTransitionError):
        await requests.reject(request_id, ADMIN_EMAIL)


@pytest.mark.asyncio
async def test_review_requires_admin(requests):
    """Test that non-administrators cannot review or delete."""
    request_id = await requests.submit('anna@mail.se', 'secret1')
    
    with pytest.raises(PermissionDeniedError):
        await requests.approve(request_id, 'someone@mail.se')
    with pytest.raises(PermissionDeniedError):
        await requests.reject(request_id, 'someone@mail.se')
    with pytest.raises(PermissionDeniedError):
        await requests.delete(request_id, 'someone@mail.se')


@pytest.mark.asyncio
async def test_approve_missing_request(requests):
    """Test reviewing an unknown id."""
    with pytest.raises(NotFoundError):
        await requests.approve('missing', ADMIN_EMAIL)


@pytest.mark.asyncio
async def test_delete_request(requests):
    """Test permanent removal."""
    request_id = await requests.submit('anna@mail.se', 'secret1')
    await requests.reject(request_id, ADMIN_EMAIL)
    
    await requests.delete(request_id, ADMIN_EMAIL)
    
    assert await requests.get_by_id(request_id) is None
    with pytest.raises(NotFoundError):
        await requests.delete(request_id, ADMIN_EMAIL)


@pytest.mark.asyncio
async def test_list_requests_by_status(requests):
    """Test listing with and without a status filter."""
    first = await requests.submit('anna@mail.se', 'secret1')
    await requests.submit('bo@mail.dk', 'secret1')
    await requests.approve(first, ADMIN_EMAIL)
    
    assert len(await requests.get_requests()) == 2
    assert [r.email for r in await requests.get_requests('pending')] == ['bo@mail.dk']
    assert [r.email for r in await requests.get_requests('approved')] == ['anna@mail.se']


@pytest.mark.asyncio
async def test_sign_up_returns_message(auth):
    """Test that sign-up submits a request."""
    assert await auth.sign_up('anna@mail.se', 'secret1') == SIGNUP_MESSAGE
    assert (await auth.requests.check_status('anna@mail.se')).status == 'pending'


@pytest.mark.asyncio
async def test_first_sign_in_after_approval(auth, requests, users, identity):
    """Test that the first sign-in creates the account and merges the placeholder."""
    request_id = await requests.submit('anna@mail.se', 'secret1')
    await requests.approve(request_id, ADMIN_EMAIL)
    temp_id = temp_user_id('anna@mail.se')
    await users.set_contributor(temp_id, True, ADMIN_EMAIL)
    temp_user = await users.get_by_id(temp_id)
    
    user = await auth.sign_in('anna@mail.se', 'secret1')
    
    assert 'anna@mail.se' in identity.accounts
    assert identity.current_user() == user
    all_users = await users.get_all_users()
    assert len(all_users) == 1
    [app_user] = all_users
    assert app_user.id == user.id
    assert app_user.is_contributor
    assert not app_user.is_pending
    assert app_user.created_at == temp_user.created_at
    
    # Later sign-ins use the account that now exists
    await auth.sign_out()
    again = await auth.sign_in('anna@mail.se', 'secret1')
    assert again.id == user.id
    assert len(await users.get_all_users()) == 1


@pytest.mark.asyncio
async def test_sign_in_while_pending(auth, requests):
    """Test sign-in before review."""
    await requests.submit('anna@mail.se', 'secret1')
    
    with pytest.raises(AccessRequestError, match=PENDING_MESSAGE):
        await auth.sign_in('anna@mail.se', 'secret1')


@pytest.mark.asyncio
async def test_sign_in_after_rejection(auth, requests, identity):
    """Test sign-in after rejection."""
    request_id = await requests.submit('anna@mail.se', 'secret1')
    await requests.reject(request_id, ADMIN_EMAIL)
    
    with pytest.raises(AccessRequestError, match=REJECTED_MESSAGE):
        await auth.sign_in('anna@mail.se', 'secret1')
    assert identity.accounts == {}


@pytest.mark.asyncio
async def test_sign_in_with_weak_password(auth, requests):
    """Test that a weak password surfaces a user-facing message."""
    request_id = await requests.submit('anna@mail.se', 'abc')
    await requests.approve(request_id, ADMIN_EMAIL)
    
    with pytest.raises(WeakPasswordError, match='too weak') as exc_info:
        await auth.sign_in('anna@mail.se', 'abc')
    
    assert isinstance(exc_info.value.__cause__, WeakPasswordError)


@pytest.mark.asyncio
async def test_sign_in_without_request(auth):
    """Test that the provider's error surfaces when there is no request."""
    with pytest.raises(UserNotFoundError):
        await auth.sign_in('nobody@mail.se', 'secret1')


@pytest.mark.asyncio
async def test_sign_in_existing_account(auth, identity, users):
    """Test sign-in of an account that already exists."""
    account = await identity.create_account('bo@mail.dk', 'secret1')
    await identity.sign_out()
    
    user = await auth.sign_in('bo@mail.dk', 'secret1')
    
    assert user.id == account.id
    assert (await users.get_by_id(user.id)).email == 'bo@mail.dk'


@pytest.mark.asyncio
async def test_auth_state_listeners(auth, identity):
    """Test session change notifications."""
    seen = []
    unsubscribe = identity.on_auth_state_changed(seen.append)
    await identity.create_account('bo@mail.dk', 'secret1')
    await auth.sign_out()
    unsubscribe()
    await auth.sign_in('bo@mail.dk', 'secret1')
    
    assert [u.email if u else None for u in seen] == ['bo@mail.dk', None]


@pytest.mark.asyncio
async def test_requests_newest_first_within_a_second(requests, store):
    """Test ordering of requests made in the same second."""
    for request_id, micro in (('whole', 0), ('later', 500000)):
        request = UserRequest(
            email='anna@mail.se',
            requested_at=datetime(2025, 1, 1, 10, 0, 0, micro, tzinfo=timezone.utc),
        )
        await store.set(USER_REQUESTS_COLLECTION, request_id, request.to_document())
    
    found = await requests.get_requests_for_email('anna@mail.se')
    
    assert [r.id for r in found] == ['later', 'whole']
