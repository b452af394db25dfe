"""Access request workflow and sign-in."""

import logging
from typing import List, Optional

from ..config import app_config
from ..database.store import DocumentStore
from ..errors import (
    AccessRequestError, DuplicateRequestError, InvalidCredentialsError, NotFoundError,
    RejectedRequestError, UserNotFoundError, WeakPasswordError,
)
from ..models.user import AuthUser, UserRequest
from ..utils.identifiers import hash_password, normalize_email
from .identity_provider import IdentityProvider
from .user_service import UserService

logger = logging.getLogger(__name__)

USER_REQUESTS_COLLECTION = 'user_requests'

SIGNUP_MESSAGE = 'Your request has been submitted. You will receive access once approved by an administrator.'
PENDING_MESSAGE = 'Your access request is pending approval. Please wait for administrator approval.'
REJECTED_MESSAGE = 'Your access request was rejected. Please contact the administrator.'


class AccessRequestService:
    """Service for the pending -> approved | rejected request lifecycle."""
    
    def __init__(self, store: DocumentStore, user_service: UserService, materialize_temp_users: Optional[bool] = None):
        self.store = store
        self.user_service = user_service
        if materialize_temp_users is None:
            materialize_temp_users = app_config.materialize_temp_users
        self.materialize_temp_users = materialize_temp_users
    
    async def submit(self, email: str, password: str) -> str:
        """
        Create a pending request for an email.
        
        Args:
            email: Requested account email
            password: Plaintext password; only its digest is stored
        
        Returns:
            Id of the new request
        
        Raises:
            DuplicateRequestError: a request for the email is already pending
            RejectedRequestError: a request for the email was rejected
        """
        email = normalize_email(email)
        existing = await self.get_requests_for_email(email)
        
        if any(r.status == 'pending' for r in existing):
            raise DuplicateRequestError('A request for this email is already pending approval')
        if any(r.status == 'rejected' for r in existing):
            raise RejectedRequestError('Your previous request was rejected. Please contact the administrator.')
        
        request = UserRequest(email=email, password_hash=hash_password(password))
        request_id = await self.store.insert_one(USER_REQUESTS_COLLECTION, request.to_document())
        logger.info("Created access request %s for %s", request_id, email)
        return request_id
    
    async def get_by_id(self, request_id: str) -> Optional[UserRequest]:
        document = await self.store.get(USER_REQUESTS_COLLECTION, request_id)
        if not document:
            return None
        return UserRequest.from_document(document)
    
    async def get_requests_for_email(self, email: str) -> List[UserRequest]:
        """Requests for an email, newest first."""
        documents = await self.store.find(
            USER_REQUESTS_COLLECTION,
            {'email': normalize_email(email)},
            order_by='requested_at',
            descending=True,
        )
        return [UserRequest.from_document(document) for document in documents]
    
    async def get_requests(self, status: Optional[str] = None) -> List[UserRequest]:
        """All requests, optionally with one status, newest first."""
        documents = await self.store.find(
            USER_REQUESTS_COLLECTION,
            {'status': status} if status else None,
            order_by='requested_at',
            descending=True,
        )
        return [UserRequest.from_document(document) for document in documents]
    
    async def check_status(self, email: str) -> Optional[UserRequest]:
        """The most recent request for an email (or None)."""
        requests = await self.get_requests_for_email(email)
        return requests[0] if requests else None
    
    async def approve(self, request_id: str, admin_email: str) -> UserRequest:
        """Approve a pending request and create the placeholder user record."""
        self.user_service.require_admin(admin_email)
        request = await self._require(request_id)
        
        approved = request.approve(admin_email)
        await self.store.update_fields(USER_REQUESTS_COLLECTION, request_id, approved.state.model_dump(mode='json'))
        logger.info("Request %s approved by %s", request_id, admin_email)
        
        # Not atomic with the update above
        if self.materialize_temp_users:
            await self.user_service.create_temp_user(approved.email)
        
        return approved
    
    async def reject(self, request_id: str, admin_email: str) -> UserRequest:
        """Reject a pending request and clear its password digest."""
        self.user_service.require_admin(admin_email)
        request = await self._require(request_id)
        
        rejected = request.reject(admin_email)
        fields = rejected.state.model_dump(mode='json')
        fields['password_hash'] = ''
        await self.store.update_fields(USER_REQUESTS_COLLECTION, request_id, fields)
        logger.info("Request %s rejected by %s", request_id, admin_email)
        return rejected
    
    async def delete(self, request_id: str, admin_email: str):
        """Permanently remove a request."""
        self.user_service.require_admin(admin_email)
        if not await self.store.delete(USER_REQUESTS_COLLECTION, request_id):
            raise NotFoundError('User request not found')
        logger.info("Request %s deleted by %s", request_id, admin_email)
    
    async def _require(self, request_id: str) -> UserRequest:
        request = await self.get_by_id(request_id)
        if request is None:
            raise NotFoundError('User request not found')
        return request


class AuthService:
    """Sign-up, sign-in and sign-out on top of the identity provider."""
    
    def __init__(self, identity: IdentityProvider, requests: AccessRequestService, user_service: UserService):
        self.identity = identity
        self.requests = requests
        self.user_service = user_service
    
    async def sign_up(self, email: str, password: str) -> str:
        """Submit an access request instead of creating an account."""
        await self.requests.submit(email, password)
        return SIGNUP_MESSAGE
    
    async def sign_in(self, email: str, password: str) -> AuthUser:
        """
        Sign in, creating the account on the first sign-in after approval.
        
        The account is created with the password given here; the stored
        request digest is never used to authenticate.
        """
        email = normalize_email(email)
        try:
            user = await self.identity.sign_in(email, password)
        except (InvalidCredentialsError, UserNotFoundError):
            request = await self.requests.check_status(email)
            if request is None:
                raise
            if request.status == 'pending':
                raise AccessRequestError(PENDING_MESSAGE)
            if request.status == 'rejected':
                raise AccessRequestError(REJECTED_MESSAGE)
            
            try:
                user = await self.identity.create_account(email, password)
            except WeakPasswordError as e:
                raise WeakPasswordError('Your password is too weak. Please use a stronger password.') from e
            logger.info("Created account for approved request %s", request.id)
        
        await self.user_service.create_or_update_user(user.id, user.email or email)
        return user
    
    async def sign_out(self):
        await self.identity.sign_out()
    
    def current_user(self) -> Optional[AuthUser]:
        return self.identity.current_user()
