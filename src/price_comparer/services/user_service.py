"""User account service."""

import logging
from typing import Iterable, List, Optional

from ..config import app_config
from ..database.store import DocumentStore
from ..errors import NotFoundError, PermissionDeniedError
from ..models.timestamps import to_timestamp
from ..models.user import AppUser, utc_now
from ..utils.identifiers import is_temp_user_id, normalize_email, temp_user_id

logger = logging.getLogger(__name__)

USERS_COLLECTION = 'users'


def is_admin(email: Optional[str], admin_emails: Optional[Iterable[str]] = None) -> bool:
    """Check an email against the configured administrators."""
    if not email:
        return False
    admins = app_config.admin_emails if admin_emails is None else admin_emails
    return normalize_email(email) in {normalize_email(a) for a in admins}


class UserService:
    """Service for application user records."""
    
    def __init__(self, store: DocumentStore, admin_emails: Optional[Iterable[str]] = None):
        self.store = store
        self.admin_emails = list(admin_emails) if admin_emails is not None else app_config.admin_emails
    
    def is_admin(self, email: Optional[str]) -> bool:
        return is_admin(email, self.admin_emails)
    
    def require_admin(self, email: Optional[str]):
        if not self.is_admin(email):
            raise PermissionDeniedError('Only an administrator can do this')
    
    async def get_by_id(self, user_id: str) -> Optional[AppUser]:
        document = await self.store.get(USERS_COLLECTION, user_id)
        if not document:
            return None
        return AppUser.from_document(document)
    
    async def create_temp_user(self, email: str) -> AppUser:
        """Create the placeholder record shown between approval and first sign-in.
        
        An existing placeholder is left untouched.
        """
        user_id = temp_user_id(email)
        existing = await self.get_by_id(user_id)
        if existing:
            return existing
        
        user = AppUser(id=user_id, email=email, is_contributor=False, is_pending=True)
        await self.store.set(USERS_COLLECTION, user_id, user.to_document())
        logger.info("Created temporary user %s", user_id)
        return user
    
    async def create_or_update_user(self, user_id: str, email: str, is_contributor: bool = False) -> AppUser:
        """
        Materialize the real user record on sign-in.
        
        A new record takes the contributor flag and creation time from the
        placeholder record, which is then deleted. The write and the delete
        are separate operations; a failure in between leaves both records.
        
        Args:
            user_id: Identity provider subject id
            email: Account email
            is_contributor: Contributor flag when there is no placeholder
        
        Returns:
            The stored user record
        """
        now = utc_now()
        existing = await self.get_by_id(user_id)
        
        if existing:
            await self.store.update_fields(USERS_COLLECTION, user_id, {
                'last_login': to_timestamp(now),
                'is_pending': False,
            })
            return existing.model_copy(update={'last_login': now, 'is_pending': False})
        
        temp_id = temp_user_id(email)
        temp_user = await self.get_by_id(temp_id)
        
        user = AppUser(
            id=user_id,
            email=email,
            is_contributor=temp_user.is_contributor if temp_user else is_contributor,
            is_pending=False,
            created_at=temp_user.created_at if temp_user else now,
            last_login=now,
        )
        await self.store.set(USERS_COLLECTION, user_id, user.to_document())
        
        if temp_user:
            await self.store.delete(USERS_COLLECTION, temp_id)
            logger.info("Merged temporary user %s into %s", temp_id, user_id)
        
        return user
    
    async def get_contributor_status(self, user_id: str) -> bool:
        user = await self.get_by_id(user_id)
        return user.is_contributor if user else False
    
    async def set_contributor(self, user_id: str, is_contributor: bool, admin_email: str):
        """Grant or revoke permission to submit price entries."""
        self.require_admin(admin_email)
        if not await self.get_by_id(user_id):
            raise NotFoundError(f"User {user_id} not found")
        
        await self.store.update_fields(USERS_COLLECTION, user_id, {'is_contributor': is_contributor})
        logger.info("Set contributor=%s for %s", is_contributor, user_id)
    
    async def get_all_users(self) -> List[AppUser]:
        """All user records, placeholders included (flagged ``is_pending``)."""
        documents = await self.store.get_all(USERS_COLLECTION)
        users = [AppUser.from_document(document) for document in documents]
        return [
            user.model_copy(update={'is_pending': True}) if is_temp_user_id(user.id) else user
            for user in users
        ]
