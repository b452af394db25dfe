"""Identity provider interface and the in-memory implementation."""

import hashlib
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from ..errors import EmailInUseError, InvalidCredentialsError, UserNotFoundError, WeakPasswordError
from ..models.user import AuthUser

logger = logging.getLogger(__name__)

AuthStateListener = Callable[[Optional[AuthUser]], None]


class IdentityProvider(ABC):
    """Abstract base for the identity provider.
    
    The provider is the only place passwords are checked. It also tracks the
    signed-in user of this session and notifies listeners when it changes.
    """
    
    def __init__(self):
        self._current_user: Optional[AuthUser] = None
        self._listeners: List[AuthStateListener] = []
    
    @abstractmethod
    async def create_account(self, email: str, password: str) -> AuthUser:
        """Create an account and sign it in."""
        
        raise NotImplementedError
    
    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in with email and password."""
        
        raise NotImplementedError
    
    async def sign_out(self):
        """End the current session."""
        
        self._set_current_user(None)
    
    def current_user(self) -> Optional[AuthUser]:
        return self._current_user
    
    def on_auth_state_changed(self, listener: AuthStateListener) -> Callable[[], None]:
        """Register a listener for session changes; returns an unsubscribe function."""
        
        self._listeners.append(listener)
        
        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        
        return unsubscribe
    
    def _set_current_user(self, user: Optional[AuthUser]):
        self._current_user = user
        for listener in list(self._listeners):
            listener(user)


class MemoryIdentityProvider(IdentityProvider):
    """Accounts held in process memory, for local development and tests."""
    
    MIN_PASSWORD_LENGTH = 6
    
    def __init__(self):
        super().__init__()
        self.accounts: Dict[str, Dict[str, str]] = {}
    
    async def create_account(self, email: str, password: str) -> AuthUser:
        email = email.strip().lower()
        if email in self.accounts:
            raise EmailInUseError()
        if len(password) < self.MIN_PASSWORD_LENGTH:
            raise WeakPasswordError()
        
        self.accounts[email] = {
            'id': uuid.uuid4().hex,
            'password': self._digest(password),
        }
        logger.info("Created account for %s", email)
        
        user = AuthUser(id=self.accounts[email]['id'], email=email)
        self._set_current_user(user)
        return user
    
    async def sign_in(self, email: str, password: str) -> AuthUser:
        email = email.strip().lower()
        account = self.accounts.get(email)
        if account is None:
            raise UserNotFoundError()
        if account['password'] != self._digest(password):
            raise InvalidCredentialsError()
        
        user = AuthUser(id=account['id'], email=email)
        self._set_current_user(user)
        return user
    
    @staticmethod
    def _digest(password: str) -> str:
        return hashlib.sha256(password.encode('utf-8')).hexdigest()
