"""
Supabase identity provider backed by the GoTrue REST API.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import supabase_config
from ..errors import (
    EmailInUseError, IdentityProviderError, InvalidCredentialsError, WeakPasswordError,
)
from ..models.user import AuthUser
from .identity_provider import IdentityProvider

logger = logging.getLogger(__name__)


class SupabaseIdentityProvider(IdentityProvider):
    def __init__(
        self,
        url: Optional[str] = None,
        anon_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__()
        self.url = (url or supabase_config.url or '').rstrip('/')
        self.anon_key = anon_key or supabase_config.anon_key
        self.timeout = timeout or supabase_config.timeout
        self.transport = transport
        
        if not self.url:
            logger.warning("Supabase URL not configured")
        if not self.anon_key:
            logger.warning("Supabase anon key not configured")
    
    async def create_account(self, email: str, password: str) -> AuthUser:
        """
        Create a Supabase account
        
        Args:
            email: Account email
            password: Plaintext password, checked against the project's password policy
        
        Returns:
            The new account, signed in when the project auto-confirms emails
        """
        data = await self._post('/auth/v1/signup', {'email': email, 'password': password})
        
        user = self._auth_user(data)
        if data.get('access_token'):
            self._set_current_user(user)
        logger.info("Created Supabase account for %s", user.email)
        return user
    
    async def sign_in(self, email: str, password: str) -> AuthUser:
        data = await self._post(
            '/auth/v1/token',
            {'email': email, 'password': password},
            params={'grant_type': 'password'},
        )
        
        user = self._auth_user(data)
        self._set_current_user(user)
        logger.info("Signed in %s", user.email)
        return user
    
    async def sign_out(self):
        user = self.current_user()
        if user and user.access_token:
            async with self._client() as client:
                response = await client.post(
                    '/auth/v1/logout',
                    headers={'Authorization': f"Bearer {user.access_token}"},
                )
            if response.status_code >= 400:
                raise self._error_from_response(response)
        await super().sign_out()
    
    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.url,
            headers={
                'apikey': self.anon_key or '',
                'Content-Type': 'application/json',
            },
            timeout=self.timeout,
            transport=self.transport,
        )
    
    async def _post(self, path: str, payload: Dict[str, Any], params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        async with self._client() as client:
            response = await client.post(path, json=payload, params=params)
        
        if response.status_code >= 400:
            raise self._error_from_response(response)
        return response.json()
    
    @staticmethod
    def _auth_user(data: Dict[str, Any]) -> AuthUser:
        user_data = data.get('user') or data
        return AuthUser(
            id=user_data['id'],
            email=user_data.get('email', ''),
            access_token=data.get('access_token'),
        )
    
    @staticmethod
    def _error_from_response(response: httpx.Response) -> IdentityProviderError:
        """Map a GoTrue error body onto the application's error types."""
        try:
            body = response.json()
        except ValueError:
            body = {}
        
        code = body.get('error_code') or body.get('error') or str(response.status_code)
        message = body.get('msg') or body.get('error_description') or body.get('message') or response.text
        
        if code == 'weak_password':
            return WeakPasswordError()
        if code in ('invalid_credentials', 'invalid_grant'):
            return InvalidCredentialsError(message)
        if code in ('user_already_exists', 'email_exists'):
            return EmailInUseError(message)
        
        logger.warning("Supabase request failed: %s %s", response.status_code, message)
        return IdentityProviderError(message, code=code)
