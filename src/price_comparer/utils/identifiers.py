"""Identifier and digest utilities for user records."""

import hashlib
import re


TEMP_USER_PREFIX = 'pending_'

_NON_ALPHANUMERIC = re.compile(r'[^a-zA-Z0-9]')


def normalize_email(email: str) -> str:
    """Lower-case and strip an email so lookups are case-insensitive."""
    return email.strip().lower()


def temp_user_id(email: str) -> str:
    """
    Build the placeholder user id used between approval and first sign-in.
    
    Every character that is not an ASCII letter or digit becomes ``_``.
    
    Example:
        >>> temp_user_id("anna.berg@mail.se")
        'pending_anna_berg_mail_se'
    """
    return TEMP_USER_PREFIX + _NON_ALPHANUMERIC.sub('_', email)


def is_temp_user_id(user_id: str) -> bool:
    return user_id.startswith(TEMP_USER_PREFIX)


def hash_password(password: str) -> str:
    """One-way SHA-256 hex digest of a password.
    
    Only used to keep the plaintext out of stored requests; the identity
    provider is what authenticates.
    """
    return hashlib.sha256(password.encode('utf-8')).hexdigest()
