"""Price comparer utilities."""

from .identifiers import hash_password, is_temp_user_id, normalize_email, temp_user_id
from .json_processor import JSONProcessor

__all__ = ['hash_password', 'is_temp_user_id', 'normalize_email', 'temp_user_id', 'JSONProcessor']
