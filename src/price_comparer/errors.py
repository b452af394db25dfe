"""Exceptions raised by price comparer services.

Messages on the business-rule errors are written for end users and are shown
verbatim by the CLI.
"""


class PriceComparerError(Exception):
    """Base class for all application errors."""


class NotFoundError(PriceComparerError):
    """A requested document does not exist."""


class PermissionDeniedError(PriceComparerError):
    """The acting user may not perform the operation."""


class InvalidTransitionError(PriceComparerError):
    """An access request cannot move to the requested state."""


class AccessRequestError(PriceComparerError):
    """An access request or sign-in was refused for a business reason."""


class DuplicateRequestError(AccessRequestError):
    """A pending request already exists for the email."""


class RejectedRequestError(AccessRequestError):
    """A previous request for the email was rejected."""


class IdentityProviderError(PriceComparerError):
    """Error reported by the identity provider."""
    
    def __init__(self, message: str, code: str = 'unknown'):
        super().__init__(message)
        self.code = code


class InvalidCredentialsError(IdentityProviderError):
    """Email/password combination was not accepted."""
    
    def __init__(self, message: str = 'Invalid login credentials'):
        super().__init__(message, code='invalid_credentials')


class UserNotFoundError(IdentityProviderError):
    """No account exists for the email."""
    
    def __init__(self, message: str = 'User not found'):
        super().__init__(message, code='user_not_found')


class EmailInUseError(IdentityProviderError):
    """An account already exists for the email."""
    
    def __init__(self, message: str = 'User already registered'):
        super().__init__(message, code='email_exists')


class WeakPasswordError(IdentityProviderError, AccessRequestError):
    """The identity provider refused the password as too weak."""
    
    def __init__(self, message: str = 'Your password is too weak. Please use a stronger password.'):
        IdentityProviderError.__init__(self, message, code='weak_password')


class BulkDeleteError(PriceComparerError):
    """At least one delete in a batch failed."""
    
    def __init__(self, message: str, failed: int, total: int):
        super().__init__(message)
        self.failed = failed
        self.total = total
