"""Access request and user account models."""

from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, EmailStr, Field

from ..errors import InvalidTransitionError
from .timestamps import Timestamp, utc_now


class PendingState(BaseModel):
    """Request is waiting for an administrator."""
    
    status: Literal['pending'] = 'pending'


class ApprovedState(BaseModel):
    """Request was approved; the account is created on first sign-in."""
    
    status: Literal['approved'] = 'approved'
    reviewed_by: str
    reviewed_at: Timestamp


class RejectedState(BaseModel):
    """Request was rejected; only an administrator can undo this."""
    
    status: Literal['rejected'] = 'rejected'
    reviewed_by: str
    reviewed_at: Timestamp


RequestState = Annotated[
    Union[PendingState, ApprovedState, RejectedState],
    Field(discriminator='status'),
]


class UserRequest(BaseModel):
    """A request for access to the system.
    
    The lifecycle is ``pending -> approved | rejected``. Transitions return a
    new instance and refuse to leave a terminal state.
    """
    
    id: Optional[str] = None
    email: EmailStr
    password_hash: Optional[str] = None  # one-way digest, never used to authenticate
    requested_at: Timestamp = Field(default_factory=utc_now)
    state: RequestState = Field(default_factory=PendingState)
    
    @property
    def status(self) -> str:
        return self.state.status
    
    @property
    def reviewed_by(self) -> Optional[str]:
        return getattr(self.state, 'reviewed_by', None)
    
    @property
    def reviewed_at(self) -> Optional[datetime]:
        return getattr(self.state, 'reviewed_at', None)
    
    def approve(self, reviewer: str, at: Optional[datetime] = None) -> "UserRequest":
        self._require_pending('approve')
        return self.model_copy(update={
            'state': ApprovedState(reviewed_by=reviewer, reviewed_at=at or utc_now()),
        })
    
    def reject(self, reviewer: str, at: Optional[datetime] = None) -> "UserRequest":
        self._require_pending('reject')
        return self.model_copy(update={
            'state': RejectedState(reviewed_by=reviewer, reviewed_at=at or utc_now()),
            'password_hash': None,
        })
    
    def _require_pending(self, action: str):
        if not isinstance(self.state, PendingState):
            raise InvalidTransitionError(
                f"Cannot {action} a request that is already {self.status}"
            )
    
    def to_document(self) -> Dict[str, Any]:
        """Flatten the state into the stored document shape."""
        document = self.model_dump(mode='json', exclude={'id', 'state'})
        document.update(self.state.model_dump(mode='json'))
        return document
    
    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "UserRequest":
        """Create a UserRequest from a stored document."""
        state: Dict[str, Any] = {'status': document.get('status', 'pending')}
        if state['status'] != 'pending':
            state['reviewed_by'] = document.get('reviewed_by')
            state['reviewed_at'] = document.get('reviewed_at')
        
        return cls(
            id=document.get('id'),
            email=document['email'],
            password_hash=document.get('password_hash') or None,
            requested_at=document['requested_at'],
            state=state,
        )


class AppUser(BaseModel):
    """Application-side user record.
    
    ``id`` is the identity provider's subject id, or a ``pending_`` id derived
    from the email between approval and first sign-in.
    """
    
    id: str
    email: str
    is_contributor: bool = False
    is_pending: bool = False
    created_at: Timestamp = Field(default_factory=utc_now)
    last_login: Timestamp = Field(default_factory=utc_now)
    
    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', exclude={'id'})
    
    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "AppUser":
        return cls.model_validate(document)


class AuthUser(BaseModel):
    """An account known to the identity provider."""
    
    id: str
    email: str
    access_token: Optional[str] = None
