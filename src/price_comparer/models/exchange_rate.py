"""Exchange rate model."""

from datetime import datetime
from typing import Any, Dict
from pydantic import BaseModel, Field

from .timestamps import Timestamp


class ExchangeRate(BaseModel):
    """Cached SEK to DKK rate (1 SEK buys ``sek_to_dkk`` DKK)."""
    
    sek_to_dkk: float = Field(..., gt=0)
    last_updated: Timestamp
    source: str
    
    def age_hours(self, now: datetime) -> float:
        return (now - self.last_updated).total_seconds() / 3600
    
    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode='json')
    
    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "ExchangeRate":
        return cls.model_validate(document)
