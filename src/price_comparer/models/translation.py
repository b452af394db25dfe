"""Translation models."""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class Language(str, Enum):
    """Languages the interface text is available in."""
    
    EN = 'en'
    DA = 'da'
    SV = 'sv'


class Translation(BaseModel):
    """One interface string; the English text doubles as its id."""
    
    id: Optional[str] = None
    en: str = Field(..., min_length=1)
    da: str = ''
    sv: str = ''
    
    def text_for(self, language: Language) -> str:
        return getattr(self, Language(language).value)
    
    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(exclude={'id'})
    
    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Translation":
        return cls.model_validate(document)
