"""Translation storage and lookup."""

import logging
from typing import Dict, Iterable, List, Optional

from ..database.store import DocumentStore
from ..errors import NotFoundError
from ..models.translation import Language, Translation

logger = logging.getLogger(__name__)

TRANSLATIONS_COLLECTION = 'translations'


class TranslationService:
    """Service for interface translations."""
    
    def __init__(self, store: DocumentStore):
        self.store = store
    
    async def get_all(self) -> List[Translation]:
        documents = await self.store.find(TRANSLATIONS_COLLECTION, order_by='en')
        return [Translation.from_document(document) for document in documents]
    
    async def create(self, translation: Translation) -> Translation:
        """Store a translation under its English text (replacing any existing one)."""
        await self.store.set(TRANSLATIONS_COLLECTION, translation.en, translation.to_document())
        return translation.model_copy(update={'id': translation.en})
    
    async def update(self, translation_id: str, da: Optional[str] = None, sv: Optional[str] = None):
        fields = {}
        if da is not None:
            fields['da'] = da
        if sv is not None:
            fields['sv'] = sv
        if fields:
            await self.store.update_fields(TRANSLATIONS_COLLECTION, translation_id, fields)
    
    async def delete(self, translation_id: str):
        if not await self.store.delete(TRANSLATIONS_COLLECTION, translation_id):
            raise NotFoundError('Translation not found')
    
    async def load_translator(self, language: Language = Language.EN) -> "Translator":
        """Load every translation once into a Translator."""
        try:
            translations = await self.get_all()
        except Exception as e:
            # Untranslated keys still render as English
            logger.error("Failed to load translations: %s", e)
            translations = []
        return Translator(translations, language)


class Translator:
    """Looks up interface text in the current language."""
    
    def __init__(self, translations: Iterable[Translation] = (), language: Language = Language.EN):
        self.translations: Dict[str, Translation] = {t.en: t for t in translations}
        self.language = Language(language)
    
    def set_language(self, language: Language):
        self.language = Language(language)
    
    def t(self, key: str) -> str:
        """Text for ``key`` in the current language, or the key itself."""
        translation = self.translations.get(key)
        if not translation:
            return key
        return translation.text_for(self.language) or key
