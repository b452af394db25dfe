"""Price entry data models."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from .timestamps import Timestamp


class Country(str, Enum):
    """Countries prices are compared between."""
    
    SE = 'SE'
    DK = 'DK'


class Currency(str, Enum):
    """Currencies prices are recorded in."""
    
    SEK = 'SEK'
    DKK = 'DKK'


class Unit(str, Enum):
    """Unit of the package size (``amount``)."""
    
    GRAM = 'gram'
    KILOGRAM = 'kilogram'
    MILLILITER = 'milliliter'
    LITER = 'liter'
    PIECES = 'pieces'


# Currency a country's prices are normally recorded in
COUNTRY_CURRENCY = {
    Country.SE: Currency.SEK,
    Country.DK: Currency.DKK,
}


class PriceEntry(BaseModel):
    """One user-submitted price observation."""
    
    id: Optional[str] = None
    grocery_type: str = Field(..., min_length=1)
    brand_name: Optional[str] = None
    price: Decimal = Field(..., gt=0)
    currency: Currency
    quantity: Optional[Decimal] = Field(None, ge=0)  # number of identical packages
    amount: Optional[Decimal] = Field(None, ge=0)  # package size in ``unit``
    unit: Optional[Unit] = None
    store: Optional[str] = None
    # Kept as a plain string so entries from other countries survive a round trip
    country: str
    date: date
    user_id: str
    user_email: Optional[str] = None
    created_at: Optional[Timestamp] = None
    
    def to_document(self) -> Dict[str, Any]:
        """Convert to the stored document shape (without ``id``)."""
        return self.model_dump(mode='json', exclude={'id'}, exclude_none=True)
    
    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "PriceEntry":
        """Create a PriceEntry from a stored document."""
        return cls.model_validate(document)


class PriceEntryFilters(BaseModel):
    """Price entry filtering options."""
    
    grocery_type: Optional[str] = None
    country: Optional[Country] = None
    store: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    
    def equality_filters(self) -> Dict[str, Any]:
        """Filters the document store can apply directly."""
        filters: Dict[str, Any] = {}
        if self.grocery_type:
            filters['grocery_type'] = self.grocery_type
        if self.country:
            filters['country'] = self.country.value
        if self.store:
            filters['store'] = self.store
        return filters
    
    def matches_dates(self, entry: PriceEntry) -> bool:
        if self.start_date and entry.date < self.start_date:
            return False
        if self.end_date and entry.date > self.end_date:
            return False
        return True


class AggregatedPrice(BaseModel):
    """Per-item average prices for both countries, in SEK-equivalent."""
    
    grocery_type: str
    avg_price_se: Optional[float] = None
    avg_price_dk: Optional[float] = None
    count_se: int = 0
    count_dk: int = 0
    difference: Optional[float] = None
    # Always <= 0: share saved by buying in the cheaper country
    percent_difference: Optional[float] = None
    
    @property
    def cheaper_country(self) -> Optional[Country]:
        """Country with the lower average, or None on a tie or missing side."""
        if self.avg_price_se is None or self.avg_price_dk is None:
            return None
        if self.avg_price_se < self.avg_price_dk:
            return Country.SE
        if self.avg_price_dk < self.avg_price_se:
            return Country.DK
        return None


class PriceSuggestions(BaseModel):
    """Distinct values seen in existing entries, for autocomplete."""
    
    grocery_types: list[str] = Field(default_factory=list)
    brand_names: list[str] = Field(default_factory=list)
    stores: list[str] = Field(default_factory=list)
