"""Price normalization and per-item aggregation.

Every entry is reduced to a SEK-equivalent price per kilogram, per liter or
per piece before averaging, so entries with different package sizes, units
and currencies can be compared.
"""

from typing import Dict, Iterable, List, Optional

from ..config import exchange_rate_config
from ..models.price import AggregatedPrice, Country, Currency, PriceEntry, Unit

# Factor converting an amount to grams or milliliters
BASE_UNIT_FACTORS = {
    Unit.GRAM: 1,
    Unit.KILOGRAM: 1000,
    Unit.MILLILITER: 1,
    Unit.LITER: 1000,
}

FALLBACK_RATE = exchange_rate_config.fallback_rate


def normalize_price(entry: PriceEntry, rate: float = FALLBACK_RATE) -> float:
    """
    Normalize one entry's price.
    
    Args:
        entry: Price entry to normalize
        rate: DKK bought by 1 SEK; DKK prices are divided by it
    
    Returns:
        SEK-equivalent price per kilogram or liter for weight and volume
        units, per piece otherwise
    
    Example:
        10 DKK for 0.5 liter at rate 0.69 -> 10 / 500 ml * 1000 / 0.69 ~= 28.99
    """
    price = float(entry.price)
    # A missing or non-positive quantity counts as one package
    quantity = float(entry.quantity) if entry.quantity and entry.quantity > 0 else 1.0
    # A non-positive amount behaves like a zero one: price per package
    amount = max(float(entry.amount), 0.0) if entry.amount is not None else 1.0
    
    factor = BASE_UNIT_FACTORS.get(entry.unit)
    base_amount = amount * factor if factor else amount
    total = base_amount * quantity
    
    per_unit = price / total if total > 0 else price / quantity
    if factor:
        per_unit *= 1000
    
    if entry.currency == Currency.DKK:
        per_unit /= rate
    
    return per_unit


def _mean(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def percent_difference(avg_se: Optional[float], avg_dk: Optional[float]) -> Optional[float]:
    """Share saved by buying in the cheaper country, as a non-positive percentage."""
    if avg_se is None or avg_dk is None:
        return None
    
    highest = max(avg_se, avg_dk)
    if highest == 0:
        return 0.0
    return -(abs(highest - min(avg_se, avg_dk)) / highest) * 100


def aggregate(entries: Iterable[PriceEntry], rate: float = FALLBACK_RATE) -> List[AggregatedPrice]:
    """
    Average normalized prices per item and country.
    
    Items are grouped by lower-cased name and returned in order of first
    appearance. Entries from countries other than SE and DK are ignored.
    
    Args:
        entries: Price entries to aggregate
        rate: DKK bought by 1 SEK
    
    Returns:
        One AggregatedPrice per distinct item name
    """
    grouped: Dict[str, Dict[Country, List[float]]] = {}
    
    for entry in entries:
        key = entry.grocery_type.lower()
        buckets = grouped.setdefault(key, {Country.SE: [], Country.DK: []})
        
        try:
            country = Country(entry.country)
        except ValueError:
            continue
        buckets[country].append(normalize_price(entry, rate))
    
    results = []
    for grocery_type, buckets in grouped.items():
        avg_se = _mean(buckets[Country.SE])
        avg_dk = _mean(buckets[Country.DK])
        
        results.append(AggregatedPrice(
            grocery_type=grocery_type,
            avg_price_se=avg_se,
            avg_price_dk=avg_dk,
            count_se=len(buckets[Country.SE]),
            count_dk=len(buckets[Country.DK]),
            difference=avg_dk - avg_se if avg_se is not None and avg_dk is not None else None,
            percent_difference=percent_difference(avg_se, avg_dk),
        ))
    
    return results
