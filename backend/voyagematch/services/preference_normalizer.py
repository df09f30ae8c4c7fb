"""Preference normalizer — maps free-form travel vocabulary to canonical values."""

from collections.abc import Iterable

from voyagematch.data.vocabulary import (
    ACCOMMODATION_TYPE_SYNONYMS,
    AMENITY_SYNONYMS,
    CITY_SYNONYMS,
    FLIGHT_PREFERENCE_SYNONYMS,
    PRICE_RANGE_SYNONYMS,
)
from voyagematch.schemas.enums import AccommodationType, FlightPreference, PriceRange

DEFAULT_ACCOMMODATION_TYPE = AccommodationType.HOTEL
DEFAULT_PRICE_RANGE = PriceRange.MID
DEFAULT_FLIGHT_PREFERENCE = FlightPreference.BEST_TIME


def _key(token) -> str:
    return str(token).strip().lower()


def normalize_destination(name: str | None) -> str | None:
    """Canonical catalogue name for a city; unknown cities pass through trimmed."""
    if name is None:
        return None
    cleaned = str(name).strip()
    if not cleaned:
        return None
    return CITY_SYNONYMS.get(cleaned.lower(), cleaned)


def lookup_accommodation_type(phrase) -> AccommodationType | None:
    if phrase is None:
        return None
    if isinstance(phrase, AccommodationType):
        return phrase
    key = _key(phrase)
    mapped = ACCOMMODATION_TYPE_SYNONYMS.get(key)
    if mapped:
        return AccommodationType(mapped)
    try:
        return AccommodationType(key.upper())
    except ValueError:
        return None


def normalize_accommodation_type(phrase) -> AccommodationType:
    """Single phrase → type. Anything unrecognised is a plain hotel."""
    return lookup_accommodation_type(phrase) or DEFAULT_ACCOMMODATION_TYPE


def normalize_accommodation_types(phrases) -> list[AccommodationType]:
    """Map a phrase or list of phrases to a non-empty, duplicate-free type list.

    Unrecognised entries are dropped; an empty outcome falls back to
    ``[HOTEL]``.
    """
    if phrases is None:
        return [DEFAULT_ACCOMMODATION_TYPE]
    if isinstance(phrases, (str, AccommodationType)):
        phrases = [phrases]
    if not isinstance(phrases, Iterable):
        raise ValueError(f"Expected a phrase or a list of phrases, got {type(phrases).__name__}")

    types: list[AccommodationType] = []
    for phrase in phrases:
        mapped = lookup_accommodation_type(phrase)
        if mapped and mapped not in types:
            types.append(mapped)
    return types or [DEFAULT_ACCOMMODATION_TYPE]


def normalize_amenities(amenities: Iterable | None) -> list[str]:
    """Map amenities to canonical names, dropping blanks and duplicates (first seen wins)."""
    if not amenities:
        return []
    if isinstance(amenities, str):
        amenities = [amenities]
    if not isinstance(amenities, Iterable):
        raise ValueError(f"Expected a list of amenities, got {type(amenities).__name__}")

    normalized: list[str] = []
    for amenity in amenities:
        cleaned = str(amenity).strip()
        if not cleaned:
            continue
        mapped = AMENITY_SYNONYMS.get(cleaned.lower(), cleaned)
        if mapped not in normalized:
            normalized.append(mapped)
    return normalized


def normalize_price_range(value) -> PriceRange:
    if isinstance(value, PriceRange):
        return value
    if value is None:
        return DEFAULT_PRICE_RANGE
    mapped = PRICE_RANGE_SYNONYMS.get(_key(value))
    return PriceRange(mapped) if mapped else DEFAULT_PRICE_RANGE


def normalize_flight_preference(value) -> FlightPreference:
    if isinstance(value, FlightPreference):
        return value
    if value is None:
        return DEFAULT_FLIGHT_PREFERENCE
    mapped = FLIGHT_PREFERENCE_SYNONYMS.get(_key(value))
    return FlightPreference(mapped) if mapped else DEFAULT_FLIGHT_PREFERENCE
