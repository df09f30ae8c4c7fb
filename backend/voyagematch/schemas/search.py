import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from voyagematch.schemas.enums import AccommodationType, FlightPreference, PriceRange, SearchMode
from voyagematch.services import preference_normalizer as normalizer

CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PreferenceSet(BaseModel):
    """What the traveller wants from a package, in canonical vocabulary."""

    model_config = CAMEL

    accommodation_types: list[AccommodationType] = Field(
        default_factory=lambda: [AccommodationType.HOTEL], alias="accommodationType"
    )
    price_range: PriceRange = PriceRange.MID
    amenities: list[str] = Field(default_factory=list)
    flight_preference: FlightPreference = FlightPreference.BEST_TIME

    @field_validator("accommodation_types", mode="before")
    @classmethod
    def _normalize_types(cls, value):
        return normalizer.normalize_accommodation_types(value)

    @field_validator("price_range", mode="before")
    @classmethod
    def _normalize_price_range(cls, value):
        return normalizer.normalize_price_range(value)

    @field_validator("amenities", mode="before")
    @classmethod
    def _normalize_amenities(cls, value):
        return normalizer.normalize_amenities(value)

    @field_validator("flight_preference", mode="before")
    @classmethod
    def _normalize_flight_preference(cls, value):
        return normalizer.normalize_flight_preference(value)


def default_preferences() -> PreferenceSet:
    """A fresh default preference set; callers may mutate it freely."""
    return PreferenceSet(
        accommodation_types=[AccommodationType.HOTEL],
        price_range=PriceRange.MID,
        amenities=[],
        flight_preference=FlightPreference.BEST_TIME,
    )


class SearchIntent(BaseModel):
    model_config = CAMEL

    destination: str | None = None
    check_in: date | None = None
    check_out: date | None = None
    guests: int = 2
    budget: float = 800.0
    preferences: PreferenceSet = Field(default_factory=default_preferences)
    confidence: float = 1.0
    # Which strategy produced the intent: "structured", a backend name, or "keyword_fallback"
    source: str = "structured"


# ─── Response models ───


class FlightOut(BaseModel):
    model_config = CAMEL

    id: str
    airline: str
    flight_number: str
    origin: str
    destination: str
    departure_time: datetime
    arrival_time: datetime
    duration: int
    price: float
    aircraft: str | None = None


class AccommodationOut(BaseModel):
    model_config = CAMEL

    id: str
    name: str
    type: AccommodationType
    address: str
    rating: float
    price_per_night: float
    total_nights: int
    total_price: float
    amenities: list[str]
    image_url: str | None = None
    description: str | None = None


class PackageOut(BaseModel):
    model_config = CAMEL

    id: str
    flight: FlightOut
    accommodation: AccommodationOut
    total_price: float
    score: int


class PriceRangeFacet(BaseModel):
    min: float
    max: float


class FacetsOut(BaseModel):
    model_config = CAMEL

    price_range: PriceRangeFacet
    ratings: list[int]
    airlines: list[str]
    accommodation_types: list[AccommodationType]


class SearchResponse(BaseModel):
    model_config = CAMEL

    packages: list[PackageOut]
    total: int
    total_matches: int
    search_time: int
    filters: FacetsOut
    mode: SearchMode
    original_query: str | None = None
    intent: SearchIntent | None = None


class SearchHistoryOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: uuid.UUID
    destination: str
    check_in: date
    check_out: date
    guests: int
    budget: float
    preferences: dict
    results_count: int
    search_mode: str
    original_query: str | None
    created_at: datetime | None


class BudgetSuggestions(BaseModel):
    budget: int
    comfortable: int
    luxury: int


class DestinationSuggestionOut(BaseModel):
    model_config = CAMEL

    name: str
    search_keyword: str
    country: str
    airport_code: str
    flights: int
    accommodations: int
    budget_suggestions: BudgetSuggestions
