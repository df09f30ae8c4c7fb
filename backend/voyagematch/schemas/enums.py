from enum import Enum


class AccommodationType(str, Enum):
    HOTEL = "HOTEL"
    HOSTEL = "HOSTEL"
    APARTMENT = "APARTMENT"
    BNB = "BNB"
    RESORT = "RESORT"
    VILLA = "VILLA"


class PriceRange(str, Enum):
    BUDGET = "budget"
    MID = "mid"
    LUXURY = "luxury"


class FlightPreference(str, Enum):
    CHEAPEST = "cheapest"
    SHORTEST = "shortest"
    BEST_TIME = "best_time"


class SearchMode(str, Enum):
    CLASSIC = "classic"
    AI = "ai"
