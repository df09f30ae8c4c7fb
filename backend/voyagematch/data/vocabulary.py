"""Static synonym tables for free-form travel vocabulary.

Used for:
- destination lookup (Italian and English city names → catalogue display name)
- accommodation-type and amenity normalization (LLM output, query keywords)
- price-tier and flight-preference cues in free text

All keys are lowercase; lookups lowercase their input first.
"""

# City synonym → canonical catalogue name
CITY_SYNONYMS: dict[str, str] = {
    "parigi": "Parigi",
    "paris": "Parigi",
    "roma": "Roma",
    "rome": "Roma",
    "milano": "Milano",
    "milan": "Milano",
    "barcellona": "Barcellona",
    "barcelona": "Barcellona",
    "amsterdam": "Amsterdam",
    "londra": "Londra",
    "london": "Londra",
    "berlino": "Berlino",
    "berlin": "Berlino",
    "praga": "Praga",
    "prague": "Praga",
    "praha": "Praga",
}

# Accommodation-type phrase → AccommodationType value
ACCOMMODATION_TYPE_SYNONYMS: dict[str, str] = {
    "hotel": "HOTEL",
    "albergo": "HOTEL",
    "hotel elegante": "HOTEL",
    "elegant hotel": "HOTEL",
    "hotel di lusso": "HOTEL",
    "luxury hotel": "HOTEL",
    "ostello": "HOSTEL",
    "hostel": "HOSTEL",
    "appartamento": "APARTMENT",
    "apartment": "APARTMENT",
    "flat": "APARTMENT",
    "b&b": "BNB",
    "bnb": "BNB",
    "bed and breakfast": "BNB",
    "bed & breakfast": "BNB",
    "resort": "RESORT",
    "villa": "VILLA",
}

# Keyword scanned in free text → AccommodationType value (substring match)
ACCOMMODATION_TYPE_KEYWORDS: dict[str, str] = {
    "hotel": "HOTEL",
    "albergo": "HOTEL",
    "ostell": "HOSTEL",
    "hostel": "HOSTEL",
    "appartament": "APARTMENT",
    "apartment": "APARTMENT",
    "b&b": "BNB",
    "bed and breakfast": "BNB",
    "resort": "RESORT",
    "villa": "VILLA",
}

# Amenity phrase → canonical amenity name as stored on accommodations
AMENITY_SYNONYMS: dict[str, str] = {
    "piscina": "Piscina",
    "pool": "Piscina",
    "swimming pool": "Piscina",
    "spa": "Spa",
    "palestra": "Palestra",
    "gym": "Palestra",
    "fitness": "Palestra",
    "colazione": "Colazione Inclusa",
    "colazione inclusa": "Colazione Inclusa",
    "breakfast": "Colazione Inclusa",
    "wifi": "WiFi Gratuito",
    "wi-fi": "WiFi Gratuito",
    "wifi gratuito": "WiFi Gratuito",
    "free wifi": "WiFi Gratuito",
    "parcheggio": "Parcheggio",
    "parking": "Parcheggio",
    "bar": "Bar",
    "ristorante": "Ristorante",
    "restaurant": "Ristorante",
    "animali": "Animali Ammessi",
    "animali ammessi": "Animali Ammessi",
    "pet friendly": "Animali Ammessi",
    "aria condizionata": "Aria Condizionata",
    "air conditioning": "Aria Condizionata",
    "reception 24h": "Reception 24h",
    "centro business": "Centro Business",
    "business center": "Centro Business",
}

# Keyword scanned in free text → canonical amenity (substring match)
AMENITY_KEYWORDS: dict[str, str] = {
    "piscina": "Piscina",
    "pool": "Piscina",
    "spa": "Spa",
    "palestra": "Palestra",
    "gym": "Palestra",
    "colazione": "Colazione Inclusa",
    "breakfast": "Colazione Inclusa",
    "wifi": "WiFi Gratuito",
    "parcheggio": "Parcheggio",
    "parking": "Parcheggio",
    "ristorante": "Ristorante",
    "restaurant": "Ristorante",
    "animali": "Animali Ammessi",
}

PRICE_RANGE_SYNONYMS: dict[str, str] = {
    "budget": "budget",
    "economico": "budget",
    "economica": "budget",
    "cheap": "budget",
    "low cost": "budget",
    "mid": "mid",
    "medio": "mid",
    "moderate": "mid",
    "luxury": "luxury",
    "lusso": "luxury",
    "elegante": "luxury",
    "premium": "luxury",
}

FLIGHT_PREFERENCE_SYNONYMS: dict[str, str] = {
    "cheapest": "cheapest",
    "economico": "cheapest",
    "più economico": "cheapest",
    "shortest": "shortest",
    "fastest": "shortest",
    "veloce": "shortest",
    "diretto": "shortest",
    "direct": "shortest",
    "best_time": "best_time",
    "best time": "best_time",
    "orario migliore": "best_time",
}

# Free-text cues for guest count when no explicit number is given
GROUP_SIZE_CUES: dict[str, int] = {
    "famiglia": 4,
    "family": 4,
    "coppia": 2,
    "couple": 2,
    "romantic": 2,
    "romantico": 2,
    "da solo": 1,
    "da sola": 1,
    "solo trip": 1,
}
