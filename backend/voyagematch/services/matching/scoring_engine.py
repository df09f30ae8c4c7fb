"""Scoring engine — rates packages 0-100 against the traveller's preferences."""

import math
from datetime import datetime

from voyagematch.schemas.enums import FlightPreference
from voyagematch.schemas.search import PreferenceSet
from voyagematch.services.matching.candidate_generator import PackageCandidate
from voyagematch.services.matching.config import FlightTimeBands, MatchingPolicy, matching_policy


def score_package(
    package: PackageCandidate,
    preferences: PreferenceSet,
    budget: float,
    policy: MatchingPolicy = matching_policy,
) -> int:
    """
    Score a single package.

    Components (each 0-1): price headroom, accommodation rating, amenity
    coverage, departure-time fit, accommodation-type match. The weighted sum
    is scaled to 0-100 and rounded half-up.
    """
    weights = policy.weights
    components = policy.components

    # Price: 1 at zero cost, 0 once the budget is reached
    price_score = max(0.0, 1.0 - package.total_price / budget) if budget > 0 else 0.0

    rating = min(max(package.accommodation.rating, 0.0), components.max_rating)
    rating_score = rating / components.max_rating

    wanted = preferences.amenities
    if wanted:
        offered = set(package.accommodation.amenities)
        amenities_score = sum(1 for a in wanted if a in offered) / len(wanted)
    else:
        amenities_score = components.neutral_amenities

    departure_hour = _extract_hour(package.flight.departure_time)
    flight_time_score = flight_time_fit(departure_hour, preferences.flight_preference, policy.flight_time)

    if package.accommodation.type in preferences.accommodation_types:
        type_score = components.type_match
    else:
        type_score = components.type_near_miss

    composite = (
        weights.price * price_score
        + weights.rating * rating_score
        + weights.amenities * amenities_score
        + weights.flight_time * flight_time_score
        + weights.accommodation_type * type_score
    )

    final_score = math.floor(composite * 100 + 0.5)
    return min(100, max(0, final_score))


def score_packages(
    packages: list[PackageCandidate],
    preferences: PreferenceSet,
    budget: float,
    policy: MatchingPolicy = matching_policy,
) -> list[PackageCandidate]:
    """Set ``score`` on every package in place; returns the same list."""
    for package in packages:
        package.score = score_package(package, preferences, budget, policy)
    return packages


def flight_time_fit(hour: int, preference: FlightPreference | str, bands: FlightTimeBands) -> float:
    if preference == FlightPreference.BEST_TIME:
        if any(lo <= hour <= hi for lo, hi in bands.best_time_prime):
            return bands.best_time_prime_score
        lo, hi = bands.best_time_acceptable
        if lo <= hour <= hi:
            return bands.best_time_acceptable_score
        return bands.best_time_other_score
    if preference == FlightPreference.CHEAPEST:
        return bands.cheapest_score
    if preference == FlightPreference.SHORTEST:
        lo, hi = bands.shortest_daytime
        return bands.shortest_daytime_score if lo <= hour <= hi else bands.shortest_other_score
    return bands.unknown_preference_score


def _extract_hour(departure: datetime | str) -> int:
    """Departure hour from a datetime or ISO string; noon when unreadable."""
    if isinstance(departure, datetime):
        return departure.hour
    if not departure:
        return 12
    try:
        return datetime.fromisoformat(str(departure)).hour
    except ValueError:
        return 12
