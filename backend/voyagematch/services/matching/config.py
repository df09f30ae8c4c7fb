"""Package matching configuration — single source for ratios, weights and limits."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BudgetRatios:
    """Share of the total budget each pool may spend on its own.

    The ratios may sum past 1.0. They only pre-filter provider lookups;
    the combined total is checked against the full budget afterwards.
    """
    flight: float = 0.60
    lodging: float = 0.70


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the five score components. Sum to 1.0."""
    price: float = 0.35
    rating: float = 0.25
    amenities: float = 0.15
    flight_time: float = 0.15
    accommodation_type: float = 0.10


@dataclass(frozen=True)
class ComponentScores:
    """Fixed component values for the non-proportional factors."""
    neutral_amenities: float = 0.5       # user asked for no amenities
    type_match: float = 1.0
    type_near_miss: float = 0.3          # wrong type still has some value
    max_rating: float = 5.0


@dataclass(frozen=True)
class FlightTimeBands:
    """Departure-hour bands per flight preference (inclusive hours)."""
    best_time_prime: tuple[tuple[int, int], ...] = ((8, 12), (14, 18))
    best_time_acceptable: tuple[int, int] = (6, 20)
    best_time_prime_score: float = 1.0
    best_time_acceptable_score: float = 0.7
    best_time_other_score: float = 0.3
    cheapest_score: float = 0.5          # time is irrelevant
    shortest_daytime: tuple[int, int] = (9, 17)
    shortest_daytime_score: float = 0.8
    shortest_other_score: float = 0.5
    unknown_preference_score: float = 0.5


@dataclass(frozen=True)
class CandidateLimits:
    """Bounds on the combinatorial search and result size."""
    max_flights: int = 15
    max_accommodations: int = 10
    top_results: int = 10
    guests_per_room: int = 2


@dataclass(frozen=True)
class MatchingPolicy:
    """Top-level policy aggregating all sub-configs."""
    budget: BudgetRatios = field(default_factory=BudgetRatios)
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    components: ComponentScores = field(default_factory=ComponentScores)
    flight_time: FlightTimeBands = field(default_factory=FlightTimeBands)
    limits: CandidateLimits = field(default_factory=CandidateLimits)


# Singleton, import this everywhere
matching_policy = MatchingPolicy()
