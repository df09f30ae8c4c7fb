"""Candidate generator — bounded flight × accommodation cross-product under budget."""

import logging
from dataclasses import dataclass

from voyagematch.services.data_provider import AccommodationCandidate, FlightCandidate
from voyagematch.services.matching.config import MatchingPolicy, matching_policy

logger = logging.getLogger(__name__)


@dataclass
class PackageCandidate:
    flight: FlightCandidate
    accommodation: AccommodationCandidate
    nights: int
    lodging_total: float
    total_price: float
    score: int = 0

    @property
    def id(self) -> str:
        return f"{self.flight.id}-{self.accommodation.id}"


def generate_packages(
    flights: list[FlightCandidate],
    accommodations: list[AccommodationCandidate],
    nights: int,
    budget: float,
    policy: MatchingPolicy = matching_policy,
) -> list[PackageCandidate]:
    """Pair the first N flights with the first M accommodations, keeping affordable ones.

    Flights are the outer loop and accommodations the inner one, both in input
    order, so the output order is reproducible for identical inputs.
    """
    flight_pool = flights[: policy.limits.max_flights]
    accommodation_pool = accommodations[: policy.limits.max_accommodations]

    packages: list[PackageCandidate] = []
    for flight in flight_pool:
        for accommodation in accommodation_pool:
            lodging_total = accommodation.price_per_night * nights
            total_price = flight.price + lodging_total
            if total_price <= budget:
                packages.append(
                    PackageCandidate(
                        flight=flight,
                        accommodation=accommodation,
                        nights=nights,
                        lodging_total=lodging_total,
                        total_price=total_price,
                    )
                )

    logger.debug(
        f"Generated {len(packages)} affordable packages from "
        f"{len(flight_pool)}x{len(accommodation_pool)} pairs (budget {budget})"
    )
    return packages
