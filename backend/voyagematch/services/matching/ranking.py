"""Ranker and facet builder — top-N packages plus filter facets over all matches."""

import math
from dataclasses import dataclass, field

from voyagematch.schemas.enums import AccommodationType
from voyagematch.services.matching.candidate_generator import PackageCandidate
from voyagematch.services.matching.config import matching_policy


@dataclass
class Facets:
    price_min: float = 0.0
    price_max: float = 0.0
    ratings: list[int] = field(default_factory=list)
    airlines: list[str] = field(default_factory=list)
    accommodation_types: list[AccommodationType] = field(default_factory=list)


def rank_packages(
    packages: list[PackageCandidate],
    limit: int = matching_policy.limits.top_results,
) -> list[PackageCandidate]:
    """Highest score first; equal scores keep their generation order."""
    return sorted(packages, key=lambda p: -p.score)[:limit]


def build_facets(packages: list[PackageCandidate]) -> Facets:
    """Facets over the full affordable set, not just the ranked slice."""
    if not packages:
        return Facets()

    totals = [p.total_price for p in packages]
    ratings = sorted({math.floor(p.accommodation.rating) for p in packages}, reverse=True)
    airlines = sorted({p.flight.airline for p in packages})

    types: list[AccommodationType] = []
    for p in packages:
        if p.accommodation.type not in types:
            types.append(p.accommodation.type)

    return Facets(
        price_min=min(totals),
        price_max=max(totals),
        ratings=ratings,
        airlines=airlines,
        accommodation_types=types,
    )
