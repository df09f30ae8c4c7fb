"""Destination service — suggests searches that are known to return packages."""

import logging
import math

from voyagematch.services.data_provider import DestinationSummary, PackageDataProvider

logger = logging.getLogger(__name__)

SUGGESTION_NIGHTS = 3
LOW_MARGIN = 1.1
MID_MARGIN = 1.2
LUXURY_FACTOR = 1.5


def search_keyword(name: str) -> str:
    """The short name to type in the search box: "Parigi, Francia" -> "parigi"."""
    return name.lower().split(",")[0].split(" ")[0]


def suggest_budgets(flight_prices: list[float], nightly_rates: list[float]) -> dict:
    """Three budget tiers for a 3-night stay from cheapest-price samples."""
    budget = math.ceil((min(flight_prices) + min(nightly_rates) * SUGGESTION_NIGHTS) * LOW_MARGIN)
    comfortable = math.ceil((max(flight_prices) + max(nightly_rates) * SUGGESTION_NIGHTS) * MID_MARGIN)
    return {
        "budget": budget,
        "comfortable": comfortable,
        "luxury": math.ceil(comfortable * LUXURY_FACTOR),
    }


class DestinationService:
    async def list_suggestions(self, provider: PackageDataProvider) -> list[dict]:
        """Destinations with both flights and accommodations, with budget tiers."""
        summaries: list[DestinationSummary] = await provider.list_destination_summaries()

        suggestions = []
        for s in summaries:
            if not s.flight_count or not s.accommodation_count:
                continue
            if not s.cheapest_flights or not s.cheapest_nightly_rates:
                continue
            dest = s.destination
            suggestions.append({
                "name": dest.name,
                "search_keyword": search_keyword(dest.name),
                "country": dest.country,
                "airport_code": dest.airport_code,
                "flights": s.flight_count,
                "accommodations": s.accommodation_count,
                "budget_suggestions": suggest_budgets(s.cheapest_flights, s.cheapest_nightly_rates),
            })

        logger.info(f"{len(suggestions)} of {len(summaries)} destinations are searchable")
        return suggestions


destination_service = DestinationService()
