"""Search router — package search (classic or free-text) and search history."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from voyagematch.config import settings
from voyagematch.dependencies import get_data_provider, get_intent_extractor
from voyagematch.schemas.enums import SearchMode
from voyagematch.schemas.search import (
    AccommodationOut,
    FacetsOut,
    FlightOut,
    PackageOut,
    PriceRangeFacet,
    SearchHistoryOut,
    SearchResponse,
)
from voyagematch.services.data_provider import PackageDataProvider
from voyagematch.services.intent_extractor import IntentExtractor, IntentParseError
from voyagematch.services.matching import PackageCandidate
from voyagematch.services.search_orchestrator import (
    DestinationNotFoundError,
    SearchOrchestrator,
    SearchResult,
    SearchValidationError,
    build_structured_intent,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _package_out(pkg: PackageCandidate) -> PackageOut:
    f = pkg.flight
    a = pkg.accommodation
    return PackageOut(
        id=pkg.id,
        flight=FlightOut(
            id=f.id,
            airline=f.airline,
            flight_number=f.flight_number,
            origin=f.origin,
            destination=f.destination,
            departure_time=f.departure_time,
            arrival_time=f.arrival_time,
            duration=f.duration_minutes,
            price=f.price,
            aircraft=f.aircraft,
        ),
        accommodation=AccommodationOut(
            id=a.id,
            name=a.name,
            type=a.type,
            address=a.address,
            rating=a.rating,
            price_per_night=a.price_per_night,
            total_nights=pkg.nights,
            total_price=pkg.lodging_total,
            amenities=list(a.amenities),
            image_url=a.image_url,
            description=a.description,
        ),
        total_price=pkg.total_price,
        score=pkg.score,
    )


def _search_response(result: SearchResult) -> SearchResponse:
    facets = result.facets
    return SearchResponse(
        packages=[_package_out(p) for p in result.packages],
        total=result.total,
        total_matches=result.total_matches,
        search_time=result.elapsed_ms,
        filters=FacetsOut(
            price_range=PriceRangeFacet(min=facets.price_min, max=facets.price_max),
            ratings=facets.ratings,
            airlines=facets.airlines,
            accommodation_types=facets.accommodation_types,
        ),
        mode=result.mode,
        original_query=result.original_query,
        intent=result.intent if result.mode == SearchMode.AI else None,
    )


@router.get("", response_model=SearchResponse)
async def search_packages(
    mode: SearchMode = Query(SearchMode.CLASSIC),
    query: str | None = Query(None),
    destination: str | None = Query(None),
    check_in: str | None = Query(None, alias="checkIn"),
    check_out: str | None = Query(None, alias="checkOut"),
    guests: str | None = Query(None),
    budget: str | None = Query(None),
    preferences: str | None = Query(None),
    provider: PackageDataProvider = Depends(get_data_provider),
    intent_extractor: IntentExtractor = Depends(get_intent_extractor),
):
    """Ranked flight + accommodation packages within budget."""
    orchestrator = SearchOrchestrator(provider, intent_extractor)

    try:
        if mode == SearchMode.AI:
            if not query or not query.strip():
                raise HTTPException(status_code=400, detail="A free-text query is required in ai mode")
            try:
                result = await orchestrator.search_free_text(query.strip())
            except IntentParseError as e:
                logger.warning(f"Unreadable intent for query {query[:50]!r}: {e}")
                raise HTTPException(
                    status_code=400,
                    detail="Could not understand your request. Try being more specific.",
                )
        else:
            intent = build_structured_intent(destination, check_in, check_out, guests, budget, preferences)
            result = await orchestrator.search_structured(intent)
    except HTTPException:
        raise
    except SearchValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DestinationNotFoundError:
        raise HTTPException(status_code=404, detail="Destination not found")
    except Exception as e:
        logger.error(f"Package search failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return _search_response(result)


@router.get("/history", response_model=list[SearchHistoryOut])
async def search_history(
    limit: int = Query(settings.history_page_size, ge=1, le=100),
    provider: PackageDataProvider = Depends(get_data_provider),
):
    """Most recent searches, newest first."""
    try:
        return await provider.list_search_history(limit=limit)
    except Exception as e:
        logger.error(f"Search history lookup failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
