"""Search orchestrator — coordinates a full package search for one request."""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from pydantic import ValidationError

from voyagematch.schemas.enums import SearchMode
from voyagematch.schemas.search import PreferenceSet, SearchIntent, default_preferences
from voyagematch.services.data_provider import PackageDataProvider, SearchHistoryEntry, rooms_needed
from voyagematch.services.intent_extractor import MAX_GUESTS, MIN_GUESTS, IntentExtractor
from voyagematch.services.matching import (
    Facets,
    MatchingPolicy,
    PackageCandidate,
    allocate,
    build_facets,
    calculate_nights,
    generate_packages,
    matching_policy,
    rank_packages,
    score_packages,
)

logger = logging.getLogger(__name__)

DEFAULT_GUESTS = 2
DEFAULT_BUDGET = 800.0


class SearchValidationError(ValueError):
    """Request is missing or has unreadable required fields."""


class DestinationNotFoundError(ValueError):
    """No catalogue destination matches the requested name."""


@dataclass
class SearchResult:
    packages: list[PackageCandidate]
    facets: Facets
    total_matches: int
    elapsed_ms: int
    mode: SearchMode
    intent: SearchIntent
    original_query: str | None = None

    @property
    def total(self) -> int:
        return len(self.packages)


def _parse_date(value: str | None, field: str) -> date | None:
    if value is None or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        raise SearchValidationError(f"Invalid date for {field}: {value!r}")


def _parse_preferences(raw: str | None) -> PreferenceSet:
    """Preferences arrive as a JSON query parameter; anything unreadable means defaults."""
    if not raw:
        return default_preferences()
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("preferences must be a JSON object")
        return PreferenceSet.model_validate(data)
    except (TypeError, ValueError, ValidationError) as e:
        logger.info(f"Unreadable preferences parameter, using defaults: {e}")
        return default_preferences()


def build_structured_intent(
    destination: str | None,
    check_in: str | None,
    check_out: str | None,
    guests: str | int | None = None,
    budget: str | float | None = None,
    preferences: str | None = None,
) -> SearchIntent:
    """Intent for a classic (form-based) search from raw request parameters."""
    try:
        guests_value = int(guests) if guests not in (None, "") else DEFAULT_GUESTS
        budget_value = float(budget) if budget not in (None, "") else DEFAULT_BUDGET
    except (TypeError, ValueError):
        raise SearchValidationError("guests and budget must be numeric")
    if budget_value <= 0:
        raise SearchValidationError("budget must be positive")

    return SearchIntent(
        destination=destination.strip() if destination and destination.strip() else None,
        check_in=_parse_date(check_in, "checkIn"),
        check_out=_parse_date(check_out, "checkOut"),
        guests=min(max(guests_value, MIN_GUESTS), MAX_GUESTS),
        budget=budget_value,
        preferences=_parse_preferences(preferences),
        confidence=1.0,
        source="structured",
    )


class SearchOrchestrator:
    """Runs intent → allocation → candidates → scoring → ranking for a request."""

    def __init__(
        self,
        provider: PackageDataProvider,
        intent_extractor: IntentExtractor | None = None,
        policy: MatchingPolicy = matching_policy,
    ):
        self.provider = provider
        self.intent_extractor = intent_extractor
        self.policy = policy

    async def search_structured(self, intent: SearchIntent) -> SearchResult:
        return await self._run(intent, SearchMode.CLASSIC, None, time.monotonic())

    async def search_free_text(self, query: str) -> SearchResult:
        """Interpret ``query`` then search. Extraction failures degrade, never raise."""
        start_time = time.monotonic()
        if self.intent_extractor is None:
            raise RuntimeError("Free-text search needs an intent extractor")
        intent = await self.intent_extractor.extract_intent(query)
        return await self._run(intent, SearchMode.AI, query, start_time)

    async def _run(
        self,
        intent: SearchIntent,
        mode: SearchMode,
        original_query: str | None,
        start_time: float,
    ) -> SearchResult:
        if not intent.destination or not intent.check_in or not intent.check_out:
            raise SearchValidationError(
                "Missing parameters: destination, checkIn and checkOut are required"
            )
        if intent.check_out < intent.check_in:
            raise SearchValidationError("checkOut must not be before checkIn")

        nights = calculate_nights(intent.check_in, intent.check_out)

        # 1. Resolve destination
        destination = await self.provider.find_destination(intent.destination)
        if destination is None:
            raise DestinationNotFoundError(f"Destination not found: {intent.destination}")

        # 2. Allocate budget into pool ceilings
        allocation = allocate(intent.budget, nights, self.policy)

        # 3. Fetch candidate pools in parallel
        departure_from = datetime.combine(intent.check_in, datetime.min.time())
        departure_to = departure_from + timedelta(days=1)
        flights, accommodations = await asyncio.gather(
            self.provider.list_flights(
                destination.id,
                departure_from=departure_from,
                departure_to=departure_to,
                min_seats=intent.guests,
                max_price=allocation.flight_ceiling,
            ),
            self.provider.list_accommodations(
                destination.id,
                types=intent.preferences.accommodation_types,
                min_rooms=rooms_needed(intent.guests),
                max_nightly_price=allocation.nightly_lodging_ceiling,
            ),
        )

        # 4. Combine, score, rank
        packages = generate_packages(flights, accommodations, nights, intent.budget, self.policy)
        score_packages(packages, intent.preferences, intent.budget, self.policy)
        top_packages = rank_packages(packages, self.policy.limits.top_results)
        facets = build_facets(packages)

        logger.info(
            f"Search {mode.value} {destination.name} {intent.check_in}→{intent.check_out}: "
            f"{len(flights)} flights x {len(accommodations)} stays → {len(packages)} affordable"
        )

        # 5. History is best-effort
        await self._record_history(intent, destination.name, len(top_packages), mode, original_query)

        return SearchResult(
            packages=top_packages,
            facets=facets,
            total_matches=len(packages),
            elapsed_ms=int((time.monotonic() - start_time) * 1000),
            mode=mode,
            intent=intent,
            original_query=original_query,
        )

    async def _record_history(
        self,
        intent: SearchIntent,
        destination_name: str,
        results_count: int,
        mode: SearchMode,
        original_query: str | None,
    ) -> None:
        try:
            await self.provider.record_search(
                SearchHistoryEntry(
                    destination=destination_name,
                    check_in=intent.check_in,
                    check_out=intent.check_out,
                    guests=intent.guests,
                    budget=intent.budget,
                    preferences=intent.preferences.model_dump(mode="json", by_alias=True),
                    results_count=results_count,
                    search_mode=mode.value,
                    original_query=original_query,
                )
            )
        except Exception as e:
            logger.warning(f"Search history write failed (search unaffected): {e}")
