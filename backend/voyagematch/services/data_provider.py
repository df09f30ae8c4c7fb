"""Data provider — read-only catalogue lookups and best-effort search history.

The matching pipeline only sees ``FlightCandidate`` / ``AccommodationCandidate``
snapshots; ORM rows never leave this module.
"""

import abc
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voyagematch.models import Accommodation, Destination, Flight, SearchHistory
from voyagematch.schemas.enums import AccommodationType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DestinationRecord:
    id: str
    name: str
    country: str
    airport_code: str


@dataclass(frozen=True)
class FlightCandidate:
    id: str
    airline: str
    flight_number: str
    origin: str
    destination: str
    departure_time: datetime
    arrival_time: datetime
    duration_minutes: int
    price: float
    available_seats: int
    aircraft: str | None = None


@dataclass(frozen=True)
class AccommodationCandidate:
    id: str
    name: str
    type: AccommodationType
    address: str
    rating: float
    price_per_night: float
    amenities: tuple[str, ...] = ()
    available_rooms: int = 0
    image_url: str | None = None
    description: str | None = None


@dataclass
class SearchHistoryEntry:
    destination: str
    check_in: date
    check_out: date
    guests: int
    budget: float
    preferences: dict
    results_count: int
    search_mode: str = "classic"
    original_query: str | None = None


@dataclass
class DestinationSummary:
    destination: DestinationRecord
    flight_count: int
    accommodation_count: int
    cheapest_flights: list[float] = field(default_factory=list)
    cheapest_nightly_rates: list[float] = field(default_factory=list)


def rooms_needed(guests: int) -> int:
    """Two guests per room."""
    return math.ceil(guests / 2)


class PackageDataProvider(abc.ABC):
    """Catalogue lookups the package search depends on."""

    @abc.abstractmethod
    async def find_destination(self, name: str) -> DestinationRecord | None:
        """Case-insensitive substring match on destination name."""

    @abc.abstractmethod
    async def list_flights(
        self,
        destination_id: str,
        departure_from: datetime,
        departure_to: datetime,
        min_seats: int,
        max_price: float,
    ) -> list[FlightCandidate]:
        """Flights in the departure window, cheapest first then earliest."""

    @abc.abstractmethod
    async def list_accommodations(
        self,
        destination_id: str,
        types: list[AccommodationType],
        min_rooms: int,
        max_nightly_price: float,
    ) -> list[AccommodationCandidate]:
        """Accommodations of the given types, best rated first then cheapest."""

    @abc.abstractmethod
    async def record_search(self, entry: SearchHistoryEntry) -> None:
        """Append one search to the history log."""

    @abc.abstractmethod
    async def list_search_history(self, limit: int = 20) -> list[dict]:
        """Most recent history records, newest first."""

    @abc.abstractmethod
    async def list_destination_summaries(self, sample_size: int = 3) -> list[DestinationSummary]:
        """Per-destination availability counts and cheapest price samples."""


class SqlPackageDataProvider(PackageDataProvider):
    """SQLAlchemy-backed provider. Each operation runs in its own session so
    lookups can be awaited concurrently."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_destination(self, name: str) -> DestinationRecord | None:
        pattern = f"%{_escape_like(name.strip().lower())}%"
        async with self._session_factory() as db:
            result = await db.execute(
                select(Destination)
                .where(func.lower(Destination.name).like(pattern, escape="\\"))
                .order_by(Destination.name)
                .limit(1)
            )
            dest = result.scalar_one_or_none()

        if not dest:
            return None
        return _destination_record(dest)

    async def list_flights(
        self,
        destination_id: str,
        departure_from: datetime,
        departure_to: datetime,
        min_seats: int,
        max_price: float,
    ) -> list[FlightCandidate]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(Flight, Destination.airport_code)
                .join(Destination, Flight.destination_id == Destination.id)
                .where(
                    Flight.destination_id == uuid.UUID(destination_id),
                    Flight.departure_time >= departure_from,
                    Flight.departure_time <= departure_to,
                    Flight.available_seats >= min_seats,
                    Flight.price <= max_price,
                )
                .order_by(Flight.price.asc(), Flight.departure_time.asc())
            )
            rows = result.all()

        return [
            FlightCandidate(
                id=str(f.id),
                airline=f.airline,
                flight_number=f.flight_number,
                origin=f.origin,
                destination=airport_code,
                departure_time=f.departure_time,
                arrival_time=f.arrival_time,
                duration_minutes=f.duration_minutes,
                price=float(f.price),
                available_seats=f.available_seats,
                aircraft=f.aircraft,
            )
            for f, airport_code in rows
        ]

    async def list_accommodations(
        self,
        destination_id: str,
        types: list[AccommodationType],
        min_rooms: int,
        max_nightly_price: float,
    ) -> list[AccommodationCandidate]:
        query = select(Accommodation).where(
            Accommodation.destination_id == uuid.UUID(destination_id),
            Accommodation.available_rooms >= min_rooms,
            Accommodation.price_per_night <= max_nightly_price,
        )
        if types:
            query = query.where(Accommodation.type.in_([t.value for t in types]))
        query = query.order_by(Accommodation.rating.desc(), Accommodation.price_per_night.asc())

        async with self._session_factory() as db:
            result = await db.execute(query)
            accommodations = result.scalars().all()

        return [_accommodation_candidate(a) for a in accommodations]

    async def record_search(self, entry: SearchHistoryEntry) -> None:
        async with self._session_factory() as db:
            db.add(
                SearchHistory(
                    destination=entry.destination,
                    check_in=entry.check_in,
                    check_out=entry.check_out,
                    guests=entry.guests,
                    budget=entry.budget,
                    preferences=entry.preferences,
                    results_count=entry.results_count,
                    search_mode=entry.search_mode,
                    original_query=entry.original_query,
                )
            )
            await db.commit()

    async def list_search_history(self, limit: int = 20) -> list[dict]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(SearchHistory).order_by(SearchHistory.created_at.desc()).limit(limit)
            )
            rows = result.scalars().all()

        return [
            {
                "id": h.id,
                "destination": h.destination,
                "check_in": h.check_in,
                "check_out": h.check_out,
                "guests": h.guests,
                "budget": h.budget,
                "preferences": h.preferences,
                "results_count": h.results_count,
                "search_mode": h.search_mode,
                "original_query": h.original_query,
                "created_at": h.created_at,
            }
            for h in rows
        ]

    async def list_destination_summaries(self, sample_size: int = 3) -> list[DestinationSummary]:
        async with self._session_factory() as db:
            flight_counts = (
                select(Flight.destination_id, func.count(Flight.id).label("n"))
                .group_by(Flight.destination_id)
                .subquery()
            )
            accommodation_counts = (
                select(Accommodation.destination_id, func.count(Accommodation.id).label("n"))
                .group_by(Accommodation.destination_id)
                .subquery()
            )
            result = await db.execute(
                select(Destination, flight_counts.c.n, accommodation_counts.c.n)
                .outerjoin(flight_counts, flight_counts.c.destination_id == Destination.id)
                .outerjoin(accommodation_counts, accommodation_counts.c.destination_id == Destination.id)
                .order_by(Destination.name)
            )
            rows = result.all()

            summaries = []
            for dest, n_flights, n_accommodations in rows:
                flight_prices = await db.execute(
                    select(Flight.price)
                    .where(Flight.destination_id == dest.id)
                    .order_by(Flight.price.asc())
                    .limit(sample_size)
                )
                nightly_rates = await db.execute(
                    select(Accommodation.price_per_night)
                    .where(Accommodation.destination_id == dest.id)
                    .order_by(Accommodation.price_per_night.asc())
                    .limit(sample_size)
                )
                summaries.append(
                    DestinationSummary(
                        destination=_destination_record(dest),
                        flight_count=n_flights or 0,
                        accommodation_count=n_accommodations or 0,
                        cheapest_flights=[float(p) for p in flight_prices.scalars().all()],
                        cheapest_nightly_rates=[float(p) for p in nightly_rates.scalars().all()],
                    )
                )

        return summaries


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _destination_record(dest: Destination) -> DestinationRecord:
    return DestinationRecord(
        id=str(dest.id),
        name=dest.name,
        country=dest.country,
        airport_code=dest.airport_code,
    )


def _accommodation_candidate(a: Accommodation) -> AccommodationCandidate:
    return AccommodationCandidate(
        id=str(a.id),
        name=a.name,
        type=AccommodationType(a.type),
        address=a.address,
        rating=float(a.rating),
        price_per_night=float(a.price_per_night),
        amenities=tuple(a.amenities or ()),
        available_rooms=a.available_rooms,
        image_url=a.image_url,
        description=a.description,
    )
