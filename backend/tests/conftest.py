import uuid
from datetime import date, datetime, time, timedelta

import pytest

from voyagematch.schemas.enums import AccommodationType
from voyagematch.services.data_provider import (
    AccommodationCandidate,
    DestinationRecord,
    DestinationSummary,
    FlightCandidate,
    PackageDataProvider,
    SearchHistoryEntry,
)

# A Monday: the coming Friday is 2026-10-23, the coming Saturday 2026-10-24
TODAY = date(2026, 10, 19)
FRIDAY = date(2026, 10, 23)

PARIGI = DestinationRecord(
    id=str(uuid.UUID(int=1)), name="Parigi", country="Francia", airport_code="CDG"
)
BARCELLONA = DestinationRecord(
    id=str(uuid.UUID(int=2)), name="Barcellona", country="Spagna", airport_code="BCN"
)


def make_flight(
    price: float = 120.0,
    airline: str = "Ryanair",
    hour: int = 10,
    day: date = FRIDAY,
    flight_id: str | None = None,
    destination: str = "CDG",
    seats: int = 30,
    duration: int = 120,
) -> FlightCandidate:
    departure = datetime.combine(day, time(hour, 0))
    return FlightCandidate(
        id=flight_id or f"f-{uuid.uuid4().hex[:8]}",
        airline=airline,
        flight_number=f"{airline[:2].upper()}{1000 + hour}",
        origin="MXP",
        destination=destination,
        departure_time=departure,
        arrival_time=departure + timedelta(minutes=duration),
        duration_minutes=duration,
        price=price,
        available_seats=seats,
        aircraft="Airbus A320",
    )


def make_accommodation(
    price_per_night: float = 80.0,
    rating: float = 4.2,
    acc_type: AccommodationType = AccommodationType.HOTEL,
    amenities: tuple[str, ...] = ("WiFi Gratuito",),
    accommodation_id: str | None = None,
    rooms: int = 10,
    name: str = "Grand Hotel Europa",
) -> AccommodationCandidate:
    return AccommodationCandidate(
        id=accommodation_id or f"a-{uuid.uuid4().hex[:8]}",
        name=name,
        type=acc_type,
        address="Via 12 Parigi",
        rating=rating,
        price_per_night=price_per_night,
        amenities=amenities,
        available_rooms=rooms,
    )


class FakeDataProvider(PackageDataProvider):
    """In-memory provider applying the same filters and orderings as the SQL one."""

    def __init__(
        self,
        destinations: list[DestinationRecord] | None = None,
        flights: dict[str, list[FlightCandidate]] | None = None,
        accommodations: dict[str, list[AccommodationCandidate]] | None = None,
        fail_history: bool = False,
    ):
        self.destinations = destinations or []
        self.flights = flights or {}
        self.accommodations = accommodations or {}
        self.fail_history = fail_history
        self.history: list[SearchHistoryEntry] = []
        self.flight_queries: list[dict] = []
        self.accommodation_queries: list[dict] = []

    async def find_destination(self, name):
        needle = name.strip().lower()
        for dest in self.destinations:
            if needle in dest.name.lower():
                return dest
        return None

    async def list_flights(self, destination_id, departure_from, departure_to, min_seats, max_price):
        self.flight_queries.append({
            "destination_id": destination_id,
            "departure_from": departure_from,
            "departure_to": departure_to,
            "min_seats": min_seats,
            "max_price": max_price,
        })
        matches = [
            f for f in self.flights.get(destination_id, [])
            if departure_from <= f.departure_time <= departure_to
            and f.available_seats >= min_seats
            and f.price <= max_price
        ]
        return sorted(matches, key=lambda f: (f.price, f.departure_time))

    async def list_accommodations(self, destination_id, types, min_rooms, max_nightly_price):
        self.accommodation_queries.append({
            "destination_id": destination_id,
            "types": list(types),
            "min_rooms": min_rooms,
            "max_nightly_price": max_nightly_price,
        })
        matches = [
            a for a in self.accommodations.get(destination_id, [])
            if (not types or a.type in types)
            and a.available_rooms >= min_rooms
            and a.price_per_night <= max_nightly_price
        ]
        return sorted(matches, key=lambda a: (-a.rating, a.price_per_night))

    async def record_search(self, entry):
        if self.fail_history:
            raise ConnectionError("history table unavailable")
        self.history.append(entry)

    async def list_search_history(self, limit=20):
        return [
            {
                "id": uuid.UUID(int=i + 1),
                "destination": h.destination,
                "check_in": h.check_in,
                "check_out": h.check_out,
                "guests": h.guests,
                "budget": h.budget,
                "preferences": h.preferences,
                "results_count": h.results_count,
                "search_mode": h.search_mode,
                "original_query": h.original_query,
                "created_at": None,
            }
            for i, h in enumerate(reversed(self.history))
        ][:limit]

    async def list_destination_summaries(self, sample_size=3):
        summaries = []
        for dest in self.destinations:
            flights = sorted(f.price for f in self.flights.get(dest.id, []))
            rates = sorted(a.price_per_night for a in self.accommodations.get(dest.id, []))
            summaries.append(
                DestinationSummary(
                    destination=dest,
                    flight_count=len(flights),
                    accommodation_count=len(rates),
                    cheapest_flights=flights[:sample_size],
                    cheapest_nightly_rates=rates[:sample_size],
                )
            )
        return summaries


@pytest.fixture
def paris_provider() -> FakeDataProvider:
    """Parigi with a handful of Friday flights and mixed accommodations; Barcellona empty."""
    flights = [
        make_flight(price=150.0, airline="Air France", hour=9, flight_id="f-af"),
        make_flight(price=90.0, airline="Ryanair", hour=6, flight_id="f-fr"),
        make_flight(price=120.0, airline="EasyJet", hour=15, flight_id="f-u2"),
        make_flight(price=110.0, airline="Vueling", hour=22, flight_id="f-vy"),
        # Saturday flight, outside a Friday check-in window
        make_flight(price=60.0, airline="Wizz Air", hour=10, day=FRIDAY + timedelta(days=1), flight_id="f-w6"),
    ]
    accommodations = [
        make_accommodation(price_per_night=120.0, rating=4.8, amenities=("Spa", "WiFi Gratuito"), accommodation_id="a-lux"),
        make_accommodation(price_per_night=70.0, rating=3.9, amenities=("WiFi Gratuito",), accommodation_id="a-mid"),
        make_accommodation(
            price_per_night=30.0, rating=3.2, acc_type=AccommodationType.HOSTEL,
            amenities=("WiFi Gratuito", "Bar"), accommodation_id="a-hostel", name="Downtown Hostel",
        ),
        make_accommodation(price_per_night=95.0, rating=4.4, amenities=("Piscina",), accommodation_id="a-pool"),
    ]
    return FakeDataProvider(
        destinations=[PARIGI, BARCELLONA],
        flights={PARIGI.id: flights},
        accommodations={PARIGI.id: accommodations},
    )
