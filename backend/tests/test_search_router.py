import pytest
from fastapi.testclient import TestClient

from tests.conftest import TODAY, FakeDataProvider
from voyagematch.dependencies import get_data_provider, get_intent_extractor
from voyagematch.main import app
from voyagematch.services.intent_extractor import IntentExtractor
from voyagematch.services.llm_client import LLMBackend


class ScriptedBackend(LLMBackend):
    provider = "scripted"

    def __init__(self, reply):
        super().__init__("m", max_tokens=100, temperature=0.0, timeout=1.0)
        self.reply = reply

    async def complete(self, system, user):
        return self.reply


@pytest.fixture
def client(paris_provider):
    app.dependency_overrides[get_data_provider] = lambda: paris_provider
    app.dependency_overrides[get_intent_extractor] = lambda: IntentExtractor(backends=[], today=lambda: TODAY)
    yield TestClient(app)
    app.dependency_overrides.clear()


CLASSIC = {
    "destination": "parigi",
    "checkIn": "2026-10-23",
    "checkOut": "2026-10-25",
    "guests": "2",
    "budget": "600",
}


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok", "service": "voyagematch"}


def test_classic_search(client):
    resp = client.get("/api/search", params=CLASSIC)

    assert resp.status_code == 200
    data = resp.json()
    assert data["mode"] == "classic"
    assert data["total"] == 10
    assert data["totalMatches"] == 12
    assert data["intent"] is None
    assert isinstance(data["searchTime"], int)

    package = data["packages"][0]
    assert package["id"] == f"{package['flight']['id']}-{package['accommodation']['id']}"
    assert package["accommodation"]["totalNights"] == 2
    assert package["totalPrice"] == package["flight"]["price"] + package["accommodation"]["totalPrice"]
    assert 0 <= package["score"] <= 100

    filters = data["filters"]
    assert set(filters) == {"priceRange", "ratings", "airlines", "accommodationTypes"}
    assert filters["accommodationTypes"] == ["HOTEL"]
    assert filters["priceRange"]["min"] <= filters["priceRange"]["max"] <= 600


def test_classic_search_with_preferences(client):
    params = dict(CLASSIC, preferences='{"accommodationType": ["ostello"], "amenities": ["bar"]}')
    data = client.get("/api/search", params=params).json()

    assert data["filters"]["accommodationTypes"] == ["HOSTEL"]
    assert all(p["accommodation"]["type"] == "HOSTEL" for p in data["packages"])


def test_missing_parameters(client):
    resp = client.get("/api/search", params={"destination": "parigi"})
    assert resp.status_code == 400


def test_non_numeric_budget(client):
    resp = client.get("/api/search", params=dict(CLASSIC, budget="lots"))
    assert resp.status_code == 400


def test_unknown_destination(client):
    resp = client.get("/api/search", params=dict(CLASSIC, destination="Tokyo"))
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Destination not found"


def test_ai_search_with_keyword_fallback(client):
    resp = client.get("/api/search", params={"mode": "ai", "query": "weekend a Parigi sotto i 600€"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["mode"] == "ai"
    assert data["originalQuery"] == "weekend a Parigi sotto i 600€"
    assert data["intent"]["destination"] == "Parigi"
    assert data["intent"]["budget"] == 600
    assert data["intent"]["checkIn"] == "2026-10-23"
    assert data["intent"]["source"] == "keyword_fallback"
    assert data["totalMatches"] == 12


def test_ai_search_requires_query(client):
    resp = client.get("/api/search", params={"mode": "ai", "query": "  "})
    assert resp.status_code == 400


def test_ai_search_with_unusable_extraction(client):
    extractor = IntentExtractor(
        backends=[ScriptedBackend('{"destination": "roma", "preferences": "spa", "confidence_score": 0.9}')],
        today=lambda: TODAY,
    )
    app.dependency_overrides[get_intent_extractor] = lambda: extractor

    resp = client.get("/api/search", params={"mode": "ai", "query": "Roma con spa"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Could not understand your request. Try being more specific."


def test_unexpected_failure_is_a_500(client):
    class BrokenProvider(FakeDataProvider):
        async def find_destination(self, name):
            raise RuntimeError("connection reset")

    app.dependency_overrides[get_data_provider] = lambda: BrokenProvider()

    resp = client.get("/api/search", params=CLASSIC)

    assert resp.status_code == 500
    assert resp.json()["detail"] == "Internal server error"


def test_history_lists_recent_searches(client):
    client.get("/api/search", params=CLASSIC)
    client.get("/api/search", params={"mode": "ai", "query": "weekend a Parigi sotto i 600€"})

    resp = client.get("/api/search/history", params={"limit": 5})

    assert resp.status_code == 200
    history = resp.json()
    assert [h["searchMode"] for h in history] == ["ai", "classic"]
    assert history[0]["originalQuery"] == "weekend a Parigi sotto i 600€"
    assert history[1]["resultsCount"] == 10


def test_history_limit_is_bounded(client):
    assert client.get("/api/search/history", params={"limit": 0}).status_code == 422


def test_destination_suggestions(client):
    resp = client.get("/api/destinations/suggestions")

    assert resp.status_code == 200
    suggestions = resp.json()
    assert [s["name"] for s in suggestions] == ["Parigi"]
    assert suggestions[0]["searchKeyword"] == "parigi"
    assert suggestions[0]["flights"] == 5
    assert suggestions[0]["accommodations"] == 4


@pytest.mark.parametrize(
    "preferences",
    ['{"amenities": 5}', '{"accommodationType": 5}', '["spa"]', "{broken"],
)
def test_unreadable_preferences_fall_back_to_defaults(client, preferences):
    resp = client.get("/api/search", params=dict(CLASSIC, preferences=preferences))

    assert resp.status_code == 200
    assert resp.json()["filters"]["accommodationTypes"] == ["HOTEL"]
