import json
from datetime import date, timedelta

import pytest

from tests.conftest import FRIDAY, TODAY
from voyagematch.schemas.enums import AccommodationType, FlightPreference, PriceRange
from voyagematch.services.intent_extractor import (
    KEYWORD_SOURCE,
    IntentExtractor,
    IntentParseError,
    KeywordIntentExtractor,
    normalize_payload,
    upcoming_weekend,
)
from voyagematch.services.llm_client import BackendError, BackendFailure, LLMBackend

SATURDAY = date(2026, 10, 24)


class FakeBackend(LLMBackend):
    provider = "fake"

    def __init__(self, model, reply=None, error=None):
        super().__init__(model, max_tokens=100, temperature=0.0, timeout=1.0)
        self.reply = reply
        self.error = error
        self.calls = 0

    async def complete(self, system, user):
        self.calls += 1
        if self.error:
            raise BackendError(self.error, "simulated")
        return self.reply


def _reply(**overrides):
    payload = {
        "destination": "roma",
        "checkIn": "2026-11-06",
        "checkOut": "2026-11-08",
        "guests": 3,
        "maxBudget": 900,
        "preferences": {"accommodation_type": ["b&b"], "amenities": ["colazione"], "price_range": "mid"},
        "confidence_score": 0.9,
    }
    payload.update(overrides)
    return f"Here you go:\n```json\n{json.dumps(payload)}\n```"


def _extractor(*backends):
    return IntentExtractor(backends=list(backends), today=lambda: TODAY)


class TestCascade:
    async def test_first_confident_backend_wins(self):
        first = FakeBackend("a", reply=_reply())
        second = FakeBackend("b", reply=_reply(destination="parigi"))

        intent = await _extractor(first, second).extract_intent("Roma in tre, b&b con colazione")

        assert intent.destination == "Roma"
        assert intent.check_in == date(2026, 11, 6)
        assert intent.check_out == date(2026, 11, 8)
        assert intent.guests == 3
        assert intent.budget == 900
        assert intent.preferences.accommodation_types == [AccommodationType.BNB]
        assert intent.preferences.amenities == ["Colazione Inclusa"]
        assert intent.source == "fake:a"
        assert second.calls == 0

    async def test_low_confidence_moves_to_next_backend(self):
        doubtful = FakeBackend("a", reply=_reply(confidence_score=0.2, destination="londra"))
        confident = FakeBackend("b", reply=_reply(destination="berlin"))

        intent = await _extractor(doubtful, confident).extract_intent("qualcosa")

        assert intent.destination == "Berlino"
        assert intent.source == "fake:b"
        assert doubtful.calls == 1

    async def test_confidence_at_threshold_is_rejected(self):
        borderline = FakeBackend("a", reply=_reply(confidence_score=0.3))
        intent = await _extractor(borderline).extract_intent("weekend a Parigi")
        assert intent.source == KEYWORD_SOURCE

    async def test_invalid_json_moves_to_next_backend(self):
        garbled = FakeBackend("a", reply='{"destination": "roma", "guests": ')
        good = FakeBackend("b", reply=_reply())

        intent = await _extractor(garbled, good).extract_intent("Roma")

        assert intent.source == "fake:b"

    async def test_transport_failures_move_on(self):
        backends = [
            FakeBackend("a", error=BackendFailure.RATE_LIMITED),
            FakeBackend("b", error=BackendFailure.TIMEOUT),
            FakeBackend("c", reply=_reply()),
        ]
        intent = await _extractor(*backends).extract_intent("Roma")
        assert intent.source == "fake:c"

    async def test_all_backends_fail_falls_back_to_keywords(self):
        backends = [
            FakeBackend("a", error=BackendFailure.AUTH),
            FakeBackend("b", reply="I am not sure what you mean."),
        ]
        intent = await _extractor(*backends).extract_intent("weekend a Parigi sotto i 600€")

        assert intent.source == KEYWORD_SOURCE
        assert intent.destination == "Parigi"
        assert intent.budget == 600

    async def test_mock_mode_skips_backends(self):
        backend = FakeBackend("a", reply=_reply())
        extractor = IntentExtractor(backends=[backend], use_mock=True, today=lambda: TODAY)

        intent = await extractor.extract_intent("Praga con la famiglia")

        assert backend.calls == 0
        assert intent.destination == "Praga"
        assert intent.guests == 4

    async def test_nan_confidence_is_rejected(self):
        backend = FakeBackend("a", reply='{"destination": "roma", "confidence_score": NaN}')
        intent = await _extractor(backend).extract_intent("weekend a Parigi")
        assert intent.source == KEYWORD_SOURCE
        assert intent.destination == "Parigi"

    async def test_null_confidence_uses_the_default(self):
        backend = FakeBackend("a", reply=_reply(confidence_score=None))
        intent = await _extractor(backend).extract_intent("Roma")
        assert intent.source == "fake:a"
        assert intent.confidence == 0.7

    async def test_unexpected_backend_exception_moves_on(self):
        class CrashingBackend(FakeBackend):
            async def complete(self, system, user):
                raise AttributeError("'list' object has no attribute 'get'")

        backends = [CrashingBackend("a"), FakeBackend("b", reply=_reply())]
        intent = await _extractor(*backends).extract_intent("Roma")
        assert intent.source == "fake:b"

    async def test_non_text_reply_moves_on(self):
        intent = await _extractor(FakeBackend("a", reply=None)).extract_intent("weekend a Parigi")
        assert intent.source == KEYWORD_SOURCE

    async def test_unusable_preferences_raise_parse_error(self):
        backend = FakeBackend("a", reply=_reply(preferences="spa please"))
        with pytest.raises(IntentParseError):
            await _extractor(backend).extract_intent("Roma")


class TestNoBackends:
    async def test_weekend_in_paris_under_budget(self):
        intent = await _extractor().extract_intent("weekend a Parigi sotto i 600€")

        assert intent.destination == "Parigi"
        assert intent.budget == 600
        assert intent.guests == 2
        assert intent.check_in == FRIDAY
        assert intent.check_out == FRIDAY + timedelta(days=2)
        assert intent.source == KEYWORD_SOURCE
        assert 0 < intent.confidence <= 0.85

    async def test_defaults_when_nothing_recognised(self):
        intent = await _extractor().extract_intent("vorrei partire")

        assert intent.destination is None
        assert intent.guests == 2
        assert intent.budget == 800
        assert intent.check_in == SATURDAY
        assert intent.check_out == SATURDAY + timedelta(days=2)
        assert intent.preferences.accommodation_types == [AccommodationType.HOTEL]


class TestKeywordExtractor:
    def setup_method(self):
        self.extractor = KeywordIntentExtractor()

    def test_guest_count_and_amenities(self):
        payload = self.extractor.extract("Barcellona per 3 persone, hotel con piscina e spa", TODAY)
        assert payload["destination"] == "Barcellona"
        assert payload["guests"] == 3
        assert payload["preferences"]["accommodation_type"] == ["HOTEL"]
        assert payload["preferences"]["amenities"] == ["Piscina", "Spa"]

    def test_earliest_city_wins_and_word_boundaries(self):
        payload = self.extractor.extract("viaggio romantico a Londra, poi forse Roma", TODAY)
        assert payload["destination"] == "Londra"
        assert payload["guests"] == 2

    @pytest.mark.parametrize(
        "text, budget",
        [
            ("Amsterdam con 450 euro", 450),
            ("Amsterdam €750", 750),
            ("Amsterdam budget di 1.200", 1200),
            ("Amsterdam massimo 300", 300),
            ("Amsterdam 20000€", None),
            ("Amsterdam per 2 persone", None),
            ("Milano entro il 2026-12-04", None),
            ("Milano dal 2026-12-04, sotto i 700", 700),
            ("Amsterdam 20000€ o al massimo 900", 900),
        ],
    )
    def test_budget_patterns(self, text, budget):
        assert self.extractor.extract(text, TODAY)["maxBudget"] == budget

    def test_explicit_dates_and_nights(self):
        payload = self.extractor.extract("Milano dal 2026-12-04 al 2026-12-07", TODAY)
        assert payload["checkIn"] == "2026-12-04"
        assert payload["checkOut"] == "2026-12-07"

        payload = self.extractor.extract("Milano 3 notti", TODAY)
        assert payload["checkIn"] == SATURDAY.isoformat()
        assert payload["checkOut"] == (SATURDAY + timedelta(days=3)).isoformat()

    def test_tier_and_flight_cues(self):
        payload = self.extractor.extract("Praga, hotel di lusso, volo diretto", TODAY)
        assert payload["preferences"]["price_range"] == "luxury"
        assert payload["preferences"]["flight_preference"] == "shortest"


class TestNormalizePayload:
    def test_past_dates_are_discarded(self):
        intent = normalize_payload(
            {"destination": "parigi", "checkIn": "2025-01-10", "checkOut": "2025-01-12"}, TODAY, "test"
        )
        assert intent.check_in == upcoming_weekend(TODAY)
        assert intent.check_out == intent.check_in + timedelta(days=2)

    def test_checkout_not_after_checkin_is_reset(self):
        intent = normalize_payload({"checkIn": "2026-11-10", "checkOut": "2026-11-10"}, TODAY, "test")
        assert intent.check_out == date(2026, 11, 12)

    def test_bounds(self):
        intent = normalize_payload({"guests": 25, "maxBudget": 20, "confidence_score": 3}, TODAY, "test")
        assert intent.guests == 8
        assert intent.budget == 800
        assert intent.confidence == 1.0

    def test_numeric_strings(self):
        intent = normalize_payload({"guests": "4", "maxBudget": "1500 euro"}, TODAY, "test")
        assert intent.guests == 4
        assert intent.budget == 1500

    def test_missing_confidence_defaults(self):
        assert normalize_payload({}, TODAY, "test").confidence == 0.7

    def test_preferences_default_and_flight_preference(self):
        intent = normalize_payload({"preferences": {"flight_preference": "cheapest"}}, TODAY, "test")
        assert intent.preferences.flight_preference == FlightPreference.CHEAPEST
        assert intent.preferences.price_range == PriceRange.MID

    @pytest.mark.parametrize(
        "payload",
        [
            {"guests": [2]},
            {"destination": 42},
            {"preferences": ["spa"]},
            {"preferences": {"amenities": {"spa": True}}},
        ],
    )
    def test_malformed_payload_raises(self, payload):
        with pytest.raises(IntentParseError):
            normalize_payload(payload, TODAY, "test")
