"""Intent extractor — turns a free-text travel request into a SearchIntent.

LLM backends are tried in order; the first reply that yields a JSON object
with confidence above the acceptance threshold wins. When every backend fails
(or none is configured) a keyword-based extractor takes over. It never fails
and never touches the network.
"""

import logging
import math
import re
from collections.abc import Callable
from datetime import date, timedelta

from voyagematch.config import settings
from voyagematch.data.vocabulary import (
    ACCOMMODATION_TYPE_KEYWORDS,
    AMENITY_KEYWORDS,
    CITY_SYNONYMS,
    GROUP_SIZE_CUES,
)
from voyagematch.schemas.search import PreferenceSet, SearchIntent
from voyagematch.services import preference_normalizer as normalizer
from voyagematch.services.json_extraction import JSONExtractionError, extract_json_object
from voyagematch.services.llm_client import BackendError, BackendFailure, LLMBackend, build_backends

logger = logging.getLogger(__name__)

MIN_ACCEPTED_CONFIDENCE = 0.3
DEFAULT_CONFIDENCE = 0.7
DEFAULT_GUESTS = 2
MIN_GUESTS, MAX_GUESTS = 1, 8
DEFAULT_BUDGET = 800.0
MIN_BUDGET, MAX_BUDGET = 50, 10000
DEFAULT_NIGHTS = 2

KEYWORD_SOURCE = "keyword_fallback"

SYSTEM_PROMPT = """You are a travel parameter extraction AI. Extract travel information from user requests and respond ONLY with valid JSON.
Today's date is {today}. Resolve relative dates against it.

Extract these fields:
- destination: city name in Italian (parigi, roma, milano, barcellona, amsterdam, londra, berlino, praga) or null
- checkIn: YYYY-MM-DD format or null if not specified
- checkOut: YYYY-MM-DD format or null if not specified
- guests: number of people or null
- maxBudget: total budget in euros or null
- preferences: object with:
  * accommodation_type: array of strings like ["hotel", "ostello", "appartamento", "b&b", "resort", "villa"]
  * location: string like "centro storico", "vicino stazione"
  * activity_level: "relax" | "cultural" | "adventure" | "party"
  * price_range: "budget" | "mid" | "luxury"
  * amenities: array of strings like ["piscina", "spa", "colazione"]
  * flight_preference: "cheapest" | "shortest" | "best_time"
- confidence_score: 0-1 (how confident you are in the extraction)

Respond ONLY with JSON, no other text:
{{
    "destination": "parigi",
    "checkIn": null,
    "checkOut": null,
    "guests": 2,
    "maxBudget": 800,
    "preferences": {{
        "accommodation_type": ["hotel"],
        "price_range": "mid",
        "amenities": ["spa"],
        "flight_preference": "best_time"
    }},
    "confidence_score": 0.85
}}"""


class IntentParseError(ValueError):
    """The accepted extraction payload is too malformed to build an intent from."""


# ─── Date helpers ───


def upcoming_weekday(today: date, weekday: int) -> date:
    """Next date falling on ``weekday`` (Mon=0), today included."""
    return today + timedelta(days=(weekday - today.weekday()) % 7)


def upcoming_weekend(today: date) -> date:
    """Saturday of the current or coming weekend."""
    return upcoming_weekday(today, 5)


def _validate_date(value, today: date) -> date | None:
    """Parse a YYYY-MM-DD value; anything unreadable or in the past is dropped."""
    if value is None:
        return None
    if isinstance(value, date):
        parsed = value
    else:
        text = str(value).strip()
        if not text or text.lower() == "null":
            return None
        try:
            parsed = date.fromisoformat(text[:10])
        except ValueError:
            return None
    if parsed < today:
        return None
    return parsed


# ─── Payload normalization (shared by LLM and keyword strategies) ───


def _first(payload: dict, *keys):
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def _coerce_number(value, field: str) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool) or isinstance(value, (list, dict)):
        raise IntentParseError(f"'{field}' has unusable type {type(value).__name__}")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            digits = re.sub(r"[^\d]", "", str(value))
            number = float(digits) if digits else None
    if number is None or not math.isfinite(number):
        return None
    return number


def normalize_payload(payload: dict, today: date, source: str) -> SearchIntent:
    """Build a SearchIntent from a raw extraction payload, applying defaults and bounds."""
    if not isinstance(payload, dict):
        raise IntentParseError("Extraction payload is not an object")

    destination = _first(payload, "destination")
    if destination is not None and not isinstance(destination, str):
        raise IntentParseError("'destination' must be a string")
    destination = normalizer.normalize_destination(destination)

    check_in = _validate_date(_first(payload, "checkIn", "check_in"), today)
    check_out = _validate_date(_first(payload, "checkOut", "check_out"), today)
    if check_in is None:
        check_in = upcoming_weekend(today)
    if check_out is None or check_out <= check_in:
        check_out = check_in + timedelta(days=DEFAULT_NIGHTS)

    guests = _coerce_number(_first(payload, "guests"), "guests")
    guests = int(guests) if guests else DEFAULT_GUESTS
    guests = min(max(guests, MIN_GUESTS), MAX_GUESTS)

    budget = _coerce_number(_first(payload, "maxBudget", "budget"), "maxBudget")
    if budget is None or not (MIN_BUDGET <= budget <= MAX_BUDGET):
        budget = DEFAULT_BUDGET

    confidence = _coerce_number(_first(payload, "confidence_score", "confidence"), "confidence_score")
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE
    confidence = min(max(confidence, 0.0), 1.0)

    return SearchIntent(
        destination=destination,
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        budget=budget,
        preferences=_normalize_preferences(payload.get("preferences")),
        confidence=confidence,
        source=source,
    )


def _normalize_preferences(raw) -> PreferenceSet:
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise IntentParseError("'preferences' must be an object")

    types = _first(raw, "accommodation_type", "accommodationType")
    amenities = _first(raw, "amenities")
    for field, value in (("accommodation_type", types), ("amenities", amenities)):
        if value is not None and not isinstance(value, (str, list)):
            raise IntentParseError(f"'{field}' must be a string or a list")

    return PreferenceSet(
        accommodation_types=normalizer.normalize_accommodation_types(types),
        price_range=normalizer.normalize_price_range(_first(raw, "price_range", "priceRange")),
        amenities=normalizer.normalize_amenities(amenities),
        flight_preference=normalizer.normalize_flight_preference(
            _first(raw, "flight_preference", "flightPreference")
        ),
    )


# ─── Strategies ───


class LLMIntentStrategy:
    """One cascade step: ask a backend, isolate its JSON, check its confidence."""

    def __init__(self, backend: LLMBackend):
        self.backend = backend

    @property
    def name(self) -> str:
        return self.backend.name

    async def attempt(self, text: str, today: date) -> dict:
        """Return the accepted payload or raise BackendError."""
        system = SYSTEM_PROMPT.format(today=today.isoformat())
        try:
            reply = await self.backend.complete(system=system, user=text)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(BackendFailure.HTTP_ERROR, f"{type(e).__name__}: {e}") from e
        if not isinstance(reply, str) or not reply.strip():
            raise BackendError(BackendFailure.EMPTY_REPLY, "Backend returned no text")

        try:
            payload = extract_json_object(reply)
        except JSONExtractionError as e:
            logger.debug(f"{self.name} raw reply: {reply[:500]}")
            raise BackendError(BackendFailure.INVALID_JSON, str(e)) from e

        confidence = _first(payload, "confidence_score", "confidence")
        if confidence is None:
            confidence = DEFAULT_CONFIDENCE
        try:
            confidence = float(confidence)
        except (TypeError, ValueError):
            confidence = 0.0
        if not math.isfinite(confidence) or not confidence > MIN_ACCEPTED_CONFIDENCE:
            raise BackendError(BackendFailure.LOW_CONFIDENCE, f"confidence {confidence:.2f}")
        return payload


_GUESTS_RE = re.compile(
    r"(\d+)\s*(?:persone|persona|people|persons|person|adulti|adults|ospiti|guests|viaggiatori|travell?ers)",
    re.IGNORECASE,
)
_AMOUNT = r"(\d{1,3}(?:[.,]\d{3})+|\d+)"
_BUDGET_PATTERNS = [
    re.compile(_AMOUNT + r"\s*(?:€|euro\b|eur\b)", re.IGNORECASE),
    re.compile(r"€\s*" + _AMOUNT),
    re.compile(r"budget\s*(?:di|of|:)?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"(?:intorno|circa|max|massimo|sotto|under|entro)\s*(?:ai|a|il|i|di|the)?\s*" + _AMOUNT, re.IGNORECASE),
]
_ISO_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")
_NIGHTS_RE = re.compile(r"(\d+)\s*(?:notti|notte|nights?)", re.IGNORECASE)
_WEEKEND_CUES = ("weekend", "week-end", "fine settimana")
_LUXURY_CUES = ("lusso", "luxury", "elegante", "di classe")
_BUDGET_TIER_CUES = ("economico", "economica", "low cost", "cheap", "risparmi")
_SHORTEST_CUES = ("diretto", "veloce", "direct", "fastest", "shortest")
_CHEAPEST_FLIGHT_CUES = ("volo economico", "voli economici", "cheapest", "cheap flight")


class KeywordIntentExtractor:
    """Deterministic last-resort extractor driven by keyword and pattern cues."""

    name = KEYWORD_SOURCE

    def extract(self, text: str, today: date) -> dict:
        lowered = text.lower()
        destination = self._destination(lowered)
        budget = self._budget(text)
        check_in, check_out = self._dates(lowered, today)

        return {
            "destination": destination,
            "checkIn": check_in.isoformat() if check_in else None,
            "checkOut": check_out.isoformat() if check_out else None,
            "guests": self._guests(text),
            "maxBudget": budget,
            "preferences": self._preferences(lowered),
            "confidence_score": self._confidence(lowered, destination, budget),
        }

    @staticmethod
    def _destination(lowered: str) -> str | None:
        """Known city mentioned earliest in the text."""
        best: tuple[int, str] | None = None
        for synonym, canonical in CITY_SYNONYMS.items():
            match = re.search(rf"\b{re.escape(synonym)}\b", lowered)
            if match and (best is None or match.start() < best[0]):
                best = (match.start(), canonical)
        return best[1] if best else None

    @staticmethod
    def _guests(text: str) -> int:
        match = _GUESTS_RE.search(text)
        if match:
            return min(int(match.group(1)), MAX_GUESTS)
        lowered = text.lower()
        for cue, size in GROUP_SIZE_CUES.items():
            if cue in lowered:
                return size
        return DEFAULT_GUESTS

    @staticmethod
    def _budget(text: str) -> int | None:
        """First in-range amount; digits inside ISO dates are never amounts."""
        text = _ISO_DATE_RE.sub(" ", text)
        for pattern in _BUDGET_PATTERNS:
            for match in pattern.finditer(text):
                amount = int(re.sub(r"[.,]", "", match.group(1)))
                if 100 <= amount <= 5000:
                    return amount
        return None

    @staticmethod
    def _dates(lowered: str, today: date) -> tuple[date | None, date | None]:
        explicit = []
        for raw in _ISO_DATE_RE.findall(lowered):
            try:
                explicit.append(date.fromisoformat(raw))
            except ValueError:
                continue

        check_in = check_out = None
        if explicit:
            check_in = explicit[0]
            check_out = explicit[1] if len(explicit) > 1 else None
        elif any(cue in lowered for cue in _WEEKEND_CUES):
            check_in = upcoming_weekday(today, 4)  # Friday
            check_out = check_in + timedelta(days=2)

        nights = _NIGHTS_RE.search(lowered)
        if nights and check_out is None:
            start = check_in or upcoming_weekend(today)
            check_in = start
            check_out = start + timedelta(days=max(1, int(nights.group(1))))

        return check_in, check_out

    @staticmethod
    def _preferences(lowered: str) -> dict:
        types = []
        for keyword, acc_type in ACCOMMODATION_TYPE_KEYWORDS.items():
            if keyword in lowered and acc_type not in types:
                types.append(acc_type)

        amenities = []
        for keyword, amenity in AMENITY_KEYWORDS.items():
            if re.search(rf"\b{re.escape(keyword)}\b", lowered) and amenity not in amenities:
                amenities.append(amenity)

        if any(cue in lowered for cue in _LUXURY_CUES):
            price_range = "luxury"
        elif any(cue in lowered for cue in _BUDGET_TIER_CUES):
            price_range = "budget"
        else:
            price_range = "mid"

        if any(cue in lowered for cue in _SHORTEST_CUES):
            flight_preference = "shortest"
        elif any(cue in lowered for cue in _CHEAPEST_FLIGHT_CUES):
            flight_preference = "cheapest"
        else:
            flight_preference = "best_time"

        return {
            "accommodation_type": types or None,
            "price_range": price_range,
            "amenities": amenities,
            "flight_preference": flight_preference,
        }

    @staticmethod
    def _confidence(lowered: str, destination: str | None, budget: int | None) -> float:
        confidence = 0.4
        if destination:
            confidence += 0.3
        if budget:
            confidence += 0.2
        if len(lowered) > 30:
            confidence += 0.1
        return round(min(confidence, 0.85), 2)


# ─── Cascade ───


class IntentExtractor:
    """Runs the backend cascade and falls back to keyword extraction."""

    def __init__(
        self,
        backends: list[LLMBackend] | None = None,
        use_mock: bool = False,
        today: Callable[[], date] = date.today,
    ):
        self.strategies = [LLMIntentStrategy(b) for b in (backends or [])]
        self.use_mock = use_mock
        self.fallback = KeywordIntentExtractor()
        self._today = today

    async def extract_intent(self, text: str) -> SearchIntent:
        """
        Extract a search intent from free text.

        Backend failures never propagate. Raises IntentParseError only when
        the accepted payload cannot be turned into an intent at all.
        """
        today = self._today()
        logger.info(f"Extracting intent from: {text[:50]!r}")

        if self.use_mock or not self.strategies:
            logger.info("No intent backend in use, applying keyword extraction")
            return self._fallback(text, today)

        for strategy in self.strategies:
            try:
                payload = await strategy.attempt(text, today)
            except BackendError as e:
                logger.warning(f"Intent backend {strategy.name} failed ({e.reason.value}): {e.detail}")
                continue
            intent = normalize_payload(payload, today, source=strategy.name)
            logger.info(f"Intent accepted from {strategy.name}, confidence {intent.confidence:.2f}")
            return intent

        logger.warning("All intent backends failed, applying keyword extraction")
        return self._fallback(text, today)

    def _fallback(self, text: str, today: date) -> SearchIntent:
        payload = self.fallback.extract(text, today)
        return normalize_payload(payload, today, source=KEYWORD_SOURCE)


def build_intent_extractor() -> IntentExtractor:
    return IntentExtractor(backends=build_backends(settings), use_mock=settings.use_mock_ai)
