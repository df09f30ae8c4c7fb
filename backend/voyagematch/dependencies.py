from voyagematch.database import async_session_factory
from voyagematch.services.data_provider import PackageDataProvider, SqlPackageDataProvider
from voyagematch.services.intent_extractor import IntentExtractor, build_intent_extractor

_intent_extractor: IntentExtractor | None = None


def get_data_provider() -> PackageDataProvider:
    return SqlPackageDataProvider(async_session_factory)


def get_intent_extractor() -> IntentExtractor:
    global _intent_extractor
    if _intent_extractor is None:
        _intent_extractor = build_intent_extractor()
    return _intent_extractor
