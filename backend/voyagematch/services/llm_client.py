"""LLM backends for intent extraction — one strategy object per configured model.

Each backend exposes ``complete(system, user) -> str`` and raises
``BackendError`` with a ``BackendFailure`` reason on any problem. Backends do
not retry; the intent extractor moves straight on to the next one.
"""

import logging
from enum import Enum

import anthropic
import httpx
import openai
from openai import AsyncOpenAI

from voyagematch.config import Settings, settings

logger = logging.getLogger(__name__)


class BackendFailure(str, Enum):
    AUTH = "auth_error"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "model_loading"
    NOT_FOUND = "model_not_found"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    EMPTY_REPLY = "empty_reply"
    INVALID_JSON = "invalid_json"
    LOW_CONFIDENCE = "low_confidence"


class BackendError(Exception):
    def __init__(self, reason: BackendFailure, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


STATUS_FAILURES = {
    401: BackendFailure.AUTH,
    403: BackendFailure.AUTH,
    404: BackendFailure.NOT_FOUND,
    429: BackendFailure.RATE_LIMITED,
    503: BackendFailure.UNAVAILABLE,
}


def failure_for_status(status_code: int) -> BackendFailure:
    return STATUS_FAILURES.get(status_code, BackendFailure.HTTP_ERROR)


class LLMBackend:
    """Common interface for a single chat-completion model."""

    provider: str = ""

    def __init__(self, model: str, max_tokens: int, temperature: float, timeout: float):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

    @property
    def name(self) -> str:
        return f"{self.provider}:{self.model}"

    async def complete(self, system: str, user: str) -> str:
        raise NotImplementedError


class HuggingFaceRouterBackend(LLMBackend):
    """Hugging Face inference router, OpenAI-compatible chat completions over httpx."""

    provider = "huggingface"

    def __init__(self, model: str, api_key: str, base_url: str, **kwargs):
        super().__init__(model, **kwargs)
        self._api_key = api_key
        self._base_url = base_url

    async def complete(self, system: str, user: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self._base_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise BackendError(BackendFailure.TIMEOUT, str(e)) from e
        except httpx.RequestError as e:
            raise BackendError(BackendFailure.HTTP_ERROR, str(e)) from e

        if resp.status_code >= 400:
            raise BackendError(
                failure_for_status(resp.status_code),
                f"HTTP {resp.status_code}: {resp.text[:200]}",
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise BackendError(BackendFailure.INVALID_JSON, "Response body is not JSON") from e

        if not isinstance(data, dict):
            raise BackendError(BackendFailure.INVALID_JSON, f"Response body is a {type(data).__name__}, not an object")

        choices = data.get("choices") or []
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise BackendError(BackendFailure.EMPTY_REPLY, "No choices in response")

        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        logger.debug(
            f"{self.name} replied: tokens={usage.get('total_tokens')}, "
            f"finish_reason={choices[0].get('finish_reason')}"
        )
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise BackendError(BackendFailure.EMPTY_REPLY, "Empty message content")
        return content


class OpenAIBackend(LLMBackend):
    provider = "openai"

    def __init__(self, model: str, api_key: str, **kwargs):
        super().__init__(model, **kwargs)
        self._client = AsyncOpenAI(api_key=api_key, timeout=self.timeout, max_retries=0)

    async def complete(self, system: str, user: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            )
        except openai.APIError as e:
            raise _sdk_error(e, openai) from e

        if not response.choices or not response.choices[0].message.content:
            raise BackendError(BackendFailure.EMPTY_REPLY, "Empty message content")
        return response.choices[0].message.content.strip()


class AnthropicBackend(LLMBackend):
    provider = "anthropic"

    def __init__(self, model: str, api_key: str, **kwargs):
        super().__init__(model, **kwargs)
        self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=self.timeout, max_retries=0)

    async def complete(self, system: str, user: str) -> str:
        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system,
                messages=[{"role": "user", "content": user}],
            )
        except anthropic.APIError as e:
            raise _sdk_error(e, anthropic) from e

        text = "".join(block.text for block in response.content if getattr(block, "type", "") == "text")
        if not text:
            raise BackendError(BackendFailure.EMPTY_REPLY, "Empty message content")
        return text.strip()


def _sdk_error(e: Exception, sdk) -> BackendError:
    """Classify an openai/anthropic SDK exception (both share the same hierarchy)."""
    if isinstance(e, sdk.APITimeoutError):
        return BackendError(BackendFailure.TIMEOUT, str(e))
    if isinstance(e, sdk.APIConnectionError):
        return BackendError(BackendFailure.HTTP_ERROR, str(e))
    if isinstance(e, sdk.APIStatusError):
        return BackendError(failure_for_status(e.status_code), str(e))
    return BackendError(BackendFailure.HTTP_ERROR, str(e))


def build_backends(config: Settings = settings) -> list[LLMBackend]:
    """Instantiate the configured cascade, in order.

    Entries whose provider has no credential are left out; entries naming an
    unknown provider are logged and skipped.
    """
    common = {
        "max_tokens": config.llm_max_tokens,
        "temperature": config.llm_temperature,
        "timeout": config.llm_timeout_seconds,
    }
    credentials = {
        "huggingface": config.huggingface_api_key,
        "openai": config.openai_api_key,
        "anthropic": config.anthropic_api_key,
    }

    backends: list[LLMBackend] = []
    for provider, model in config.intent_backend_list:
        if provider not in credentials:
            logger.warning(f"Unknown intent backend provider '{provider}', skipping")
            continue
        api_key = credentials[provider]
        if not api_key:
            logger.warning(f"No API key for {provider}; {provider}:{model} left out of the cascade")
            continue

        if provider == "huggingface":
            backends.append(
                HuggingFaceRouterBackend(model, api_key=api_key, base_url=config.huggingface_base_url, **common)
            )
        elif provider == "openai":
            backends.append(OpenAIBackend(model, api_key=api_key, **common))
        else:
            backends.append(AnthropicBackend(model, api_key=api_key, **common))

    return backends
