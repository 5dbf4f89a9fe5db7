import time
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from symvora.core.config import Settings, get_settings
from symvora.core.context import RequestContext
from symvora.core.exceptions import ProviderError
from symvora.core.logging_config import get_analyzer_logger
from symvora.core.metrics import ANALYZER_LATENCY, MetricsTracker, track_latency
from symvora.models.requests import SymptomRequest
from symvora.models.responses import AIResponse

logger = get_analyzer_logger()

DISCLAIMER = (
    "⚠️ IMPORTANT: This is for informational purposes only. "
    "Always consult a healthcare professional for proper diagnosis and treatment."
)

ADVISORY = (
    "Based on your symptoms, here are some general possibilities:\n\n"
    "Possible Conditions:\n"
    "• Common cold or flu\n"
    "• Seasonal allergies\n"
    "• Stress-related symptoms\n\n"
    "General Advice:\n"
    "• Rest and stay hydrated\n"
    "• Monitor your symptoms\n"
    "• Avoid self-diagnosis\n\n"
    + DISCLAIMER
)

SYSTEM_PROMPT = (
    "You are a helpful medical assistant. Provide a concise diagnosis and general advice "
    "based on the symptoms provided. Do not use any markdown formatting like bolding or "
    "italics. Always include a disclaimer that the information is for informational "
    "purposes only and not a substitute for professional medical advice."
)

class Analyzer(ABC):
    """Maps a SymptomRequest to an AIResponse."""

    name = "base"

    @abstractmethod
    async def analyze(self, request: SymptomRequest) -> AIResponse:
        ...

class PlaceholderAnalyzer(Analyzer):
    """Returns the fixed advisory regardless of the request."""

    name = "placeholder"

    @track_latency(ANALYZER_LATENCY, {"analyzer": "placeholder"})
    async def analyze(self, request: SymptomRequest) -> AIResponse:
        MetricsTracker.track_analysis(self.name, "success")
        return AIResponse(result=ADVISORY)

class ProviderAnalyzer(Analyzer):
    """Forwards symptom text to an OpenAI-compatible chat completions provider.

    Any provider failure degrades to a disclaimer-only advisory; the call is
    bounded by ``timeout`` and never retried. Blank symptom text is answered
    by ``fallback`` without contacting the provider.
    """

    name = "provider"

    def __init__(
        self,
        api_key: str,
        url: str,
        model: str,
        timeout: float = 30.0,
        fallback: Optional[Analyzer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout
        self.fallback = fallback or PlaceholderAnalyzer()
        self._transport = transport

    @track_latency(ANALYZER_LATENCY, {"analyzer": "provider"})
    async def analyze(self, request: SymptomRequest) -> AIResponse:
        if not request.symptoms.strip():
            logger.info("Blank symptoms, skipping provider call")
            MetricsTracker.track_analysis(self.name, "skipped")
            return await self.fallback.analyze(request)

        start_time = time.perf_counter()
        try:
            content = await self._complete(request)
        except ProviderError as e:
            RequestContext.set_metadata("provider_error", e.message)
            logger.error(
                "Provider call failed, returning disclaimer",
                extra={
                    "analyzer": self.name,
                    "error": e.message,
                    "error_code": e.error_code
                }
            )
            MetricsTracker.track_analysis(self.name, "degraded")
            return AIResponse(result=DISCLAIMER)

        logger.info(
            "Provider call completed",
            extra={
                "analyzer": self.name,
                "duration_ms": (time.perf_counter() - start_time) * 1000
            }
        )
        MetricsTracker.track_analysis(self.name, "success")
        return AIResponse(result=content)

    def build_payload(self, request: SymptomRequest) -> dict:
        user_message = f"Diagnose: {request.symptoms}"
        if request.additional_context:
            user_message += f"\nAdditional context: {request.additional_context}"
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_message}
            ],
            "stream": False
        }

    async def _complete(self, request: SymptomRequest) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        request_id = RequestContext.get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, headers=headers, json=self.build_payload(request))
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ProviderError(f"timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"unexpected status {e.response.status_code}",
                provider_status=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(str(e) or e.__class__.__name__) from e

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"unreadable response body: {e!r}") from e

        if not isinstance(content, str) or not content.strip():
            raise ProviderError("empty completion")
        return content

def build_analyzer(settings: Optional[Settings] = None) -> Analyzer:
    """Pick the analyzer for the configured environment."""
    settings = settings or get_settings()
    if settings.provider_enabled:
        logger.info(
            "Using AI provider analyzer",
            extra={"analyzer": ProviderAnalyzer.name}
        )
        return ProviderAnalyzer(
            api_key=settings.AI_PROVIDER_API_KEY,
            url=settings.AI_PROVIDER_URL,
            model=settings.AI_PROVIDER_MODEL,
            timeout=settings.AI_PROVIDER_TIMEOUT_SECONDS
        )
    return PlaceholderAnalyzer()
