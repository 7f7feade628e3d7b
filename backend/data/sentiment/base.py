"""
Sentiment Provider Base Class

Abstract base class for all external sentiment providers.
"""

import json
import logging
import math
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx

from data.sentiment.exceptions import (
    ConfigurationError,
    ParseError,
    ProviderHTTPError,
    ValidationError,
)
from data.sentiment.models import DetailedSentimentResult, ProviderName

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(content: str, provider: str) -> dict[str, Any]:
    """
    Recover a JSON object from raw model output.

    Strips markdown code fences and, if the object is wrapped in other
    text, keeps the outermost ``{...}`` span.

    Raises:
        ParseError: If no JSON object can be decoded
    """
    cleaned = _CODE_FENCE.sub("", content).strip()

    match = _JSON_OBJECT.search(cleaned)
    if match:
        cleaned = match.group(0)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse {provider} response: {cleaned[:200]}")
        raise ParseError(f"Invalid JSON response from {provider}: {e}") from e

    if not isinstance(parsed, dict):
        raise ParseError(f"Invalid JSON response from {provider}: expected an object")
    return parsed


def require_number(value: Any, field_name: str, provider: str) -> float:
    """Return value as float or raise ParseError if it is not a finite number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"Invalid response structure from {provider}: {field_name}")
    if not math.isfinite(value):
        raise ParseError(f"Non-finite {field_name} in {provider} response")
    return float(value)


class SentimentProvider(ABC):
    """
    Abstract base class for sentiment providers.

    Subclasses call exactly one external API family:
    - GeminiSentimentProvider: Google Gemini generateContent
    - HuggingFaceSentimentProvider: Hugging Face Inference classifiers
    - OpenAISentimentProvider: OpenAI chat completions

    All providers normalize scores to -1.0 (negative) to +1.0 (positive)
    and confidences to 0.0 to 1.0.
    """

    name: ProviderName

    def __init__(
        self,
        api_key: str | None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        """
        Initialize provider.

        Args:
            api_key: Provider credential, None when unconfigured
            http_client: Optional pre-built client (used by tests)
            timeout: Request timeout in seconds for the default client
        """
        self._api_key = api_key or None
        self._client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        """Check if the provider has a credential."""
        return self._api_key is not None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    def _check_request(self, text: str) -> None:
        """Raise configuration/validation errors before any I/O."""
        if not self.is_configured:
            raise ConfigurationError(
                f"{self.name.value} API key not found. "
                f"Please set {self.name.value.upper()}_API_KEY"
            )
        if not text or not text.strip():
            raise ValidationError("Text cannot be empty")

    async def _post(self, url: str, **kwargs: Any) -> httpx.Response:
        """
        POST through the shared client.

        Transport failures (connect errors, timeouts) carry no response, so
        they surface as ProviderHTTPError with status 0.
        """
        try:
            return await self._get_client().post(url, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderHTTPError(
                0, f"{self.name.value} request failed: {e}"
            ) from e

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise ProviderHTTPError for non-success responses."""
        if response.is_success:
            return

        detail = ""
        try:
            body = response.json()
            if isinstance(body, dict):
                error = body.get("error")
                if isinstance(error, dict):
                    detail = error.get("message", "")
                elif error:
                    detail = str(error)
        except ValueError:
            detail = response.text[:200]

        raise ProviderHTTPError(
            response.status_code,
            f"{self.name.value} API error: {response.status_code} "
            f"{response.reason_phrase}. {detail}".strip(),
        )

    @abstractmethod
    async def analyze(self, text: str) -> DetailedSentimentResult:
        """
        Analyze text and return a normalized result.

        Raises:
            ConfigurationError: If no credential is configured
            ValidationError: If text is empty or whitespace-only
        """

    async def close(self):
        """Close HTTP client."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None
