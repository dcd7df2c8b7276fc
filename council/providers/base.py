"""
Shared plumbing for HTTP oracle backends.
"""

from typing import Optional, Dict, Any, Tuple
import logging

import httpx

from council.core.errors import AuthenticationError, ConfigurationError, ProviderError, RateLimitError
from council.core.oracle import Oracle

logger = logging.getLogger(__name__)


class HttpOracle(Oracle):
    """
    Base class for oracles reached over HTTP.

    Holds a lazily created ``httpx.AsyncClient``; callers release it with
    ``aclose()``. Subclasses set ``provider_name``, ``default_base_url``,
    ``default_model_name`` and a ``pricing`` table of USD per million
    input/output tokens keyed by model prefix.
    """

    provider_name = "http"
    default_base_url = ""
    default_model_name: Optional[str] = None
    pricing: Dict[str, Tuple[float, float]] = {}

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = 60.0,
        input_cost_per_million: Optional[float] = None,
        output_cost_per_million: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ConfigurationError(f"API key is required for {self.provider_name} provider")

        self.api_key = api_key
        self.model = model or self.default_model_name
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._input_cost = input_cost_per_million
        self._output_cost = output_cost_per_million
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return self.provider_name

    @property
    def default_model(self) -> Optional[str]:
        return self.default_model_name

    @property
    def supports_tools(self) -> bool:
        return True

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json; charset=utf-8",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                headers=self.headers(),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON body and return the decoded JSON response."""
        client = await self._get_client()

        try:
            response = await client.post(path, json=body)
        except httpx.TimeoutException as e:
            raise ProviderError("Request timed out", provider=self.name, recoverable=True, details=e) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Request failed: {e}", provider=self.name, recoverable=True, details=e) from e

        if response.status_code != 200:
            raise self._error_for(response)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError("Malformed JSON response", provider=self.name, details=e) from e

    def _error_for(self, response: httpx.Response) -> ProviderError:
        """Map an HTTP error response to the provider error taxonomy."""
        status = response.status_code
        message = self._error_message(response)

        if status in (401, 403):
            return AuthenticationError(message, provider=self.name, status_code=status)
        if status == 429:
            retry_after = response.headers.get("retry-after")
            try:
                retry = float(retry_after) if retry_after else None
            except ValueError:
                retry = None
            return RateLimitError(message, provider=self.name, status_code=status, retry_after=retry)

        return ProviderError(message, provider=self.name, status_code=status, recoverable=status >= 500)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        error = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error, dict):
            return error.get("message") or str(error)
        if error:
            return str(error)
        return f"HTTP {response.status_code}"

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> float:
        input_rate, output_rate = self._rates()
        return (input_tokens * input_rate + output_tokens * output_rate) / 1_000_000

    def _rates(self) -> Tuple[float, float]:
        table_in, table_out = 0.0, 0.0
        # Longest prefix wins, so "gpt-4o-mini" beats "gpt-4o"
        for prefix in sorted(self.pricing, key=len, reverse=True):
            if self.model and self.model.startswith(prefix):
                table_in, table_out = self.pricing[prefix]
                break
        return (
            self._input_cost if self._input_cost is not None else table_in,
            self._output_cost if self._output_cost is not None else table_out,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model='{self.model}')"
