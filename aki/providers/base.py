"""Abstract base class for API providers."""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import httpx

from ..utils.logger import get_logger
from ..utils.errors import InvalidRequestError, MalformedResponseError, TransportError

logger = get_logger(__name__)


class BaseProvider(ABC):
    """Abstract base class for all API providers."""

    provider_name = "provider"

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize provider.

        Args:
            api_key: API key for bearer authentication
            endpoint: URL requests are posted to
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def initialize(self):
        """Initialize the HTTP client."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._get_default_headers(),
                transport=self.transport,
            )
            logger.info(
                f"{self.__class__.__name__} initialized",
                extra={"provider": self.__class__.__name__}
            )

    async def close(self):
        """Close the HTTP client."""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info(
                f"{self.__class__.__name__} closed",
                extra={"provider": self.__class__.__name__}
            )

    def _get_default_headers(self) -> dict:
        """Get default headers for requests."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _ensure_client(self):
        """Ensure client is initialized."""
        if self.client is None:
            raise RuntimeError(
                f"{self.__class__.__name__} not initialized. "
                "Call initialize() or use as async context manager."
            )

    async def _post_json(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload and return the decoded JSON object.

        Raises:
            InvalidRequestError: Payload is not JSON serializable
            TransportError: Connection-level failure
            MalformedResponseError: Non-2xx status, empty body or non-object JSON
        """
        self._ensure_client()

        try:
            body = json.dumps(payload)
        except (TypeError, ValueError) as e:
            raise InvalidRequestError(f"Could not serialize {self.provider_name} request: {e}")

        try:
            response = await self.client.post(self.endpoint, content=body)
        except httpx.TransportError as e:
            logger.error(
                f"❌ {self.provider_name} transport error: {type(e).__name__}",
                extra={"provider": self.provider_name, "error": str(e)}
            )
            raise TransportError(self.provider_name, e)

        if not response.is_success:
            logger.error(
                f"❌ {self.provider_name} request failed: {response.status_code}",
                extra={
                    "provider": self.provider_name,
                    "status": response.status_code,
                    "response": response.text[:500],
                }
            )
            raise MalformedResponseError(
                self.provider_name,
                response.text[:500] or "empty body",
                response.status_code,
            )

        if not response.content:
            raise MalformedResponseError(self.provider_name, "empty body")

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(self.provider_name, f"invalid JSON: {e}")

        if not isinstance(data, dict):
            raise MalformedResponseError(self.provider_name, "expected a JSON object")

        return data

    @abstractmethod
    def build_payload(self, *args, **kwargs) -> Dict[str, Any]:
        """Build the request envelope for this provider."""
        pass
