"""Gemini generateContent transport."""

import httpx
from typing import Optional

from pydantic import BaseModel

from ..utils.config import DEFAULT_GEMINI_ENDPOINT, Config
from ..utils.logger import get_logger
from ..utils.errors import TransportError

logger = get_logger(__name__)

CREDENTIAL_HEADER = "x-goog-api-key"
CREDENTIAL_PARAM = "key"
CREDENTIAL_MODES = ("header", "query")


class TransportResponse(BaseModel):
    """Raw HTTP outcome handed to the classifier."""
    status_code: int
    content: bytes


class GeminiTransport:
    """
    Sends serialized composition requests to Gemini.

    Makes exactly one HTTP call per ``send``. Retrying is the orchestrator's
    job. The API key travels either in the ``x-goog-api-key`` header or as
    the ``key`` query parameter, fixed when the client is opened.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_GEMINI_ENDPOINT,
        timeout: float = 90.0,
        credential_mode: str = "header",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: Gemini API key
            endpoint: Full generateContent URL
            timeout: Per-request timeout in seconds
            credential_mode: "header" or "query"
            transport: Optional httpx transport (used by tests)
        """
        if credential_mode not in CREDENTIAL_MODES:
            raise ValueError(f"Unknown credential mode: {credential_mode}")

        self.endpoint = endpoint
        self.timeout = timeout
        self.credential_mode = credential_mode
        self._api_key = api_key
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(
        cls,
        config: Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "GeminiTransport":
        return cls(
            api_key=config.gemini_api_key,
            endpoint=config.gemini_endpoint,
            timeout=config.generation.timeout_seconds,
            credential_mode=config.gemini_credential_mode,
            transport=transport,
        )

    @property
    def is_open(self) -> bool:
        return self._client is not None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        """Open the pooled HTTP client. Safe to call twice."""
        if self._client is not None:
            return

        headers = {"Content-Type": "application/json"}
        params = {}
        if self.credential_mode == "header":
            headers[CREDENTIAL_HEADER] = self._api_key
        else:
            params[CREDENTIAL_PARAM] = self._api_key

        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=headers,
            params=params,
            transport=self._transport,
        )
        logger.info(
            "Gemini transport opened",
            extra={"timeout": self.timeout, "credential_mode": self.credential_mode}
        )

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Gemini transport closed")

    async def send(self, body: bytes) -> TransportResponse:
        """
        POST a serialized request body.

        Args:
            body: JSON request body

        Returns:
            TransportResponse with status code and raw body, whatever the status

        Raises:
            TransportError: On connectivity, TLS or timeout failure
            RuntimeError: If the client was never opened
        """
        if self._client is None:
            raise RuntimeError(
                "GeminiTransport not initialized. "
                "Call initialize() or use as async context manager."
            )

        try:
            response = await self._client.post(self.endpoint, content=body)
        except httpx.TimeoutException as e:
            logger.warning(
                "Gemini request timed out",
                extra={"timeout": self.timeout, "error": type(e).__name__}
            )
            raise TransportError(f"Request timed out after {self.timeout}s")
        except httpx.RequestError as e:
            logger.warning(
                "Gemini request failed",
                extra={"error": f"{type(e).__name__}: {e}"}
            )
            raise TransportError(f"{type(e).__name__}: {e}")

        if response.status_code != 200:
            logger.warning(
                f"Gemini responded with {response.status_code}",
                extra={
                    "status": response.status_code,
                    "response": response.text[:500],
                }
            )

        return TransportResponse(status_code=response.status_code, content=response.content)
