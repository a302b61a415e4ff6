"""Overpass API client for parking queries."""

import logging
from typing import Optional

import httpx

from ..errors import TransportFailure

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class OverpassClient:
    """
    Async wrapper around the Overpass interpreter endpoint.

    The client only moves bytes: it POSTs an already form-encoded query and
    hands back the raw response body. Any network error, timeout or non-2xx
    status is raised as TransportFailure.
    """

    def __init__(
        self,
        url: str = "https://overpass-api.de/api/interpreter",
        timeout_seconds: float = 30.0,
        user_agent: str = "parking-finder/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Overpass client.

        Args:
            url: Interpreter endpoint
            timeout_seconds: Timeout applied to each phase of a request (connect, read, write, pool)
            user_agent: User-Agent header sent with every request
            transport: Optional httpx transport (used by tests)
        """
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        if self._client is not None:
            return

        logger.info(f"Using Overpass endpoint {self.url}")
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_seconds),
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    async def fetch(self, body: bytes) -> bytes:
        """
        POST a form-encoded query and return the response body.

        Args:
            body: ``data=<percent-encoded query>`` request body

        Returns:
            Raw response bytes

        Raises:
            TransportFailure: On connection errors, timeouts or HTTP error status
        """
        if self._client is None:
            await self.connect()

        try:
            response = await self._client.post(
                self.url,
                content=body,
                headers={"Content-Type": FORM_CONTENT_TYPE},
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransportFailure(f"request timed out after {self.timeout_seconds:g}s") from e
        except httpx.HTTPStatusError as e:
            raise TransportFailure(f"server returned HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportFailure(str(e) or e.__class__.__name__) from e

        logger.debug(f"Received {len(response.content)} bytes from Overpass")
        return response.content

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client has been created."""
        return self._client is not None

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Closed Overpass client")

    async def __aenter__(self) -> "OverpassClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
