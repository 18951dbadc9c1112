"""
Infrastructure layer: shared upstream HTTP client and error taxonomy.
"""
import logging
from typing import Any, Dict, Optional
import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from agroenv.config import settings

logger = logging.getLogger(__name__)


class ExternalAPIError(Exception):
    """Base exception for failures talking to an upstream service."""

    kind = "external_api_error"
    default_status_code = 502

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code or self.default_status_code


class LocationNotFound(ExternalAPIError):
    """The geocoder returned no candidate for the query."""

    kind = "location_not_found"
    default_status_code = 404


class TransportFailure(ExternalAPIError):
    """Upstream answered with a non-2xx status or could not be reached."""

    kind = "transport_failure"

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, status_code)
        self.upstream_status = upstream_status


class WeatherFetchFailed(TransportFailure):
    """The weather archive could not deliver a daily series."""


class MalformedUpstreamResponse(ExternalAPIError):
    """Upstream answered 2xx but the body had an unexpected shape."""

    kind = "malformed_upstream_response"


class ExternalAPIClient:
    """
    Base client for an upstream JSON API.

    Holds one httpx.AsyncClient per upstream and maps every failure
    onto the ExternalAPIError taxonomy.
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Upstream base URL
            headers: Extra headers sent with every request
            timeout: Request timeout in seconds (defaults to settings)
        """
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers={"accept": "application/json", **(headers or {})},
            timeout=timeout if timeout is not None else settings.http_timeout_seconds,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _send(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        """
        Send a request, retrying transport errors and 5xx responses.

        4xx responses are returned to the caller without retry.
        """
        response = await self.client.request(method, endpoint, **kwargs)
        if response.status_code >= 500:
            response.raise_for_status()
        return response

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an HTTP request and decode its JSON body.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON body

        Raises:
            TransportFailure: Non-2xx status or connection failure
            MalformedUpstreamResponse: Body is not JSON
        """
        try:
            response = await self._send(method, endpoint, **kwargs)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"Upstream {self.base_url}{endpoint} returned {status}")
            raise TransportFailure(
                f"API request failed: {status}", upstream_status=status
            )
        except httpx.RequestError as e:
            logger.warning(f"Upstream {self.base_url}{endpoint} unreachable: {e!r}")
            raise TransportFailure(f"API request error: {str(e) or type(e).__name__}")

        if not response.is_success:
            logger.warning(
                f"Upstream {self.base_url}{endpoint} returned {response.status_code}"
            )
            raise TransportFailure(
                f"API request failed: {response.status_code} - {response.text}",
                upstream_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise MalformedUpstreamResponse(
                f"Upstream {endpoint} returned a non-JSON body"
            )
