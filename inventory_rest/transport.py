"""
REST transport for OpenMRS-style web services.

Provides an async client that maps the generic one/all/save/remove/post
verbs onto HTTP calls against a configurable base URL. Results are reported
through success and error callbacks as well as the return value; transport
failures are converted into ``TransportError`` instances instead of being
raised.
"""

import inspect
import time
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

import httpx

from .config import settings
from .exceptions import (
    HTTPStatusFailure,
    RequestTimeoutError,
    ServiceUnavailableError,
    TransportError,
)
from .logging_config import get_logger, get_request_id

logger = get_logger(__name__)

Callback = Callable[[Any], Union[None, Awaitable[None]]]

SCALAR_TYPES = (str, int, float, bool)


async def invoke_callback(callback: Optional[Callback], value: Any) -> None:
    """
    Call a success or error callback, awaiting it if it is a coroutine.

    Args:
        callback: Plain function, coroutine function, or None
        value: Payload or error handed to the callback
    """
    if callback is None:
        return
    result = callback(value)
    if inspect.isawaitable(result):
        await result


def scalar_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Keep only values that can be sent as query parameters."""
    if not params:
        return {}
    return {
        key: value
        for key, value in params.items()
        if isinstance(value, SCALAR_TYPES)
    }


class RestfulService:
    """
    Async REST transport bound to one base URL at a time.

    Uses a persistent ``httpx.AsyncClient`` with connection pooling that is
    created on first use and released by :meth:`close`.

    Attributes:
        server_url: Scheme and host that relative base URLs are joined to
        base_url: Absolute URL every resource path is appended to
        timeout: Request timeout in seconds
        http_transport: Optional httpx transport for the pooled client,
            e.g. ``httpx.MockTransport`` in tests
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        server_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.server_url = (server_url or settings.OPENMRS_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.http_transport = http_transport
        self.base_url = ""
        self._client: Optional[httpx.AsyncClient] = None

        self.set_base_url(
            base_url
            or f"{settings.REST_ROOT_PATH}/{settings.DEFAULT_REST_VERSION}/"
        )

        logger.info(
            f"Initialized RestfulService: base_url={self.base_url}, "
            f"timeout={self.timeout}s"
        )

    def set_base_url(self, url: str) -> None:
        """
        Point the transport at a new base URL.

        Relative URLs (starting with ``/``) are joined to ``server_url``.

        Args:
            url: Absolute or server-relative base URL
        """
        if url.startswith("/"):
            url = f"{self.server_url}{url}"
        if not url.endswith("/"):
            url += "/"
        self.base_url = url
        logger.debug("Base URL set", extra={"extra_fields": {"base_url": url}})

    def build_url(self, resource: Optional[str], uuid: Optional[str] = None) -> str:
        """
        Build the request URL for a resource and optional uuid.

        Args:
            resource: Resource path below the base URL, may be empty
            uuid: Entity uuid appended as the last path segment

        Returns:
            Absolute request URL
        """
        url = self.base_url
        if resource:
            url += resource.strip("/")
        if uuid:
            url = f"{url.rstrip('/')}/{uuid}"
        return url

    async def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create the persistent HTTP client with connection pooling.

        Basic auth is attached when OPENMRS_USERNAME is configured.

        Returns:
            Configured httpx.AsyncClient instance
        """
        if self._client is None or self._client.is_closed:
            auth = None
            if settings.OPENMRS_USERNAME:
                auth = httpx.BasicAuth(
                    settings.OPENMRS_USERNAME, settings.OPENMRS_PASSWORD or ""
                )
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                auth=auth,
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=100,
                    keepalive_expiry=30.0,
                ),
                http2=settings.ENABLE_HTTP2,
                transport=self.http_transport,
            )
            logger.debug("Created new HTTP client with connection pooling")
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed HTTP client")

    def _get_request_headers(self) -> Dict[str, str]:
        """
        Get common request headers including request ID for tracing.

        Returns:
            Dictionary of HTTP headers
        """
        headers = {
            "User-Agent": settings.USER_AGENT,
            "Accept": "application/json",
        }

        request_id = get_request_id()
        if request_id and settings.ENABLE_REQUEST_TRACING:
            headers["X-Request-ID"] = request_id

        return headers

    @staticmethod
    def _parse_body(response: httpx.Response, url: str) -> Any:
        """
        Decode a successful response body.

        Args:
            response: Response that passed ``raise_for_status``
            url: Request URL, for error reporting

        Returns:
            Decoded JSON, or an empty dict for 204 and empty bodies

        Raises:
            TransportError: If the body is not valid JSON
        """
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as error:
            raise TransportError(
                "Response body is not valid JSON",
                url=url,
                details={"error_type": "decode_error", "reason": str(error)},
            ) from error

    async def _request(
        self,
        method: str,
        url: str,
        on_success: Optional[Callback],
        on_error: Optional[Callback],
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """
        Perform one HTTP call and report its outcome.

        Returns:
            Decoded response payload, or None if the call failed
        """
        start_time = time.perf_counter()
        payload: Any = None
        error: Optional[TransportError] = None

        logger.debug(
            "Sending request",
            extra={
                "extra_fields": {
                    "method": method,
                    "url": url,
                    "params": params,
                }
            },
        )

        try:
            client = await self._get_client()
            response = await client.request(
                method,
                url,
                params=params or None,
                json=json,
                headers=self._get_request_headers(),
            )
            response.raise_for_status()
            payload = self._parse_body(response, url)

        except (httpx.TimeoutException, TimeoutError):
            error = RequestTimeoutError(url, self.timeout)

        except httpx.HTTPStatusError as exc:
            error = HTTPStatusFailure(
                url, exc.response.status_code, str(exc.response.text)
            )

        except httpx.ConnectError as exc:
            error = ServiceUnavailableError(url, str(exc))

        except httpx.RequestError as exc:
            error = TransportError(
                "Network error occurred while communicating with the server",
                url=url,
                details={"error_type": "request_error", "reason": str(exc)},
            )

        except TransportError as exc:
            error = exc

        except (TypeError, ValueError) as exc:
            # raised by httpx while JSON-encoding the request body
            error = TransportError(
                "Request body could not be encoded as JSON",
                url=url,
                details={"error_type": "encode_error", "reason": str(exc)},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000

        if error is not None:
            await self._report_failure(method, url, error, on_error, duration_ms)
            return None

        logger.info(
            "REST request succeeded",
            extra={
                "extra_fields": {
                    "method": method,
                    "url": url,
                    "duration_ms": duration_ms,
                }
            },
        )
        await invoke_callback(on_success, payload)
        return payload

    async def _report_failure(
        self,
        method: str,
        url: str,
        error: TransportError,
        on_error: Optional[Callback],
        duration_ms: float = 0.0,
    ) -> None:
        """
        Log a failed call and hand the error to the error callback.

        Args:
            method: HTTP method of the failed call
            url: Request URL
            error: Error describing the failure
            on_error: Caller's error callback, may be None
            duration_ms: Time spent on the call
        """
        logger.error(
            "REST request failed",
            extra={
                "extra_fields": {
                    "method": method,
                    "url": url,
                    "duration_ms": duration_ms,
                    **error.details,
                }
            },
        )
        await invoke_callback(on_error, error)

    async def _reject_missing_uuid(
        self,
        method: str,
        resource: str,
        on_error: Optional[Callback],
    ) -> None:
        """
        Refuse an entity call without a uuid.

        Without the uuid segment the URL would address the whole collection.
        """
        url = self.build_url(resource)
        error = TransportError(
            "An entity uuid is required",
            url=url,
            details={"error_type": "missing_uuid"},
        )
        await self._report_failure(method, url, error, on_error)

    async def get_one(
        self,
        resource: str,
        uuid: str,
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """Fetch a single entity by uuid. An empty uuid is reported as an error."""
        if not uuid:
            await self._reject_missing_uuid("GET", resource, on_error)
            return None
        return await self._request(
            "GET", self.build_url(resource, uuid), on_success, on_error
        )

    async def get_all(
        self,
        resource: Optional[str],
        params: Optional[Mapping[str, Any]] = None,
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """
        Fetch a collection, passing scalar ``params`` as the query string.

        An empty ``resource`` queries the base URL itself.
        """
        return await self._request(
            "GET",
            self.build_url(resource),
            on_success,
            on_error,
            params=scalar_params(params),
        )

    async def save_or_update(
        self,
        resource: str,
        uuid: Optional[str],
        payload: Mapping[str, Any],
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """
        Create an entity, or update it when ``uuid`` is non-empty.

        OpenMRS uses POST for both; updates address the entity's own URL.
        """
        return await self._request(
            "POST",
            self.build_url(resource, uuid or None),
            on_success,
            on_error,
            json=dict(payload),
        )

    async def remove(
        self,
        resource: str,
        uuid: str,
        params: Optional[Mapping[str, Any]] = None,
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """
        Delete an entity.

        ``params`` become the query string; ``reason`` retires the entity and
        ``purge=true`` removes it permanently. An empty uuid is reported as
        an error and nothing is sent.
        """
        if not uuid:
            await self._reject_missing_uuid("DELETE", resource, on_error)
            return None
        return await self._request(
            "DELETE",
            self.build_url(resource, uuid),
            on_success,
            on_error,
            params=scalar_params(params),
        )

    async def post(
        self,
        resource: str,
        payload: Any,
        on_success: Optional[Callback] = None,
        on_error: Optional[Callback] = None,
    ) -> Any:
        """POST an arbitrary JSON payload to a resource."""
        return await self._request(
            "POST", self.build_url(resource), on_success, on_error, json=payload
        )
