"""Synchronous HTTP client for the FRC Events API.

:class:`SyncClient` wraps :class:`httpx.Client` and layers on:

- **Basic auth** -- the encoded API token is sent on every request.
- **Dry-run mode** -- prints the request to stderr and returns an empty
  JSON object without sending traffic.
- **Response caching** -- optional disk cache of decoded 2xx bodies via
  :class:`~frccli.cache.ResponseCache`.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...).
- **Error mapping** -- HTTP failures become
  :class:`~frccli.exceptions.FrccliError` subclasses.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Optional

import httpx

from frccli.exceptions import AuthError, ConnectionError_, NotFoundError, ServerError
from frccli.models import ApiConfig
from frccli.output import get_output

if TYPE_CHECKING:
    from frccli.cache import ResponseCache


class SyncClient:
    """Blocking client for JSON GET requests against the API root.

    Must be used as a context manager so that the underlying transport is
    opened and closed.

    Args:
        config: Base URL, timeout, retry and SSL settings.
        token: Basic auth token (already Base64-encoded). ``None`` sends no
            ``Authorization`` header.
        cache: Optional disk-based response cache.
        dry_run: When ``True``, requests are printed to stderr instead of
            being sent.
        transport: Optional :class:`httpx.BaseTransport` (tests pass an
            :class:`httpx.MockTransport`).

    Example::

        with SyncClient(config.api, token=token) as client:
            season = client.get_json("/2024")
    """

    def __init__(
        self,
        config: ApiConfig,
        token: Optional[str] = None,
        cache: Optional[ResponseCache] = None,
        dry_run: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._token = token
        self._cache = cache
        self._dry_run = dry_run
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Basic {self._token}"
        self._client = httpx.Client(
            base_url=self._config.base_url.rstrip("/"),
            headers=headers,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def url_for(self, path: str) -> str:
        """Absolute URL of *path* under the configured base URL."""
        return f"{self._config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET *path* and return the decoded JSON body.

        Empty bodies decode to ``None``; non-JSON bodies are returned as text.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On 5xx after all retries, or any other 4xx.
            ConnectionError_: On network / timeout errors after all retries.
        """
        params = {k: v for k, v in (params or {}).items() if v is not None}
        url = self.url_for(path)
        output = get_output()
        output.debug(f"GET {url}" + (f" {params}" if params else ""))

        if self._dry_run:
            output.info(f"[dry-run] GET {url}")
            for key, value in params.items():
                output.info(f"  Param: {key}={value}")
            return {}

        if self._cache is not None:
            cached = self._cache.get(url, params)
            if cached is not None:
                output.debug(f"Cache hit: {url}")
                return cached

        response = self._execute_with_retry(path, params)
        self._map_response_error(response)
        body = _decode(response)
        output.debug(f"HTTP {response.status_code}: {len(response.content)} bytes")

        if self._cache is not None:
            self._cache.set(url, params, body)
        return body

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _execute_with_retry(self, path: str, params: dict[str, Any]) -> httpx.Response:
        """Execute the request, retrying 5xx responses and network errors.

        The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        max_retries = self._config.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                response = self._client.get("/" + path.lstrip("/"), params=params)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                output.debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(delay)
                continue
            return response

        raise ServerError("Request failed after all retries")  # pragma: no cover

    @staticmethod
    def _map_response_error(response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("Message") or detail.get("message") or detail.get("error") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"
        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
