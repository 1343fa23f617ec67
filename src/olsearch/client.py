"""
OpenLibrary query executor with a persistent HTTP connection pool.

``OLClient`` turns a free-text query into the list of decoded entries of one
``search.json`` response. Every failure is surfaced exactly once as one of
the :class:`~olsearch.models.OLError` subclasses; nothing is retried.

Usage:
    from olsearch import OLClient
    with OLClient() as client:
        entries = client.execute("tolkien")
"""

from __future__ import annotations

import importlib.metadata
import logging
import time

import httpx

from olsearch.config import OLConfig
from olsearch.models import (
    Entry,
    OLConnectionError,
    OLPayloadError,
    OLStatusError,
    SearchEnvelope,
    decode_envelope,
)

logger = logging.getLogger(__name__)

try:
    _PKG_VERSION = importlib.metadata.version("olsearch")
except importlib.metadata.PackageNotFoundError:
    _PKG_VERSION = "dev"

_USER_AGENT = f"olsearch/{_PKG_VERSION}"

_SUCCESS_STATUS = 200


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _elapsed_ms(t0: float) -> float:
    return (time.monotonic() - t0) * 1000


def _validate_query(query: str) -> str:
    """Reject blank queries. The text itself is sent unchanged."""
    if not query or not query.strip():
        raise ValueError("query must be a non-empty string")
    return query


def _validate_timeout(timeout: float | None, default: float) -> float:
    if timeout is None:
        return default
    if timeout <= 0:
        raise ValueError(f"timeout must be > 0, got {timeout}")
    return timeout


def _handle_transport_error(exc: httpx.HTTPError, query: str, t0: float, url: str) -> None:
    """Map httpx exceptions to OLConnectionError. Always raises."""
    elapsed = _elapsed_ms(t0)
    if isinstance(exc, httpx.TimeoutException):
        logger.warning("OpenLibrary timeout for query=%r (%.1fms)", query, elapsed)
        raise OLConnectionError(f"Timeout talking to {url}: {exc}") from exc

    if isinstance(exc, httpx.ConnectError):
        logger.warning("OpenLibrary connection failed for query=%r (%.1fms): %s", query, elapsed, exc)
        raise OLConnectionError(f"Cannot connect to {url}: {exc}") from exc

    logger.warning("OpenLibrary request failed for query=%r (%.1fms): %s", query, elapsed, exc)
    raise OLConnectionError(f"Request to {url} failed: {exc}") from exc


def _finalize(query: str, resp: httpx.Response, t0: float) -> SearchEnvelope:
    """Check the status, decode the body, and log the outcome."""
    if resp.status_code != _SUCCESS_STATUS:
        logger.warning(
            "OpenLibrary HTTP %d for query=%r (%.1fms)",
            resp.status_code,
            query,
            _elapsed_ms(t0),
            extra={"status": resp.status_code},
        )
        raise OLStatusError(resp.status_code, resp.text[:500])

    try:
        envelope = decode_envelope(resp.content)
    except OLPayloadError:
        logger.warning("OpenLibrary malformed payload for query=%r (%.1fms)", query, _elapsed_ms(t0))
        raise

    elapsed = _elapsed_ms(t0)
    logger.info(
        "OpenLibrary query=%r num_found=%d returned=%d elapsed_ms=%.1f",
        query,
        envelope.num_found,
        len(envelope.entries),
        elapsed,
        extra={"status": resp.status_code, "elapsed_ms": round(elapsed, 1)},
    )
    return envelope


# ---------------------------------------------------------------------------
# OLClient
# ---------------------------------------------------------------------------


class OLClient:
    """Persistent OpenLibrary client with context manager support.

    Holds an ``httpx.Client`` for the blocking path. The ``httpx.AsyncClient``
    behind :meth:`aexecute` is created on the first async call; use
    :meth:`aclose` (or ``async with``) to release it. Both are stateless from
    the caller's point of view and may be shared across threads.
    """

    def __init__(
        self,
        config: OLConfig | None = None,
        *,
        _sync_transport: httpx.BaseTransport | None = None,
        _async_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or OLConfig.from_env()
        self._url = self._config.search_url

        self._timeout = httpx.Timeout(self._config.timeout)
        self._headers = {
            "Accept": "application/json",
            "User-Agent": _USER_AGENT,
        }

        transport = _sync_transport or httpx.HTTPTransport(
            verify=self._config.verify_ssl,  # type: ignore[arg-type]
        )
        self._sync_client = httpx.Client(
            transport=transport, timeout=self._timeout, headers=self._headers
        )

        # built on first async call so that sync-only use never opens it
        self._async_transport = _async_transport
        self._async_client: httpx.AsyncClient | None = None

        self._closed = False
        logger.debug("OLClient created url=%s timeout=%.1f", self._url, self._config.timeout)

    def _get_async_client(self) -> httpx.AsyncClient:
        if self._async_client is None:
            transport = self._async_transport or httpx.AsyncHTTPTransport(
                verify=self._config.verify_ssl,  # type: ignore[arg-type]
            )
            self._async_client = httpx.AsyncClient(
                transport=transport, timeout=self._timeout, headers=self._headers
            )
        return self._async_client

    @property
    def config(self) -> OLConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def fetch_envelope(self, query: str, *, timeout: float | None = None) -> SearchEnvelope:
        """Run one search exchange and return the decoded envelope.

        Args:
            query: Free-text query, sent verbatim. Must not be blank.
            timeout: Override the configured exchange timeout, in seconds.

        Raises:
            ValueError: If the query is blank, or timeout <= 0.
            OLConnectionError: If the exchange could not complete.
            OLStatusError: If the status code is not 200.
            OLPayloadError: If the body does not match the response schema.
        """
        if self._closed:
            raise RuntimeError("OLClient is closed")

        query = _validate_query(query)
        effective_timeout = _validate_timeout(timeout, self._config.timeout)
        logger.debug("OpenLibrary search start query=%r timeout=%.1f", query, effective_timeout)

        t0 = time.monotonic()
        try:
            resp = self._sync_client.get(
                self._url, params={"q": query}, timeout=effective_timeout
            )
        except httpx.HTTPError as exc:
            _handle_transport_error(exc, query, t0, self._url)
            raise  # unreachable
        return _finalize(query, resp, t0)

    def execute(self, query: str, *, timeout: float | None = None) -> list[Entry | None]:
        """Run one search exchange and return its entries in API order.

        Same arguments and errors as :meth:`fetch_envelope`. An envelope with
        no ``docs`` field yields an empty list.
        """
        return list(self.fetch_envelope(query, timeout=timeout).entries)

    async def afetch_envelope(
        self, query: str, *, timeout: float | None = None
    ) -> SearchEnvelope:
        """Async variant of fetch_envelope(). Uses the persistent async client."""
        if self._closed:
            raise RuntimeError("OLClient is closed")

        query = _validate_query(query)
        effective_timeout = _validate_timeout(timeout, self._config.timeout)
        logger.debug("OpenLibrary async search start query=%r", query)

        t0 = time.monotonic()
        try:
            resp = await self._get_async_client().get(
                self._url, params={"q": query}, timeout=effective_timeout
            )
        except httpx.HTTPError as exc:
            _handle_transport_error(exc, query, t0, self._url)
            raise  # unreachable
        return _finalize(query, resp, t0)

    async def aexecute(self, query: str, *, timeout: float | None = None) -> list[Entry | None]:
        """Async variant of execute()."""
        envelope = await self.afetch_envelope(query, timeout=timeout)
        return list(envelope.entries)

    def close(self) -> None:
        """Close the blocking HTTP client.

        An async client opened by :meth:`aexecute` has to be released with
        :meth:`aclose` from its event loop; it is reported here if still open.
        """
        if not self._closed:
            self._sync_client.close()
            if self._async_client is not None and not self._async_client.is_closed:
                logger.warning("OLClient.close() left the async client open; use aclose()")
            self._closed = True
            logger.debug("OLClient closed url=%s", self._url)

    async def aclose(self) -> None:
        """Close both HTTP clients from a coroutine."""
        if not self._closed:
            if self._async_client is not None:
                await self._async_client.aclose()
            self._sync_client.close()
            self._closed = True
            logger.debug("OLClient closed (async) url=%s", self._url)

    def __enter__(self) -> OLClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    async def __aenter__(self) -> OLClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
