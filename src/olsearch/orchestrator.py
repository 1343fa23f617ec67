"""
Search orchestration: blocking and non-blocking searches over one computation.

Both entry points run the query through :class:`~olsearch.client.OLClient`
and shape the entries with :func:`rank_and_format`. The non-blocking form
runs on a single-worker thread pool and hands every completion to a
``dispatch`` callable, which is responsible for moving it onto the context
that owns presentation state (a GUI thread, an event loop, ...). A
completion is never delivered on the worker thread itself.

Ordering policy: searches submitted through :meth:`SearchOrchestrator.search_async`
are queued FIFO on one lane. They run one at a time and complete in
submission order. Nothing is replaced or rejected while the orchestrator is
running.

Usage:
    with SearchOrchestrator() as orchestrator:
        lines = orchestrator.search_blocking("tolkien", 5)

    ui_queue = queue.SimpleQueue()
    with SearchOrchestrator(dispatch=ui_queue.put) as orchestrator:
        orchestrator.search_async("tolkien", 10, on_complete=print)
        ui_queue.get()()
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

import httpx

from olsearch.client import OLClient
from olsearch.config import OLConfig
from olsearch.formatting import format_entry
from olsearch.logging import WORKER_LANE, get_search_id, new_search_id, search_scope
from olsearch.models import Entry

logger = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], None]], None]


def rank_and_format(entries: Iterable[Entry | None], limit: int) -> list[str]:
    """Drop ``None`` placeholders, keep the first *limit* entries, format them.

    API order is preserved; nothing is sorted.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    lines: list[str] = []
    for entry in entries:
        if len(lines) >= limit:
            break
        if entry is None:
            continue
        lines.append(format_entry(entry))
    return lines


@dataclass(frozen=True)
class SearchOutcome:
    """Completion of one non-blocking search.

    ``error`` is ``None`` on success. A successful search with zero results
    has ``ok == True`` and empty ``lines``.
    """

    query: str
    lines: tuple[str, ...] = ()
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SearchHandle:
    """Pending result of :meth:`SearchOrchestrator.search_async`."""

    def __init__(self, query: str, future: Future[list[str]]) -> None:
        self.query = query
        self._future = future

    @property
    def future(self) -> Future[list[str]]:
        return self._future

    def cancel(self) -> bool:
        """Cancel the search if it has not started yet.

        Returns ``False`` when it is already running or finished.
        """
        return self._future.cancel()

    def cancelled(self) -> bool:
        return self._future.cancelled()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> list[str]:
        """Block until the search finishes; re-raises its error."""
        return self._future.result(timeout)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled() else "done" if self.done() else "pending"
        return f"<SearchHandle query={self.query!r} {state}>"


class SearchOrchestrator:
    """Runs searches either on the caller's thread or on a single worker lane.

    Args:
        client: Query executor to use. When omitted, one is created from
            *config* and closed by :meth:`shutdown`.
        dispatch: Callable that receives a zero-argument callable and runs it
            on the presentation context. When omitted, completions go to the
            event loop running in the thread that calls :meth:`search_async`;
            asking for ``on_complete`` with neither raises ``ValueError``.
        config: Configuration used when *client* is omitted.
    """

    def __init__(
        self,
        client: OLClient | None = None,
        *,
        dispatch: Dispatch | None = None,
        config: OLConfig | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or OLClient(config)
        self._dispatch = dispatch
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="olsearch-worker")
        self._lock = threading.Lock()
        self._shutdown = False

    @property
    def client(self) -> OLClient:
        return self._client

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def search_blocking(self, query: str, limit: int) -> list[str]:
        """Search on the calling thread and return formatted lines.

        Errors from the executor propagate unchanged.
        """
        with search_scope(get_search_id() or new_search_id()):
            logger.debug("Blocking search", extra={"query": query, "limit": limit})
            return self._search(query, limit)

    def _search(self, query: str, limit: int) -> list[str]:
        entries = self._client.execute(query)
        return rank_and_format(entries, limit)

    def _run(self, search_id: str, query: str, limit: int) -> list[str]:
        with search_scope(search_id, WORKER_LANE):
            logger.debug("Worker search start", extra={"query": query, "limit": limit})
            return self._search(query, limit)

    def _submit(self, search_id: str, query: str, limit: int) -> Future[list[str]]:
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        with self._lock:
            if self._shutdown:
                raise RuntimeError("SearchOrchestrator is shut down")
            future = self._executor.submit(self._run, search_id, query, limit)
        with search_scope(search_id):
            logger.debug("Queued search", extra={"query": query, "limit": limit})
        return future

    def _resolve_dispatch(self) -> Dispatch:
        if self._dispatch is not None:
            return self._dispatch
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise ValueError(
                "on_complete needs a dispatch callable or a running event loop"
            ) from None
        return loop.call_soon_threadsafe

    def search_async(
        self,
        query: str,
        limit: int,
        on_complete: Callable[[SearchOutcome], None] | None = None,
    ) -> SearchHandle:
        """Queue a search on the worker lane and return immediately.

        When the search finishes (or fails), *on_complete* is called with a
        :class:`SearchOutcome` from inside ``dispatch``, never directly from
        the worker thread. Cancelled searches and completions arriving after
        :meth:`shutdown` are not delivered.

        Raises:
            ValueError: If *limit* is negative, or *on_complete* is given but
                there is no dispatch and no running event loop.
            RuntimeError: After :meth:`shutdown`.
        """
        dispatch = self._resolve_dispatch() if on_complete is not None else None
        search_id = new_search_id()
        future = self._submit(search_id, query, limit)
        if on_complete is not None and dispatch is not None:
            future.add_done_callback(
                lambda f: self._notify(search_id, query, f, dispatch, on_complete)
            )
        return SearchHandle(query, future)

    def _notify(
        self,
        search_id: str,
        query: str,
        future: Future[list[str]],
        dispatch: Dispatch,
        on_complete: Callable[[SearchOutcome], None],
    ) -> None:
        with search_scope(search_id, WORKER_LANE):
            if future.cancelled() or self._shutdown:
                logger.debug("Discarding completion", extra={"query": query})
                return

            error = future.exception()
            if error is None:
                outcome = SearchOutcome(query=query, lines=tuple(future.result()))
            else:
                logger.warning("Search failed: %s", error, extra={"query": query})
                outcome = SearchOutcome(query=query, error=error)

        def deliver() -> None:
            with search_scope(search_id):
                # shutdown may have happened while the callable sat in the UI queue
                if self._shutdown:
                    logger.debug("Discarding completion after shutdown", extra={"query": query})
                    return
                on_complete(outcome)

        dispatch(deliver)

    async def asearch(self, query: str, limit: int) -> list[str]:
        """Await a search queued on the worker lane.

        The result resolves on the running event loop, so the event loop is
        the presentation context here.
        Cancelling the awaiting task cancels the search if it is still queued.
        """
        future = self._submit(new_search_id(), query, limit)
        return await asyncio.wrap_future(future)

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting work, cancel queued searches, interrupt the running one.

        Interrupting is best effort: closing the client the orchestrator
        created drops its connections, so an in-flight exchange fails early.
        An injected client belongs to the caller and is left open, so its
        in-flight exchange runs to completion. Either way the completion is
        discarded. Calling this more than once is harmless.
        """
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
        self._executor.shutdown(wait=False, cancel_futures=True)
        if self._owns_client:
            self._client.close()
        if wait:
            self._executor.shutdown(wait=True)
        logger.debug("SearchOrchestrator shut down")

    def __enter__(self) -> SearchOrchestrator:
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def search(
    query: str,
    *,
    limit: int | None = None,
    base_url: str | None = None,
    timeout: float | None = None,
    _transport_override: httpx.BaseTransport | None = None,
) -> list[str]:
    """Run one blocking search and return formatted lines (one-shot convenience).

    Creates a temporary client for a single call. For repeated use, prefer
    :class:`SearchOrchestrator` with a long-lived :class:`OLClient`.

    Args:
        query: Search query string (must be non-empty).
        limit: Max lines to return. Falls back to ``OLSEARCH_CLI_LIMIT``.
        base_url: OpenLibrary base URL. Falls back to ``OLSEARCH_BASE_URL``.
        timeout: Exchange timeout in seconds (default 10).

    Raises:
        ValueError: If query is blank.
        OLConnectionError: If the exchange could not complete.
        OLStatusError: If OpenLibrary returns a status other than 200.
        OLPayloadError: If OpenLibrary returns an unexpected body.
    """
    config = OLConfig.from_env(base_url=base_url, timeout=timeout)
    effective_limit = limit if limit is not None else config.cli_limit
    with OLClient(config, _sync_transport=_transport_override) as client:
        return rank_and_format(client.execute(query), effective_limit)
