"""
Logging setup for olsearch.

Each search gets a short id and a *lane*: ``"caller"`` when it runs on the
thread that asked for it (CLI, :meth:`SearchOrchestrator.search_blocking`)
and ``"worker"`` when it runs on the orchestrator's single worker thread.
Both live in context variables and are stamped onto every record by a
handler filter, so lines from the GUI thread and the worker interleave
readably.

Usage::

    from olsearch.logging import configure_logging, search_scope
    configure_logging(json_format=True)
    with search_scope(new_search_id()):
        logger.info("...", extra={"query": "tolkien", "limit": 5})
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import IO

CALLER_LANE = "caller"
WORKER_LANE = "worker"

_search_id: ContextVar[str] = ContextVar("olsearch_search_id", default="")
_lane: ContextVar[str] = ContextVar("olsearch_lane", default=CALLER_LANE)

# attributes every LogRecord has; anything else came from ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_CONTEXT_ATTRS = ("search_id", "lane")

_TEXT_FORMAT = "%(asctime)s %(levelname)-5s %(lane)s:%(search_id)s %(name)s - %(message)s"


def new_search_id() -> str:
    return uuid.uuid4().hex[:8]


def bind_search_id(search_id: str | None = None) -> str:
    """Set the search id for the rest of the current context and return it."""
    sid = search_id or new_search_id()
    _search_id.set(sid)
    return sid


def get_search_id() -> str:
    return _search_id.get()


def get_lane() -> str:
    return _lane.get()


@contextmanager
def search_scope(search_id: str, lane: str = CALLER_LANE) -> Iterator[str]:
    """Bind *search_id* and *lane* inside the block, restoring both afterwards."""
    sid_token = _search_id.set(search_id)
    lane_token = _lane.set(lane)
    try:
        yield search_id
    finally:
        _lane.reset(lane_token)
        _search_id.reset(sid_token)


class _SearchContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        # explicit extra= values win over the context
        if not getattr(record, "search_id", ""):
            record.search_id = _search_id.get()  # type: ignore[attr-defined]
        if not getattr(record, "lane", ""):
            record.lane = _lane.get()  # type: ignore[attr-defined]
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Always present: ``timestamp``, ``level``, ``logger``, ``message``,
    ``lane``. ``search_id`` is present when one is bound. Structured fields
    such as ``query``, ``limit``, ``status`` or ``elapsed_ms`` passed through
    ``extra=`` follow as top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, object] = {
            "timestamp": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "lane": getattr(record, "lane", "") or _lane.get(),
        }
        sid = getattr(record, "search_id", "") or _search_id.get()
        if sid:
            payload["search_id"] = sid

        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in _CONTEXT_ATTRS
        )

        if record.exc_info and record.exc_info[0]:
            payload["exception"] = self.formatException(record.exc_info)

        # Cyrillic titles and messages stay readable
        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(
    level: int = logging.WARNING,
    json_format: bool = False,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Route the ``olsearch`` logger to *stream* (stderr by default).

    Replaces handlers from an earlier call and stops propagation to the root
    logger, so the CLI's stdout stays clean. Returns the installed handler.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(_TEXT_FORMAT, defaults={"search_id": "-", "lane": CALLER_LANE})
        )
    handler.addFilter(_SearchContextFilter())

    package_logger = logging.getLogger("olsearch")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
    return handler
