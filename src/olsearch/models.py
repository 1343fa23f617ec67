"""
Data models, exception hierarchy, and response decoding for OpenLibrary search.

Models are frozen dataclasses so that decoded results can be handed between
the worker thread and the presentation thread without copying.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class OLError(Exception):
    """Base exception for all OpenLibrary search errors."""


class OLConnectionError(OLError):
    """The exchange could not complete (DNS, connection refused, timeout, interruption)."""


class OLProtocolError(OLError):
    """The exchange completed but the response is not usable."""


class OLStatusError(OLProtocolError):
    """OpenLibrary answered with a status other than 200."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code}: {detail}" if detail else f"HTTP {status_code}")


class OLPayloadError(OLProtocolError):
    """Status was 200 but the body does not match the search response schema."""

    def __init__(self, message: str, raw_body: str = "") -> None:
        self.raw_body = raw_body[:2000]
        super().__init__(message)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Entry:
    """A single catalog hit.

    ``None`` means the field was absent from the payload. An empty ``authors``
    tuple means the API sent an empty list.
    """

    title: str | None = None
    authors: tuple[str, ...] | None = None
    first_publish_year: int | None = None


@dataclass(frozen=True)
class SearchEnvelope:
    """Top-level decoded search response.

    ``entries`` keeps ``None`` placeholders for ``null`` items and for docs
    with wrongly typed fields, so that the orchestrator decides what to drop.
    """

    entries: tuple[Entry | None, ...] = ()
    num_found: int = 0


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _coerce_year(value: Any) -> int:
    # numeric strings such as "1954" are accepted as years
    if isinstance(value, bool):
        raise TypeError("boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(type(value).__name__)


def _decode_entry(raw: Any, index: int) -> Entry | None:
    """Decode one ``docs`` item.

    A doc whose known fields have the wrong type decodes to ``None`` so that
    one bad record does not fail the whole page.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise OLPayloadError(
            f"docs[{index}] must be an object, got {type(raw).__name__}",
            raw_body=str(raw),
        )

    title = raw.get("title")
    if title is not None and not isinstance(title, str):
        logger.debug("Dropping docs[%d]: title is %s", index, type(title).__name__)
        return None

    authors = raw.get("author_name")
    if authors is not None:
        if not isinstance(authors, list) or not all(isinstance(a, str) for a in authors):
            logger.debug("Dropping docs[%d]: author_name is not a list of strings", index)
            return None
        authors = tuple(authors)

    year = raw.get("first_publish_year")
    if year is not None:
        try:
            year = _coerce_year(year)
        except (TypeError, ValueError) as exc:
            logger.debug("Dropping docs[%d]: bad first_publish_year (%s)", index, exc)
            return None

    return Entry(title=title, authors=authors, first_publish_year=year)


def decode_envelope(raw: bytes | str | dict[str, Any]) -> SearchEnvelope:
    """Decode a ``search.json`` response body into a :class:`SearchEnvelope`.

    Fields outside ``docs[].title``, ``docs[].author_name``,
    ``docs[].first_publish_year`` and ``numFound`` are ignored. A missing
    ``docs`` field decodes to no entries. Only envelope-level problems raise.

    Raises:
        OLPayloadError: If the body is not JSON or has an unexpected shape.
    """
    if isinstance(raw, dict):
        data: Any = raw
    else:
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise OLPayloadError(f"Response body is not valid JSON: {exc}", raw_body=text) from exc

    if not isinstance(data, dict):
        raise OLPayloadError(
            f"Expected a JSON object, got {type(data).__name__}",
            raw_body=str(data),
        )

    raw_docs = data.get("docs")
    if raw_docs is None:
        raw_docs = []
    if not isinstance(raw_docs, list):
        raise OLPayloadError(
            f"Expected 'docs' to be a list, got {type(raw_docs).__name__}",
            raw_body=str(data),
        )

    num_found = data.get("numFound", 0)
    if not isinstance(num_found, int) or isinstance(num_found, bool):
        num_found = 0

    entries = tuple(_decode_entry(d, i) for i, d in enumerate(raw_docs))
    return SearchEnvelope(entries=entries, num_found=num_found)
