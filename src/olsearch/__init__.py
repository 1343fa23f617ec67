"""olsearch: OpenLibrary book search with blocking and non-blocking call paths."""

from olsearch.client import OLClient
from olsearch.config import OLConfig
from olsearch.formatting import AUTHOR_FALLBACK, YEAR_FALLBACK, format_entry
from olsearch.logging import bind_search_id, configure_logging, get_search_id, search_scope
from olsearch.models import (
    Entry,
    OLConnectionError,
    OLError,
    OLPayloadError,
    OLProtocolError,
    OLStatusError,
    SearchEnvelope,
    decode_envelope,
)
from olsearch.orchestrator import (
    SearchHandle,
    SearchOrchestrator,
    SearchOutcome,
    rank_and_format,
    search,
)

__version__ = "0.1.0"

__all__ = [
    "AUTHOR_FALLBACK",
    "Entry",
    "OLClient",
    "OLConfig",
    "OLConnectionError",
    "OLError",
    "OLPayloadError",
    "OLProtocolError",
    "OLStatusError",
    "SearchEnvelope",
    "SearchHandle",
    "SearchOrchestrator",
    "SearchOutcome",
    "YEAR_FALLBACK",
    "__version__",
    "bind_search_id",
    "configure_logging",
    "decode_envelope",
    "format_entry",
    "get_search_id",
    "rank_and_format",
    "search",
    "search_scope",
]
