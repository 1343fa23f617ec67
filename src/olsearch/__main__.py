"""CLI entry point: python -m olsearch 'your query'

Without query words the query is read from standard input.
"""

from __future__ import annotations

import argparse
import logging
import sys

from olsearch.config import OLConfig
from olsearch.logging import bind_search_id, configure_logging
from olsearch.models import OLError
from olsearch.orchestrator import SearchOrchestrator

logger = logging.getLogger("olsearch.cli")

PROMPT = "Введите поисковый запрос (пример: Толкин): "
NO_STDIN_MESSAGE = "Стандартный ввод недоступен, передайте запрос аргументом командной строки."
EMPTY_QUERY_MESSAGE = "Пустой запрос, завершение."


def _read_query() -> str | None:
    try:
        return input(PROMPT).strip()
    except EOFError:
        print()
        print(NO_STDIN_MESSAGE)
        return None


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="olsearch",
        description="Search books in the OpenLibrary catalog",
    )
    parser.add_argument("query", nargs="*", help="Search query (prompted for when omitted)")
    parser.add_argument("--limit", type=int, default=None, help="Max results to print")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--base-url", type=str, default=None, help="OpenLibrary base URL")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable DEBUG-level logging to stderr"
    )
    parser.add_argument(
        "--json-log", action="store_true", help="Emit JSON log lines (default: text)"
    )

    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING
    configure_logging(level=level, json_format=args.json_log)
    bind_search_id()

    if args.query:
        query = " ".join(args.query)
    else:
        query = _read_query()
        if query is None:
            return
        if not query:
            print(EMPTY_QUERY_MESSAGE)
            return

    try:
        config = OLConfig.from_env(base_url=args.base_url, timeout=args.timeout)
        limit = args.limit if args.limit is not None else config.cli_limit
        with SearchOrchestrator(config=config) as orchestrator:
            lines = orchestrator.search_blocking(query, limit)
    except (OLError, ValueError) as exc:
        logger.error("Search failed for query=%r: %s", query, exc)
        print(f"Ошибка: {exc}", file=sys.stderr)
        sys.exit(1)

    if not lines:
        print(f"Результатов нет для запроса: {query}")
        return

    print(f"Показаны первые {limit} результатов по запросу: {query}")
    for line in lines:
        print(line)


if __name__ == "__main__":
    main()
