"""
Insights service -- orchestrates dataset -> interpret -> filter -> respond.

``process_query`` never raises for data or interpretation problems: a
sheet that cannot be fetched, an empty sheet and an unresolvable date all
come back as an ``error`` result carrying a human-readable message.
"""
from __future__ import annotations

from datetime import date

from src.core.errors import DataFetchError, InterpretationError
from src.core.logging import get_logger
from src.core.utils import timer
from src.insights.interpreter import interpret
from src.insights.responses import QueryResult, build_response, sort_newest_first
from src.sheets.cache import DatasetCache, get_dataset_cache

logger = get_logger(__name__)

NO_DATA_MESSAGE = "No data available from sheet"
DATE_HINT_MESSAGE = (
    'Could not understand the dates in your query. Try "orders on 2/10/26" or "yesterday"'
)


async def _answer(text: str, cache: DatasetCache, today: date | None) -> QueryResult:
    dataset = await cache.get_dataset()
    if not dataset:
        return QueryResult.error(NO_DATA_MESSAGE)

    query = interpret(text, dataset, today=today)
    if not query.dates:
        raise InterpretationError(DATE_HINT_MESSAGE)

    rows = sort_newest_first(row for row in dataset if row.date in query.dates)
    return build_response(rows, query)


async def process_query(
    text: str,
    cache: DatasetCache | None = None,
    today: date | None = None,
) -> QueryResult:
    """End-to-end: question -> formatted result.

    Parameters
    ----------
    text : str
        Free-text question, e.g. "orders yesterday" or "compare GMV last week".
    cache : DatasetCache | None
        Dataset cache to read rows from (the global cache when omitted).
    today : date | None
        Reference date for relative phrases (local clock when omitted).
    """
    cache = cache or get_dataset_cache()

    with timer() as t:
        try:
            result = await _answer(text, cache, today)
        except DataFetchError as exc:
            result = QueryResult.error(f"Error processing query: {exc.message}")
        except InterpretationError as exc:
            result = QueryResult.error(exc.message)

    logger.info("Query answered | type=%s | items=%d | %d ms",
                result.type, len(result.data), t["elapsed_ms"])
    return result
