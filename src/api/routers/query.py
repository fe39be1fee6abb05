"""POST /api/query -- answer a free-text question from the cached sheet."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.api.deps import get_current_user
from src.core.errors import ValidationError
from src.core.logging import get_logger
from src.insights.responses import QueryResult
from src.insights.service import process_query
from src.sheets.cache import DatasetCache, get_dataset_cache

logger = get_logger(__name__)
router = APIRouter()


class QueryRequest(BaseModel):
    query: str | None = Field(None, description='Free-text question, e.g. "orders yesterday"')


class QueryResponse(BaseModel):
    success: bool
    results: QueryResult


@router.post("/query", response_model=QueryResponse)
async def query_endpoint(
    req: QueryRequest,
    user: str = Depends(get_current_user),
    cache: DatasetCache = Depends(get_dataset_cache),
):
    """Interpret the question and return formatted display items.

    Sheet and date problems come back as ``results.type == "error"``; only
    a missing query is rejected with 400.
    """
    if not req.query or not req.query.strip():
        raise ValidationError("Query is required")

    logger.info("Query from %s: %s", user, req.query)
    results = await process_query(req.query, cache=cache)
    return QueryResponse(success=True, results=results)
