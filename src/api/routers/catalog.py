"""
GET /api/metrics -- the metric catalog the interpreter and formatter work from.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.deps import get_current_user
from src.insights.catalog import load_metric_catalog
from src.insights.interpreter import DEFAULT_METRICS

router = APIRouter()


class MetricItem(BaseModel):
    key: str
    label: str
    format: str


class CatalogResponse(BaseModel):
    date_column: str
    metrics: list[MetricItem]
    default_metrics: list[str]


@router.get("/metrics", response_model=CatalogResponse)
def metrics_endpoint(user: str = Depends(get_current_user)) -> CatalogResponse:
    """Return every metric column with its display label and format."""
    catalog = load_metric_catalog()
    return CatalogResponse(
        date_column=catalog.date_column,
        metrics=[MetricItem(**m) for m in catalog.to_list()],
        default_metrics=list(DEFAULT_METRICS),
    )
