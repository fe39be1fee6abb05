"""
Query -- the structured interpretation of a free-text dashboard question.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

GROWTH = "growth"

Intent = Literal["summary", "comparison", "growth", "list"]


class Query(BaseModel):
    """Dates, metrics and intent extracted from a question."""

    dates: set[str] = Field(default_factory=set, description="Date labels of the selected rows")
    metrics: list[str] = Field(
        default_factory=list,
        description="Metric keys in keyword-table order, or ['growth'] for period-over-period",
    )
    intent: Intent = Field("summary", description="summary | comparison | growth | list")
    original_text: str = Field("", description="The question as typed")

    @property
    def is_growth(self) -> bool:
        return GROWTH in self.metrics
