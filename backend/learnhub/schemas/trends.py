"""Schemas for dashboard trend deltas."""

from typing import Annotated

from pydantic import BaseModel, Field

# NaN and Infinity are accepted by the JSON parser; reject them here
MetricValue = Annotated[float, Field(allow_inf_nan=False)]


class TrendDeltaResponse(BaseModel):
    percent_change: int
    label: str


class TrendDiffRequest(BaseModel):
    """Stateless comparison of two metric snapshots."""

    current: dict[str, MetricValue]
    previous: dict[str, MetricValue] | None = None


class DashboardTrendsRequest(BaseModel):
    """Metrics currently shown on the dashboard."""

    metrics: dict[str, MetricValue] = Field(..., description="Flat {metric_name: number} mapping")


class TrendsResponse(BaseModel):
    """Trend per metric; null when there is no meaningful change or baseline."""

    trends: dict[str, TrendDeltaResponse | None]
