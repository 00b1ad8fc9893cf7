"""
Revenue Pulse — Analytics Response Models
===========================================

Response shapes served to the dashboard. Fields are snake_case in Python
and serialised with camelCase aliases (``current_quarter_revenue`` ->
``currentQuarterRevenue``).
"""
from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AnalyticsModel(BaseModel):
    """Base response model with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ─── Summary ────────────────────────────────────────────────

class SummaryResponse(AnalyticsModel):
    """Quarter-to-date revenue against target."""
    current_quarter_revenue: int
    target: int
    gap: int
    gap_percentage: float
    qoq_change: float


# ─── Drivers ────────────────────────────────────────────────

class MetricWithTrend(AnalyticsModel):
    """Current value compared to the previous month, plus the monthly trend (6 points by default)."""
    value: float
    change: float
    change_percentage: float
    trend: List[float] = Field(default_factory=list)


class RevenueDriversResponse(AnalyticsModel):
    pipeline_size: MetricWithTrend
    win_rate: MetricWithTrend
    average_deal_size: MetricWithTrend
    sales_cycle_time: MetricWithTrend


# ─── Risk Factors ───────────────────────────────────────────

class StaleDeal(AnalyticsModel):
    deal_id: str
    account_name: str
    segment: str
    rep_name: str
    value: float
    days_stale: int


class UnderperformingRep(AnalyticsModel):
    rep_id: str
    rep_name: str
    win_rate: float
    deals_worked: int


class LowActivityAccount(AnalyticsModel):
    account_id: str
    account_name: str
    segment: str
    rep_name: str
    open_deals: int
    total_value: float


class RiskFactorsResponse(AnalyticsModel):
    stale_deals: List[StaleDeal] = Field(default_factory=list)
    underperforming_reps: List[UnderperformingRep] = Field(default_factory=list)
    low_activity_accounts: List[LowActivityAccount] = Field(default_factory=list)


# ─── Recommendations ────────────────────────────────────────

class Recommendation(AnalyticsModel):
    id: str
    priority: Literal["high", "medium", "low"]
    category: Literal["deals", "reps", "accounts", "strategy"]
    title: str
    description: str
    impact: str
    action: str


class RecommendationsResponse(AnalyticsModel):
    recommendations: List[Recommendation] = Field(default_factory=list)


# ─── Trend ──────────────────────────────────────────────────

class MonthlyRevenueTrend(AnalyticsModel):
    """Realized revenue vs target for one month."""
    month: str
    revenue: float
    target: float
    achieved: float


class TrendResponse(AnalyticsModel):
    months: List[MonthlyRevenueTrend] = Field(default_factory=list)


# ─── Aggregate / Errors ─────────────────────────────────────

class DashboardResponse(AnalyticsModel):
    """Every dashboard section computed against the same data snapshot."""
    reference_month: str
    summary: SummaryResponse
    drivers: RevenueDriversResponse
    risk_factors: RiskFactorsResponse
    recommendations: List[Recommendation]
    trend: List[MonthlyRevenueTrend]


class ErrorResponse(BaseModel):
    error: str = "Internal server error"
