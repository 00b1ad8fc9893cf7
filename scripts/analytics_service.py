"""
Analytics Service
==================
Binds the analytics core to a loaded DataContext and an AnalyticsConfig,
and returns every dashboard section as an explicit ``Result``.

Service methods never raise for computation problems: malformed data or
unexpected errors come back as ``Result.failure`` and are logged once
here. The HTTP layer only decides how a failure is rendered.

Usage:
    from scripts.analytics_service import AnalyticsService
    service = AnalyticsService(context)
    result = service.summary()
    if result.ok:
        print(result.value.to_json_dict())
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

from models.analytics_models import (
    DashboardResponse,
    RecommendationsResponse,
    RevenueDriversResponse,
    RiskFactorsResponse,
    SummaryResponse,
    TrendResponse,
)
from scripts import revenue_analytics as analytics
from scripts.lib.config import AnalyticsConfig
from scripts.lib.data_store import DataContext
from scripts.lib.logger import setup_logger
from scripts.lib.result import Result, capture
from scripts.recommendation_engine import synthesize_recommendations

logger = setup_logger("analytics_service")


class AnalyticsService:
    """Dashboard analytics over one immutable data snapshot."""

    def __init__(
        self,
        context: DataContext,
        config: Optional[AnalyticsConfig] = None,
        reference_date: Optional[datetime] = None,
    ):
        self.context = context
        self.config = config or AnalyticsConfig()
        self._reference_date = reference_date or analytics.resolve_reference_date(context.targets)

    @property
    def reference_date(self) -> datetime:
        """Anchor month shared by every section of this snapshot."""
        return self._reference_date

    # ─── Sections ───────────────────────────────────────────

    def summary(self) -> Result[SummaryResponse]:
        return capture("summary", self._summary)

    def drivers(self) -> Result[RevenueDriversResponse]:
        return capture("drivers", self._drivers)

    def risk_factors(self) -> Result[RiskFactorsResponse]:
        return capture("risk_factors", self._risk_factors)

    def recommendations(self) -> Result[RecommendationsResponse]:
        return capture("recommendations", self._recommendations)

    def trend(self) -> Result[TrendResponse]:
        return capture("trend", self._trend)

    async def dashboard(self) -> Result[DashboardResponse]:
        """
        Compute every section concurrently and join them.

        Sections share no mutable state, so each runs in a worker thread.
        If any section fails the whole dashboard fails; a partial payload
        is never returned.
        """
        ref = self.reference_date
        results = await asyncio.gather(
            asyncio.to_thread(self.summary),
            asyncio.to_thread(self.drivers),
            asyncio.to_thread(self.risk_factors),
            asyncio.to_thread(self.recommendations),
            asyncio.to_thread(self.trend),
        )
        failed = [r for r in results if not r.ok]
        if failed:
            logger.error("Dashboard failed: %d of %d sections errored", len(failed), len(results))
            return Result.failure(failed[0].error)

        summary, drivers, risks, recs, trend = (r.value for r in results)
        return Result.success(DashboardResponse(
            reference_month=analytics.month_key(ref),
            summary=summary,
            drivers=drivers,
            risk_factors=risks,
            recommendations=recs.recommendations,
            trend=trend.months,
        ))

    # ─── Computations ───────────────────────────────────────

    def _summary(self) -> SummaryResponse:
        ctx = self.context
        return analytics.build_summary(ctx.deals, ctx.targets, self.reference_date)

    def _drivers(self) -> RevenueDriversResponse:
        ctx = self.context
        return analytics.get_revenue_drivers(
            ctx.deals, ctx.targets, self.reference_date, self.config,
        )

    def _risk_factors(self) -> RiskFactorsResponse:
        ctx, ref, config = self.context, self.reference_date, self.config
        return RiskFactorsResponse(
            stale_deals=analytics.get_stale_deals(
                ctx.deals, ctx.accounts, ctx.reps, ctx.targets, ref, config,
            ),
            underperforming_reps=analytics.get_underperforming_reps(
                ctx.deals, ctx.reps, config,
            ),
            low_activity_accounts=analytics.get_low_activity_accounts(
                ctx.deals, ctx.activities, ctx.accounts, ctx.reps, ctx.targets, ref, config,
            ),
        )

    def _recommendations(self) -> RecommendationsResponse:
        risks = self._risk_factors()
        overall_win_rate = analytics.calculate_win_rate(self.context.deals)
        return RecommendationsResponse(recommendations=synthesize_recommendations(
            risks.stale_deals,
            risks.underperforming_reps,
            risks.low_activity_accounts,
            overall_win_rate,
            self.config,
        ))

    def _trend(self) -> TrendResponse:
        ctx = self.context
        return TrendResponse(months=analytics.get_revenue_trend_last_6_months(
            ctx.deals, ctx.targets, self.reference_date,
        ))
