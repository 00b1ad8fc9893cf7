"""
Revenue Pulse — Analytics Router
==================================
Dashboard analytics endpoints over the in-memory data context.

Endpoints:
  GET /api/summary          - {currentQuarterRevenue, target, gap, gapPercentage, qoqChange}
  GET /api/drivers          - {pipelineSize, winRate, averageDealSize, salesCycleTime}
  GET /api/risk-factors     - {staleDeals, underperformingReps, lowActivityAccounts}
  GET /api/recommendations  - {recommendations: [...]} (max 5)
  GET /api/trend            - {months: [...]} (6 entries, oldest first)
  GET /api/dashboard        - All sections, computed concurrently

Any failed computation is answered with 500 {"error": "Internal server error"}.
"""
from __future__ import annotations

import asyncio
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from models.analytics_models import (
    DashboardResponse,
    ErrorResponse,
    RecommendationsResponse,
    RevenueDriversResponse,
    RiskFactorsResponse,
    SummaryResponse,
    TrendResponse,
)
from scripts.analytics_service import AnalyticsService
from scripts.lib.logger import setup_logger
from scripts.lib.result import Result

logger = setup_logger("analytics_router")

router = APIRouter(prefix="/api", tags=["analytics"])

ERROR_BODY = ErrorResponse().model_dump()
ERROR_RESPONSES = {500: {"model": ErrorResponse}}


def get_analytics(request: Request) -> Optional[AnalyticsService]:
    return getattr(request.app.state, "analytics", None)


def _render(endpoint: str, result: Result) -> JSONResponse:
    if not result.ok:
        logger.error("%s failed: %s", endpoint, result.error)
        return JSONResponse(status_code=500, content=ERROR_BODY)
    return JSONResponse(content=result.value.to_json_dict())


async def _run(endpoint: str, service: Optional[AnalyticsService], section: Callable) -> JSONResponse:
    if service is None:
        logger.error("%s requested but no data context is loaded", endpoint)
        return JSONResponse(status_code=500, content=ERROR_BODY)
    result = await asyncio.to_thread(section, service)
    return _render(endpoint, result)


@router.get("/summary", response_model=SummaryResponse, responses=ERROR_RESPONSES)
async def summary(service: Optional[AnalyticsService] = Depends(get_analytics)):
    """Quarter-to-date revenue, target, gap and QoQ change."""
    return await _run("summary", service, AnalyticsService.summary)


@router.get("/drivers", response_model=RevenueDriversResponse, responses=ERROR_RESPONSES)
async def drivers(service: Optional[AnalyticsService] = Depends(get_analytics)):
    """Revenue drivers with month-over-month change and 6-month trend."""
    return await _run("drivers", service, AnalyticsService.drivers)


@router.get("/risk-factors", response_model=RiskFactorsResponse, responses=ERROR_RESPONSES)
async def risk_factors(service: Optional[AnalyticsService] = Depends(get_analytics)):
    """Stale deals, underperforming reps and low-activity accounts."""
    return await _run("risk-factors", service, AnalyticsService.risk_factors)


@router.get("/recommendations", response_model=RecommendationsResponse, responses=ERROR_RESPONSES)
async def recommendations(service: Optional[AnalyticsService] = Depends(get_analytics)):
    """Prioritised recommendations derived from the risk factors."""
    return await _run("recommendations", service, AnalyticsService.recommendations)


@router.get("/trend", response_model=TrendResponse, responses=ERROR_RESPONSES)
async def trend(service: Optional[AnalyticsService] = Depends(get_analytics)):
    """Revenue vs target for the last 6 months, oldest first."""
    return await _run("trend", service, AnalyticsService.trend)


@router.get("/dashboard", response_model=DashboardResponse, responses=ERROR_RESPONSES)
async def dashboard(service: Optional[AnalyticsService] = Depends(get_analytics)):
    """Every dashboard section, computed concurrently and joined."""
    if service is None:
        logger.error("dashboard requested but no data context is loaded")
        return JSONResponse(status_code=500, content=ERROR_BODY)
    return _render("dashboard", await service.dashboard())
