"""
Revenue Pulse — API Server
============================

Serves sales-pipeline analytics to the dashboard UI from CRM collections
loaded once at startup.

Route groups:
  /api/health              - Health check + loaded collection sizes
  /api/summary             - Quarter-to-date revenue vs target
  /api/drivers             - Revenue drivers with 6-month trends
  /api/risk-factors        - Stale deals, underperforming reps, quiet accounts
  /api/recommendations     - Prioritised actions
  /api/trend               - 6-month revenue vs target
  /api/dashboard           - Every section above in one response
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scripts.lib.config import DATA_DIR

load_dotenv()

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ─── Lifespan ─────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app):
    """Load the data context once and build the analytics service."""
    from scripts.analytics_service import AnalyticsService
    from scripts.lib.config import AnalyticsConfig
    from scripts.lib.data_store import load_data_context
    from scripts.lib.errors import PulseError

    logger.info("Starting Revenue Pulse...")

    # Tests and embedding callers may pre-populate app.state.analytics
    if getattr(app.state, "analytics", None) is None:
        try:
            context = load_data_context(DATA_DIR)
            app.state.analytics = AnalyticsService(context, AnalyticsConfig.from_env())
            logger.info("Analytics ready (%s)", context.counts())
        except PulseError as e:
            logger.error("Data context not loaded, analytics will return errors: %s", e)
            app.state.analytics = None

    logger.info("Revenue Pulse ready")
    yield
    logger.info("Shutting down Revenue Pulse...")


# ─── App Setup ────────────────────────────────────────────────

cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")

app = FastAPI(
    title="Revenue Pulse",
    version=VERSION,
    description="Sales pipeline analytics: revenue, drivers, risks and recommendations",
    lifespan=lifespan,
)

app.state.analytics = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ─── Include Routers ──────────────────────────────────────────

from dashboard.api.routers.analytics import router as analytics_router

app.include_router(analytics_router)


# ─── Health ───────────────────────────────────────────────────

@app.get("/api/health", tags=["system"])
async def health():
    """Health check with data status."""
    service = app.state.analytics
    data = None
    if service is not None:
        data = {
            "source": service.context.source,
            "loaded_at": service.context.loaded_at.isoformat(),
            "collections": service.context.counts(),
            "reference_month": service.reference_date.strftime("%Y-%m"),
        }

    return {
        "status": "healthy" if service is not None else "degraded",
        "service": "Revenue Pulse",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }
