"""
Revenue Analytics
==================
Pure aggregation functions behind the revenue dashboard: quarter-to-date
summary, revenue drivers, risk factors and the 6-month revenue trend.

Every function takes read-only record sequences (see models.crm_models)
and returns response models (see models.analytics_models). Nothing here
touches files, globals or the wall clock, except the empty-targets
fallback in ``resolve_reference_date``.

Reference date
    The analytical "now" is the first day of the latest month present in
    the targets collection, so results are reproducible for a fixed
    dataset. Pass ``reference_date`` to pin it explicitly.

Driver cohorts
    All four revenue drivers group deals by the month they were *created*.
    Win rate, average deal size and cycle time for a month therefore
    describe the deals opened that month, whenever they closed.

Exports:
    resolve_reference_date, quarter_bounds, month_key, build_summary,
    get_revenue_drivers, get_stale_deals, get_underperforming_reps,
    get_low_activity_accounts, get_revenue_trend_last_6_months
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Set, Tuple

from models.analytics_models import (
    LowActivityAccount,
    MetricWithTrend,
    MonthlyRevenueTrend,
    RevenueDriversResponse,
    StaleDeal,
    SummaryResponse,
    UnderperformingRep,
)
from models.crm_models import Account, Activity, Deal, Rep, Target
from scripts.lib.config import AnalyticsConfig
from scripts.lib.logger import setup_logger
from scripts.lib.utils import build_map, days_between, group_by, round_half_up, safe_div

logger = setup_logger("revenue_analytics")

DEFAULT_CONFIG = AnalyticsConfig()

TREND_MONTHS = 6

MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

UNKNOWN = "Unknown"


# ---------------------------------------------------------------------------
# Reference date & time windows
# ---------------------------------------------------------------------------

def resolve_reference_date(targets: Sequence[Target], now: Optional[datetime] = None) -> datetime:
    """
    Return the first instant of the latest target month.

    Falls back to ``now`` (default: current UTC time) when there are no
    targets.
    """
    if not targets:
        logger.warning("No targets loaded; anchoring analytics to the current date.")
        if now is not None:
            return now
        return datetime.now(timezone.utc).replace(tzinfo=None)
    return max(t.month_start for t in targets)


def month_key(dt: datetime) -> str:
    """Canonical 'YYYY-MM' grouping key."""
    return dt.strftime("%Y-%m")


def month_label(dt: datetime) -> str:
    """Short display label, e.g. 'Oct'."""
    return MONTH_LABELS[dt.month - 1]


def shift_months(dt: datetime, months: int) -> datetime:
    """First day of the month ``months`` away from ``dt``'s month."""
    index = dt.year * 12 + (dt.month - 1) + months
    return datetime(index // 12, index % 12 + 1, 1)


def quarter_of(dt: datetime) -> int:
    return (dt.month - 1) // 3 + 1


def quarter_bounds(dt: datetime) -> Tuple[datetime, datetime]:
    """Inclusive [start, end] of the calendar quarter containing ``dt``."""
    start = datetime(dt.year, 3 * (quarter_of(dt) - 1) + 1, 1)
    end = shift_months(start, 3) - timedelta(microseconds=1)
    return start, end


def previous_quarter_bounds(dt: datetime) -> Tuple[datetime, datetime]:
    start, _ = quarter_bounds(dt)
    return quarter_bounds(shift_months(start, -3))


def last_n_month_starts(reference_date: datetime, n: int) -> List[datetime]:
    """Month starts for the ``n`` months ending at the reference month, oldest first."""
    return [shift_months(reference_date, -offset) for offset in range(n - 1, -1, -1)]


def _closed_month(deal: Deal) -> Optional[str]:
    return month_key(deal.closed_at) if deal.closed_at else None


def _created_month(deal: Deal) -> Optional[str]:
    return month_key(deal.created_at) if deal.created_at else None


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

def sum_amounts(deals: Sequence[Deal]) -> float:
    return sum(d.amount or 0 for d in deals)


def realized_revenue(deals: Sequence[Deal], start: datetime, end: datetime) -> float:
    """Sum of won, priced deals closed within [start, end]."""
    return sum_amounts([d for d in deals if d.is_realized and start <= d.closed_at <= end])


def current_quarter_revenue(
    deals: Sequence[Deal],
    targets: Sequence[Target],
    reference_date: Optional[datetime] = None,
) -> float:
    ref = reference_date or resolve_reference_date(targets)
    return realized_revenue(deals, *quarter_bounds(ref))


def quarter_target(targets: Sequence[Target], reference_date: Optional[datetime] = None) -> float:
    """Sum of every target in the reference quarter. Duplicate months all count."""
    ref = reference_date or resolve_reference_date(targets)
    quarter, year = quarter_of(ref), ref.year
    return sum(
        t.target for t in targets
        if t.month_start.year == year and quarter_of(t.month_start) == quarter
    )


def qoq_change(
    deals: Sequence[Deal],
    targets: Sequence[Target],
    reference_date: Optional[datetime] = None,
) -> float:
    """Quarter-over-quarter revenue change in percent; 0 when last quarter had none."""
    ref = reference_date or resolve_reference_date(targets)
    current = realized_revenue(deals, *quarter_bounds(ref))
    previous = realized_revenue(deals, *previous_quarter_bounds(ref))
    return safe_div(current - previous, previous) * 100


def build_summary(
    deals: Sequence[Deal],
    targets: Sequence[Target],
    reference_date: Optional[datetime] = None,
) -> SummaryResponse:
    """Quarter-to-date revenue, target, gap and QoQ change, rounded for display."""
    ref = reference_date or resolve_reference_date(targets)
    revenue = current_quarter_revenue(deals, targets, ref)
    target = quarter_target(targets, ref)
    qoq = qoq_change(deals, targets, ref)

    gap = revenue - target
    gap_percentage = safe_div(gap, target) * 100

    return SummaryResponse(
        current_quarter_revenue=round_half_up(revenue),
        target=round_half_up(target),
        gap=round_half_up(gap),
        gap_percentage=round_half_up(gap_percentage, 1),
        qoq_change=round_half_up(qoq, 1),
    )


# ---------------------------------------------------------------------------
# Drivers
# ---------------------------------------------------------------------------

def calculate_win_rate(deals: Sequence[Deal]) -> float:
    """Won / (won + lost) in percent; 0 when nothing has closed."""
    closed = [d for d in deals if d.is_closed]
    won = [d for d in closed if d.is_won]
    return safe_div(len(won), len(closed)) * 100


def average_deal_size(deals: Sequence[Deal]) -> float:
    won = [d.amount for d in deals if d.is_won and d.amount is not None]
    return safe_div(sum(won), len(won))


def average_sales_cycle(deals: Sequence[Deal]) -> float:
    """Mean days from creation to close over won deals with both timestamps."""
    cycles = [
        days_between(d.created_at, d.closed_at)
        for d in deals
        if d.is_won and d.created_at and d.closed_at
    ]
    return safe_div(sum(cycles), len(cycles))


def open_pipeline(deals: Sequence[Deal]) -> float:
    return sum_amounts([d for d in deals if d.is_open and d.amount is not None])


def calculate_metric_with_trend(current: float, previous: float, trend: List[float]) -> MetricWithTrend:
    change = current - previous
    return MetricWithTrend(
        value=current,
        change=change,
        change_percentage=safe_div(change, previous) * 100,
        trend=trend,
    )


def _metric_from_trend(trend: List[float]) -> MetricWithTrend:
    previous = trend[-2] if len(trend) > 1 else 0.0
    return calculate_metric_with_trend(trend[-1], previous, trend)


def get_revenue_drivers(
    deals: Sequence[Deal],
    targets: Sequence[Target],
    reference_date: Optional[datetime] = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> RevenueDriversResponse:
    """
    Pipeline size, win rate, average deal size and sales cycle time for each
    month of the trailing window, compared month over month.

    Deals are bucketed by creation month for all four metrics.
    """
    ref = reference_date or resolve_reference_date(targets)
    cohorts = group_by(deals, _created_month)

    pipeline: List[float] = []
    win_rate: List[float] = []
    deal_size: List[float] = []
    cycle: List[float] = []

    for start in last_n_month_starts(ref, config.trend_months):
        cohort = cohorts.get(month_key(start), [])
        pipeline.append(open_pipeline(cohort))
        win_rate.append(calculate_win_rate(cohort))
        deal_size.append(average_deal_size(cohort))
        cycle.append(average_sales_cycle(cohort))

    return RevenueDriversResponse(
        pipeline_size=_metric_from_trend(pipeline),
        win_rate=_metric_from_trend(win_rate),
        average_deal_size=_metric_from_trend(deal_size),
        sales_cycle_time=_metric_from_trend(cycle),
    )


# ---------------------------------------------------------------------------
# Risk factors
# ---------------------------------------------------------------------------

def get_stale_deals(
    deals: Sequence[Deal],
    accounts: Sequence[Account],
    reps: Sequence[Rep],
    targets: Sequence[Target],
    reference_date: Optional[datetime] = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> List[StaleDeal]:
    """
    Open, priced deals older than ``config.stale_days`` that are either
    Enterprise or above the high-value threshold. Largest first.
    """
    ref = reference_date or resolve_reference_date(targets)
    account_map = build_map(accounts, lambda a: a.account_id)
    rep_map = build_map(reps, lambda r: r.rep_id)

    rows: List[StaleDeal] = []
    for deal in deals:
        if deal.is_closed or deal.amount is None or deal.created_at is None:
            continue
        age = days_between(deal.created_at, ref)
        if age <= config.stale_days:
            continue

        account = account_map.get(deal.account_id)
        rep = rep_map.get(deal.rep_id)
        segment = (account.segment if account else None) or UNKNOWN
        if segment != config.enterprise_segment and deal.amount <= config.high_value_threshold:
            continue

        rows.append(StaleDeal(
            deal_id=deal.deal_id,
            account_name=account.name if account else UNKNOWN,
            segment=segment,
            rep_name=rep.name if rep else UNKNOWN,
            value=deal.amount,
            days_stale=age,
        ))

    rows.sort(key=lambda r: r.value, reverse=True)
    return rows[:config.max_stale_deals]


def get_underperforming_reps(
    deals: Sequence[Deal],
    reps: Sequence[Rep],
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> List[UnderperformingRep]:
    """
    Reps with at least ``config.min_rep_closed_deals`` closed deals whose win
    rate sits below the average of those eligible reps. Worst first.
    """
    deals_by_rep = group_by(deals, lambda d: d.rep_id)

    eligible: List[UnderperformingRep] = []
    for rep in reps:
        rep_deals = deals_by_rep.get(rep.rep_id, [])
        closed = sum(1 for d in rep_deals if d.is_closed)
        if closed < config.min_rep_closed_deals:
            continue
        eligible.append(UnderperformingRep(
            rep_id=rep.rep_id,
            rep_name=rep.name,
            win_rate=calculate_win_rate(rep_deals),
            deals_worked=closed,
        ))

    if not eligible:
        return []

    average = sum(r.win_rate for r in eligible) / len(eligible)
    below = sorted((r for r in eligible if r.win_rate < average), key=lambda r: r.win_rate)
    return below[:config.max_underperforming_reps]


def recently_active_deal_ids(
    activities: Sequence[Activity],
    reference_date: datetime,
    window_days: int,
) -> Set[str]:
    """Deals with at least one activity less than ``window_days`` before the reference date."""
    return {
        a.deal_id for a in activities
        if a.timestamp is not None and days_between(a.timestamp, reference_date) < window_days
    }


def get_low_activity_accounts(
    deals: Sequence[Deal],
    activities: Sequence[Activity],
    accounts: Sequence[Account],
    reps: Sequence[Rep] = (),
    targets: Sequence[Target] = (),
    reference_date: Optional[datetime] = None,
    config: AnalyticsConfig = DEFAULT_CONFIG,
) -> List[LowActivityAccount]:
    """
    Accounts holding open deals with no recent activity, ranked by the
    value those deals carry.
    """
    ref = reference_date or resolve_reference_date(targets)
    active = recently_active_deal_ids(activities, ref, config.low_activity_days)
    account_map = build_map(accounts, lambda a: a.account_id)
    rep_map = build_map(reps, lambda r: r.rep_id)

    quiet = [d for d in deals if d.is_open and d.deal_id not in active]
    rows: List[LowActivityAccount] = []
    for account_id, account_deals in group_by(quiet, lambda d: d.account_id).items():
        account = account_map.get(account_id)
        rep = rep_map.get(account_deals[0].rep_id)
        rows.append(LowActivityAccount(
            account_id=account_id,
            account_name=account.name if account else UNKNOWN,
            segment=(account.segment if account else None) or UNKNOWN,
            rep_name=rep.name if rep else UNKNOWN,
            open_deals=len(account_deals),
            total_value=sum_amounts(account_deals),
        ))

    rows.sort(key=lambda r: r.total_value, reverse=True)
    return rows[:config.max_low_activity_accounts]


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------

def monthly_targets(targets: Sequence[Target]) -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for t in targets:
        totals[t.month] = totals.get(t.month, 0) + t.target
    return totals


def get_revenue_trend_last_6_months(
    deals: Sequence[Deal],
    targets: Sequence[Target],
    reference_date: Optional[datetime] = None,
) -> List[MonthlyRevenueTrend]:
    """Realized revenue against target for the last six months, oldest first."""
    ref = reference_date or resolve_reference_date(targets)
    closed_by_month = group_by([d for d in deals if d.is_realized], _closed_month)
    target_by_month = monthly_targets(targets)

    months: List[MonthlyRevenueTrend] = []
    for start in last_n_month_starts(ref, TREND_MONTHS):
        key = month_key(start)
        revenue = sum_amounts(closed_by_month.get(key, []))
        target = target_by_month.get(key, 0)
        months.append(MonthlyRevenueTrend(
            month=month_label(start),
            revenue=revenue,
            target=target,
            achieved=safe_div(revenue, target) * 100,
        ))
    return months
