"""
Recommendation Engine
======================
Turns risk findings into a short, ordered list of actions for sales
leadership.

Rules run in the fixed order of ``DEFAULT_RULES``. Each rule looks at the
shared ``RecommendationInputs`` and returns one Recommendation or None; the
output is capped at ``config.max_recommendations``. Thresholds (recovery
rate, win-rate floor, cap) come from AnalyticsConfig.

Usage:
    from scripts.recommendation_engine import synthesize_recommendations
    recs = synthesize_recommendations(stale, reps, accounts, overall_win_rate)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from models.analytics_models import (
    LowActivityAccount,
    Recommendation,
    StaleDeal,
    UnderperformingRep,
)
from scripts.lib.config import AnalyticsConfig
from scripts.lib.logger import setup_logger

logger = setup_logger("recommendation_engine")

DEFAULT_CONFIG = AnalyticsConfig()


@dataclass(frozen=True)
class RecommendationInputs:
    """Everything the rules are allowed to look at."""
    stale_deals: Sequence[StaleDeal]
    underperforming_reps: Sequence[UnderperformingRep]
    low_activity_accounts: Sequence[LowActivityAccount]
    overall_win_rate: float
    config: AnalyticsConfig


RecommendationRule = Callable[[RecommendationInputs], Optional[Recommendation]]


def format_millions(amount: float) -> str:
    """$1,250,000 -> '$1.3M'."""
    return f"${amount / 1_000_000:.1f}M"


# ─── Rules ──────────────────────────────────────────────────

def aging_deals_rule(inputs: RecommendationInputs) -> Optional[Recommendation]:
    if not inputs.stale_deals:
        return None
    total = sum(d.value for d in inputs.stale_deals)
    rate = inputs.config.recovery_rate
    return Recommendation(
        id="rec-1",
        priority="high",
        category="deals",
        title="Focus on aging Enterprise deals",
        description=(
            f"{len(inputs.stale_deals)} high-value deals worth "
            f"{format_millions(total)} have been inactive."
        ),
        impact=f"Recovering {round(rate * 100)}% could unlock ~{format_millions(total * rate)}",
        action="Schedule executive sponsor reviews for top deals",
    )


def rep_coaching_rule(inputs: RecommendationInputs) -> Optional[Recommendation]:
    if not inputs.underperforming_reps:
        return None
    rep = inputs.underperforming_reps[0]
    return Recommendation(
        id="rec-2",
        priority="high",
        category="reps",
        title=f"Coach {rep.rep_name} on deal qualification",
        description=f"{rep.rep_name} has a {rep.win_rate:.1f}% win rate vs team average.",
        impact="Improving to team average could increase quarterly revenue",
        action="Implement structured deal review sessions",
    )


def account_reengagement_rule(inputs: RecommendationInputs) -> Optional[Recommendation]:
    if not inputs.low_activity_accounts:
        return None
    total = sum(a.total_value for a in inputs.low_activity_accounts)
    return Recommendation(
        id="rec-3",
        priority="medium",
        category="accounts",
        title="Re-engage inactive pipeline accounts",
        description=(
            f"{len(inputs.low_activity_accounts)} accounts with "
            f"{format_millions(total)} in pipeline show low activity."
        ),
        impact="Re-engagement may reduce pipeline slippage risk",
        action="Launch targeted re-engagement outreach campaign",
    )


def win_rate_floor_rule(inputs: RecommendationInputs) -> Optional[Recommendation]:
    floor = inputs.config.industry_win_rate_min
    if inputs.overall_win_rate >= floor:
        return None
    return Recommendation(
        id="rec-4",
        priority="high",
        category="strategy",
        title="Improve overall win rate",
        description=(
            f"Current win rate {inputs.overall_win_rate:.1f}% is below "
            f"industry benchmark ({floor:g}%)."
        ),
        impact="Higher qualification discipline could improve conversion",
        action="Adopt structured qualification framework (e.g., MEDDIC)",
    )


DEFAULT_RULES: tuple = (
    aging_deals_rule,
    rep_coaching_rule,
    account_reengagement_rule,
    win_rate_floor_rule,
)


# ─── Synthesis ──────────────────────────────────────────────

def synthesize_recommendations(
    stale_deals: Sequence[StaleDeal],
    underperforming_reps: Sequence[UnderperformingRep],
    low_activity_accounts: Sequence[LowActivityAccount],
    overall_win_rate: float,
    config: AnalyticsConfig = DEFAULT_CONFIG,
    rules: Sequence[RecommendationRule] = DEFAULT_RULES,
) -> List[Recommendation]:
    """
    Evaluate ``rules`` in order and collect the recommendations that fire.

    Args:
        stale_deals: Output of get_stale_deals (sorted, capped).
        underperforming_reps: Output of get_underperforming_reps, worst first.
        low_activity_accounts: Output of get_low_activity_accounts.
        overall_win_rate: Win rate across every deal, in percent.
        config: Thresholds and output cap.
        rules: Rule callables, evaluated in order.

    Returns:
        At most ``config.max_recommendations`` recommendations.
    """
    inputs = RecommendationInputs(
        stale_deals=stale_deals,
        underperforming_reps=underperforming_reps,
        low_activity_accounts=low_activity_accounts,
        overall_win_rate=overall_win_rate,
        config=config,
    )
    recommendations: List[Recommendation] = []
    for rule in rules:
        rec = rule(inputs)
        if rec is not None:
            recommendations.append(rec)

    logger.debug(
        "%d of %d recommendation rules fired (win rate %.1f%%)",
        len(recommendations), len(rules), overall_win_rate,
    )
    return recommendations[:config.max_recommendations]
