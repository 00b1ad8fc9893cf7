"""Record builders for analytics tests."""
from itertools import count

from models.crm_models import Account, Activity, Deal, Rep, Target

_ids = count(1)


def make_deal(stage="Closed Won", amount=10_000, created_at="2025-01-01", closed_at=None,
              account_id="A1", rep_id="R1", deal_id=None):
    if closed_at is None and stage in ("Closed Won", "Closed Lost"):
        closed_at = "2025-06-15"
    return Deal(
        deal_id=deal_id or f"D{next(_ids)}",
        account_id=account_id,
        rep_id=rep_id,
        stage=stage,
        amount=amount,
        created_at=created_at,
        closed_at=closed_at,
    )


def make_open_deal(amount=10_000, created_at="2025-01-01", stage="Proposal", **kwargs):
    return make_deal(stage=stage, amount=amount, created_at=created_at, **kwargs)


def make_target(month, target):
    return Target(month=month, target=target)


def make_account(account_id, name=None, segment="Enterprise", industry="Software"):
    return Account(
        account_id=account_id,
        name=name or f"Account {account_id}",
        industry=industry,
        segment=segment,
    )


def make_rep(rep_id, name=None):
    return Rep(rep_id=rep_id, name=name or f"Rep {rep_id}")


def make_activity(deal_id, timestamp, type="call"):
    return Activity(
        activity_id=f"X{next(_ids)}",
        deal_id=deal_id,
        type=type,
        timestamp=timestamp,
    )
