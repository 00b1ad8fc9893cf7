"""
Revenue Pulse — CRM Record Models
===================================

Immutable pydantic models for the five source collections: deals, targets,
reps, activities and accounts. Records are validated once at load time and
never mutated afterwards.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from scripts.lib.utils import parse_ts

_MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class DealStage:
    """Terminal stage labels. Anything else is an open stage."""
    CLOSED_WON = "Closed Won"
    CLOSED_LOST = "Closed Lost"
    CLOSED_STAGES = frozenset({CLOSED_WON, CLOSED_LOST})


class CRMRecord(BaseModel):
    """Base for loaded records: frozen, unknown keys ignored."""
    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)


# ─── Entities ───────────────────────────────────────────────

class Deal(CRMRecord):
    """A sales opportunity."""
    deal_id: str
    account_id: str
    rep_id: str
    stage: str
    amount: Optional[float] = None
    created_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    @field_validator("created_at", "closed_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        return parse_ts(value)

    @property
    def is_closed(self) -> bool:
        return self.stage in DealStage.CLOSED_STAGES

    @property
    def is_open(self) -> bool:
        return not self.is_closed

    @property
    def is_won(self) -> bool:
        return self.stage == DealStage.CLOSED_WON

    @property
    def is_lost(self) -> bool:
        return self.stage == DealStage.CLOSED_LOST

    @property
    def is_realized(self) -> bool:
        """Counts toward realized revenue: won, priced and dated."""
        return self.is_won and self.amount is not None and self.closed_at is not None


class Target(CRMRecord):
    """Revenue target for one calendar month."""
    month: str
    target: float

    @field_validator("month", mode="before")
    @classmethod
    def _check_month(cls, value):
        text = str(value).strip()[:7]
        if not _MONTH_RE.match(text):
            raise ValueError(f"month must be YYYY-MM, got {value!r}")
        return text

    @property
    def month_start(self) -> datetime:
        return parse_ts(self.month)


class Rep(CRMRecord):
    rep_id: str
    name: str


class Account(CRMRecord):
    account_id: str
    name: str
    industry: Optional[str] = None
    segment: Optional[str] = None


class Activity(CRMRecord):
    """An engagement event (call, email, meeting) logged against a deal."""
    activity_id: str
    deal_id: str
    type: str
    timestamp: Optional[datetime] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        return parse_ts(value)
