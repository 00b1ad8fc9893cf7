"""Shared fixtures: an in-memory data context anchored at June 2025."""
import json

import pytest

from scripts.lib.data_store import DataContext
from tests.factories import (
    make_account,
    make_activity,
    make_deal,
    make_open_deal,
    make_rep,
    make_target,
)


@pytest.fixture
def june_targets():
    return [
        make_target("2025-04", 80_000),
        make_target("2025-05", 85_000),
        make_target("2025-06", 90_000),
    ]


@pytest.fixture
def context(june_targets):
    """Small pipeline: one big Q2 win, a stale enterprise deal, a quiet account."""
    deals = [
        make_deal(deal_id="D1", amount=100_000, created_at="2025-05-01",
                  closed_at="2025-06-15", account_id="A1", rep_id="R1"),
        make_deal(deal_id="D2", stage="Closed Lost", amount=40_000, created_at="2025-02-01",
                  closed_at="2025-03-20", account_id="A2", rep_id="R2"),
        make_open_deal(deal_id="D3", amount=250_000, created_at="2025-02-10",
                       account_id="A1", rep_id="R2"),
        make_open_deal(deal_id="D4", amount=30_000, created_at="2025-05-25",
                       account_id="A2", rep_id="R1"),
    ]
    return DataContext.from_records(
        deals=deals,
        targets=june_targets,
        reps=[make_rep("R1", "Avery"), make_rep("R2", "Jordan")],
        activities=[make_activity("D4", "2025-05-28")],
        accounts=[
            make_account("A1", "Northwind", segment="Enterprise"),
            make_account("A2", "Tailspin", segment="SMB"),
        ],
    )


@pytest.fixture
def data_dir(tmp_path):
    """A flat-file data directory with the same shape the server loads."""
    files = {
        "targets": [{"month": "2025-06", "target": 90000}],
        "deals": [{
            "deal_id": "D1", "account_id": "A1", "rep_id": "R1", "stage": "Closed Won",
            "amount": 100000, "created_at": "2025-05-01T09:00:00Z",
            "closed_at": "2025-06-15T12:00:00Z",
        }],
        "reps": {"results": [{"rep_id": "R1", "name": "Avery"}]},
        "accounts": [{"account_id": "A1", "name": "Northwind", "industry": "Retail",
                      "segment": "Enterprise"}],
        "activities": [],
    }
    for name, rows in files.items():
        (tmp_path / f"{name}.json").write_text(json.dumps(rows), encoding="utf-8")
    return tmp_path
