"""
Analytics Snapshot Generator
=============================
Computes the full dashboard payload from the flat-file data context and
writes it to data/processed/revenue_analytics.json.

Usage:
    python -m scripts.generate_analytics_snapshot
    python -m scripts.generate_analytics_snapshot --data-dir ./fixtures
    python -m scripts.generate_analytics_snapshot --reference-month 2025-06 --stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from scripts.analytics_service import AnalyticsService
from scripts.lib.config import DATA_DIR, PROCESSED_DIR, AnalyticsConfig
from scripts.lib.data_store import load_data_context
from scripts.lib.errors import PulseError
from scripts.lib.logger import DATE_FORMAT, LOG_FORMAT
from scripts.lib.utils import atomic_write_json, parse_ts

load_dotenv()

logger = logging.getLogger("generate_analytics_snapshot")

DEFAULT_OUTPUT = PROCESSED_DIR / "revenue_analytics.json"


def build_snapshot(
    data_dir: Path = DATA_DIR,
    reference_month: Optional[str] = None,
    config: Optional[AnalyticsConfig] = None,
) -> dict:
    """
    Load the data context and compute every dashboard section.

    Raises:
        PulseError: loading or any analytics section failed.
    """
    context = load_data_context(data_dir)
    service = AnalyticsService(
        context,
        config or AnalyticsConfig.from_env(),
        reference_date=parse_ts(reference_month) if reference_month else None,
    )
    dashboard = asyncio.run(service.dashboard()).unwrap()
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "source": context.source,
        "record_counts": context.counts(),
        **dashboard.to_json_dict(),
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a revenue analytics snapshot")
    parser.add_argument("--data-dir", type=Path, default=DATA_DIR,
                        help="Directory holding deals/targets/reps/activities/accounts JSON")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT,
                        help="Where to write the snapshot JSON")
    parser.add_argument("--reference-month", metavar="YYYY-MM",
                        help="Pin the reference month instead of using the latest target")
    parser.add_argument("--stdout", action="store_true",
                        help="Print the snapshot instead of writing a file")
    args = parser.parse_args(argv)

    logger.info("=== Revenue Analytics Snapshot ===")
    try:
        snapshot = build_snapshot(args.data_dir, args.reference_month)
    except (PulseError, ValueError) as e:
        logger.error("Snapshot failed: %s", e)
        return 1

    if args.stdout:
        json.dump(snapshot, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    if not atomic_write_json(snapshot, args.output):
        return 1
    logger.info(
        "Snapshot for %s written to %s (%d recommendations)",
        snapshot["referenceMonth"], args.output, len(snapshot["recommendations"]),
    )
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    sys.exit(main())
