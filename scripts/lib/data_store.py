"""
Revenue Pulse — Data Store
============================
Loads the five CRM collections from flat JSON files into an immutable
``DataContext``. The context is built once at startup and handed to every
analytics call; nothing in the analytics layer reads files or globals.

File layout (DATA_DIR, default ./data):
    deals.json, targets.json, reps.json, activities.json, accounts.json

Each file holds a JSON array of records, or an object with a ``results``
array (the usual CRM export envelope).

Usage:
    from scripts.lib.data_store import load_data_context
    context = load_data_context()
    print(context.counts())
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import ValidationError

from models.crm_models import Account, Activity, CRMRecord, Deal, Rep, Target
from scripts.lib.config import DATA_DIR
from scripts.lib.errors import DataLoadError, SchemaValidationError
from scripts.lib.logger import setup_logger

logger = setup_logger("data_store")

R = TypeVar("R", bound=CRMRecord)

COLLECTIONS: Dict[str, Type[CRMRecord]] = {
    "deals": Deal,
    "targets": Target,
    "reps": Rep,
    "activities": Activity,
    "accounts": Account,
}


@dataclass(frozen=True)
class DataContext:
    """Read-only snapshot of every source collection."""
    deals: Tuple[Deal, ...] = ()
    targets: Tuple[Target, ...] = ()
    reps: Tuple[Rep, ...] = ()
    activities: Tuple[Activity, ...] = ()
    accounts: Tuple[Account, ...] = ()
    source: str = "memory"
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_records(
        cls,
        deals: Sequence[Any] = (),
        targets: Sequence[Any] = (),
        reps: Sequence[Any] = (),
        activities: Sequence[Any] = (),
        accounts: Sequence[Any] = (),
        source: str = "memory",
    ) -> "DataContext":
        """Build a context from model instances or raw dicts."""
        return cls(
            deals=_validate_all("deals", Deal, deals),
            targets=_validate_all("targets", Target, targets),
            reps=_validate_all("reps", Rep, reps),
            activities=_validate_all("activities", Activity, activities),
            accounts=_validate_all("accounts", Account, accounts),
            source=source,
        )

    def counts(self) -> Dict[str, int]:
        return {name: len(getattr(self, name)) for name in COLLECTIONS}


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _validate_all(name: str, model: Type[R], rows: Sequence[Any]) -> Tuple[R, ...]:
    records: List[R] = []
    for index, row in enumerate(rows):
        if isinstance(row, model):
            records.append(row)
            continue
        try:
            records.append(model.model_validate(row))
        except ValidationError as e:
            raise SchemaValidationError(
                f"Invalid {name} record at index {index}: {e.errors()[0]['msg']}",
                collection=name, index=index,
            ) from e
    return tuple(records)


def _read_rows(path: Path) -> List[dict]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(f"Could not read {path.name}: {e}", source=str(path)) from e

    if isinstance(payload, dict):
        payload = payload.get("results", [])
    if not isinstance(payload, list):
        raise DataLoadError(
            f"{path.name} must contain a JSON array of records", source=str(path),
        )
    return payload


def load_collection(name: str, model: Type[R], data_dir: Optional[Path] = None) -> Tuple[R, ...]:
    """
    Load and validate one collection.

    A missing file yields an empty collection (logged as a warning) so the
    analytics still answer with zero values.

    Raises:
        DataLoadError: file exists but can't be parsed.
        SchemaValidationError: a record fails validation.
    """
    path = Path(data_dir or DATA_DIR) / f"{name}.json"
    if not path.exists():
        logger.warning("No data file for '%s' at %s; using empty collection.", name, path)
        return ()
    logger.info("Loading %s from %s", name, path)
    return _validate_all(name, model, _read_rows(path))


def load_data_context(data_dir: Optional[Path] = None) -> DataContext:
    """Load all five collections from ``data_dir`` into a DataContext."""
    data_dir = Path(data_dir or DATA_DIR)
    loaded = {
        name: load_collection(name, model, data_dir)
        for name, model in COLLECTIONS.items()
    }
    context = DataContext(source=str(data_dir), **loaded)
    logger.info(
        "Data context loaded from %s: %s",
        data_dir,
        ", ".join(f"{k}={v}" for k, v in context.counts().items()),
    )
    return context
