"""
Custom error classes for Revenue Pulse.
Structured error handling with error codes across all modules.

Hierarchy:
    PulseError
    ├── DataError
    │   ├── ConfigError
    │   ├── DataLoadError
    │   └── SchemaValidationError
    └── AnalyticsError
        └── MetricComputationError
"""


class PulseError(Exception):
    """Base exception for all Revenue Pulse errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


# --- Data Errors ---

class DataError(PulseError):
    """Base class for data loading and configuration errors."""
    pass


class ConfigError(DataError):
    """Configuration value is missing or malformed."""

    def __init__(self, message: str, setting: str = None):
        super().__init__(
            message, code="CONFIG_ERROR",
            details={"setting": setting},
        )


class DataLoadError(DataError):
    """Failed to read a collection from storage."""

    def __init__(self, message: str, source: str = None):
        super().__init__(
            message, code="DATA_LOAD_FAILED", details={"source": source},
        )


class SchemaValidationError(DataError):
    """A stored record doesn't match the expected schema."""

    def __init__(self, message: str, collection: str = None, index: int = None):
        super().__init__(
            message, code="SCHEMA_INVALID",
            details={"collection": collection, "index": index},
        )


# --- Analytics Errors ---

class AnalyticsError(PulseError):
    """Base class for analytics computation errors."""
    pass


class MetricComputationError(AnalyticsError):
    """A metric could not be computed from the loaded data."""

    def __init__(self, metric: str, cause: Exception = None):
        msg = f"Metric '{metric}' failed"
        if cause:
            msg += f": {cause}"
        super().__init__(
            msg, code="METRIC_FAILED",
            details={
                "metric": metric,
                "cause": type(cause).__name__ if cause else None,
            },
        )
        self.metric = metric
        self.cause = cause
