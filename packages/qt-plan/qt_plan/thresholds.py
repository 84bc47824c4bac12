"""Rule thresholds for plan diagnostics.

These are hand-picked heuristics, not calibrated against real workloads.
The defaults are kept stable so that scores stay comparable between runs;
override them per analysis with ``Thresholds(...)`` or through
``qt_plan.config.Settings`` (``QT_PLAN_*`` environment variables).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping


# Sequential scan
SEQ_SCAN_MIN_ROWS = 1000
SEQ_SCAN_MIN_TIME_MS = 100.0
SEQ_SCAN_HIGH_ROWS = 10_000

# Expensive join
JOIN_MIN_ROWS = 10_000
JOIN_MIN_TIME_MS = 500.0
JOIN_HIGH_TIME_MS = 1000.0

# Estimation error (actual / planned rows)
ESTIMATE_RATIO_MEDIUM = 10.0
ESTIMATE_RATIO_HIGH = 100.0

# Inefficient index
INDEX_MAX_ACTUAL_ROWS = 10
INDEX_MIN_PLAN_ROWS = 1000

# Whole-plan
SLOW_QUERY_MS = 1000.0
PLANNING_TIME_RATIO = 0.5

# Health score
SEVERITY_DEDUCTIONS: dict[str, int] = {
    "low": 5,
    "medium": 10,
    "high": 20,
    "critical": 40,
}


@dataclass(frozen=True)
class Thresholds:
    """Bundle of every tunable number the rule battery reads."""

    seq_scan_min_rows: int = SEQ_SCAN_MIN_ROWS
    seq_scan_min_time_ms: float = SEQ_SCAN_MIN_TIME_MS
    seq_scan_high_rows: int = SEQ_SCAN_HIGH_ROWS

    join_min_rows: int = JOIN_MIN_ROWS
    join_min_time_ms: float = JOIN_MIN_TIME_MS
    join_high_time_ms: float = JOIN_HIGH_TIME_MS

    estimate_ratio_medium: float = ESTIMATE_RATIO_MEDIUM
    estimate_ratio_high: float = ESTIMATE_RATIO_HIGH

    index_max_actual_rows: int = INDEX_MAX_ACTUAL_ROWS
    index_min_plan_rows: int = INDEX_MIN_PLAN_ROWS

    slow_query_ms: float = SLOW_QUERY_MS
    planning_time_ratio: float = PLANNING_TIME_RATIO

    # Read-only, and not part of the hash
    severity_deductions: Mapping[str, int] = field(
        default_factory=lambda: dict(SEVERITY_DEDUCTIONS), hash=False
    )

    def __post_init__(self):
        object.__setattr__(
            self, "severity_deductions", MappingProxyType(dict(self.severity_deductions))
        )

    def deduction_for(self, severity: Any) -> int:
        """Points removed from the health score for one issue of ``severity``."""
        key = getattr(severity, "value", severity)
        return self.severity_deductions.get(key, 0)

    def with_overrides(self, **overrides: Any) -> "Thresholds":
        """Copy with some fields replaced; ``None`` values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


DEFAULT_THRESHOLDS = Thresholds()
