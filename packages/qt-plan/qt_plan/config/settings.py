"""Application configuration for plan diagnostics."""

from functools import lru_cache

from pydantic_settings import BaseSettings

from .. import thresholds as defaults
from ..thresholds import DEFAULT_THRESHOLDS, Thresholds


class Settings(BaseSettings):
    """Plan diagnostics settings loaded from environment.

    Every rule threshold can be overridden with a QT_PLAN_* variable,
    e.g. QT_PLAN_SEQ_SCAN_MIN_ROWS=5000.
    """

    # Sequential scan
    seq_scan_min_rows: int = defaults.SEQ_SCAN_MIN_ROWS
    seq_scan_min_time_ms: float = defaults.SEQ_SCAN_MIN_TIME_MS
    seq_scan_high_rows: int = defaults.SEQ_SCAN_HIGH_ROWS

    # Expensive join
    join_min_rows: int = defaults.JOIN_MIN_ROWS
    join_min_time_ms: float = defaults.JOIN_MIN_TIME_MS
    join_high_time_ms: float = defaults.JOIN_HIGH_TIME_MS

    # Estimation error
    estimate_ratio_medium: float = defaults.ESTIMATE_RATIO_MEDIUM
    estimate_ratio_high: float = defaults.ESTIMATE_RATIO_HIGH

    # Inefficient index
    index_max_actual_rows: int = defaults.INDEX_MAX_ACTUAL_ROWS
    index_min_plan_rows: int = defaults.INDEX_MIN_PLAN_ROWS

    # Whole-plan
    slow_query_ms: float = defaults.SLOW_QUERY_MS
    planning_time_ratio: float = defaults.PLANNING_TIME_RATIO

    # Health score deductions
    deduction_low: int = defaults.SEVERITY_DEDUCTIONS["low"]
    deduction_medium: int = defaults.SEVERITY_DEDUCTIONS["medium"]
    deduction_high: int = defaults.SEVERITY_DEDUCTIONS["high"]
    deduction_critical: int = defaults.SEVERITY_DEDUCTIONS["critical"]

    # CLI
    log_level: str = "WARNING"

    class Config:
        env_prefix = "QT_PLAN_"
        env_file = ".env"
        extra = "ignore"

    @property
    def uses_default_thresholds(self) -> bool:
        """Check if no threshold differs from the built-in defaults."""
        return self.thresholds() == DEFAULT_THRESHOLDS

    def thresholds(self) -> Thresholds:
        """Build the Thresholds value the analyzer consumes."""
        return DEFAULT_THRESHOLDS.with_overrides(
            seq_scan_min_rows=self.seq_scan_min_rows,
            seq_scan_min_time_ms=self.seq_scan_min_time_ms,
            seq_scan_high_rows=self.seq_scan_high_rows,
            join_min_rows=self.join_min_rows,
            join_min_time_ms=self.join_min_time_ms,
            join_high_time_ms=self.join_high_time_ms,
            estimate_ratio_medium=self.estimate_ratio_medium,
            estimate_ratio_high=self.estimate_ratio_high,
            index_max_actual_rows=self.index_max_actual_rows,
            index_min_plan_rows=self.index_min_plan_rows,
            slow_query_ms=self.slow_query_ms,
            planning_time_ratio=self.planning_time_ratio,
            severity_deductions={
                "low": self.deduction_low,
                "medium": self.deduction_medium,
                "high": self.deduction_high,
                "critical": self.deduction_critical,
            },
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
