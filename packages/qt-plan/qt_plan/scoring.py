"""Health score: 100 minus a fixed deduction per issue, clamped to 0-100."""

from __future__ import annotations

from typing import Iterable, Optional

from .models import Issue
from .thresholds import DEFAULT_THRESHOLDS, Thresholds

BASE_SCORE = 100
MIN_SCORE = 0
MAX_SCORE = 100


def calculate_health_score(
    issues: Iterable[Issue],
    thresholds: Optional[Thresholds] = None,
) -> int:
    """Score a plan from its issues.

    Deductions (defaults): low 5, medium 10, high 20, critical 40.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    penalty = sum(thresholds.deduction_for(issue.severity) for issue in issues)
    return max(MIN_SCORE, min(MAX_SCORE, BASE_SCORE - penalty))
