"""Plan diagnostics pipeline.

    raw EXPLAIN JSON
        -> parse_plan()                  canonical QueryPlan
        -> rule battery (fixed order)    issues
        -> generate_recommendations()    advice
        -> calculate_health_score()      0-100

Usage:
    from qt_plan import analyze_plan
    result = analyze_plan(explain_json)
    result.health_score, result.recommendations

    # Custom thresholds:
    from qt_plan import PlanAnalyzer, Thresholds
    analyzer = PlanAnalyzer(thresholds=Thresholds(seq_scan_min_rows=5000))
    result = analyzer.analyze(explain_json, plan_text=explain_text)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Sequence

from .ingest import parse_plan
from .models import AnalysisResult, Issue, QueryPlan
from .recommendations import generate_recommendations
from .renderer import format_plan_text
from .rules.base import PlanRule
from .rules.registry import get_all_rules
from .scoring import calculate_health_score
from .thresholds import DEFAULT_THRESHOLDS, Thresholds

logger = logging.getLogger(__name__)


class PlanAnalyzer:
    """Runs the diagnostic rule battery over query plans.

    Holds no per-analysis state, so one instance can serve concurrent
    callers.
    """

    def __init__(
        self,
        rules: Optional[Sequence[PlanRule]] = None,
        thresholds: Optional[Thresholds] = None,
    ):
        """Initialize analyzer.

        Args:
            rules: Rules to run, in order (default: full registry battery)
            thresholds: Threshold overrides (default: module defaults)
        """
        self.rules: tuple[PlanRule, ...] = tuple(rules) if rules is not None else tuple(get_all_rules())
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def analyze(self, raw_plan: Any, plan_text: Optional[str] = None) -> AnalysisResult:
        """Parse and diagnose raw EXPLAIN output.

        Args:
            raw_plan: EXPLAIN (ANALYZE, FORMAT JSON) output, any shape
                parse_plan() accepts
            plan_text: Engine text EXPLAIN for display; rendered from the
                parsed tree when omitted

        Returns:
            AnalysisResult
        """
        return self.analyze_plan(parse_plan(raw_plan), plan_text=plan_text)

    def analyze_plan(self, plan: QueryPlan, plan_text: Optional[str] = None) -> AnalysisResult:
        """Diagnose an already-parsed QueryPlan."""
        start_time = time.perf_counter()

        issues = self.detect_issues(plan)
        recommendations = generate_recommendations(plan, issues, self.thresholds)
        health_score = calculate_health_score(issues, self.thresholds)

        if plan_text is None:
            plan_text = format_plan_text(plan)

        elapsed = time.perf_counter() - start_time
        logger.debug(
            f"Plan analysis completed in {elapsed:.4f}s: "
            f"{len(issues)} issues, score {health_score}"
        )

        return AnalysisResult(
            plan=plan,
            plan_text=plan_text,
            issues=tuple(issues),
            recommendations=tuple(recommendations),
            health_score=health_score,
        )

    def detect_issues(self, plan: QueryPlan) -> list[Issue]:
        """Run every rule in order and collect their issues."""
        issues: list[Issue] = []
        for rule in self.rules:
            found = list(rule.evaluate(plan, self.thresholds))
            if found:
                logger.debug(f"{rule.rule_id} ({rule.name}): {len(found)} issue(s)")
            issues.extend(found)
        return issues


def analyze_plan(
    raw_plan: Any,
    plan_text: Optional[str] = None,
    thresholds: Optional[Thresholds] = None,
) -> AnalysisResult:
    """Convenience function: diagnose raw EXPLAIN output with the default rules.

    Args:
        raw_plan: EXPLAIN JSON (dict, list, or JSON string)
        plan_text: Optional text EXPLAIN for display
        thresholds: Optional threshold overrides

    Returns:
        AnalysisResult
    """
    return PlanAnalyzer(thresholds=thresholds).analyze(raw_plan, plan_text=plan_text)
