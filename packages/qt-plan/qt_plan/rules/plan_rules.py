"""Whole-plan rules: look at query timings rather than single operators."""

from __future__ import annotations

from typing import Iterator

from ..models import Issue, IssueType, QueryPlan, Severity
from ..thresholds import Thresholds
from .base import PlanRule


class MissingParallelismRule(PlanRule):
    """Slow query with no Parallel operator anywhere in the tree."""

    rule_id = "PLAN-PAR-001"
    name = "Missing Parallelism"
    issue_type = IssueType.MISSING_PARALLELISM
    description = "Query is slow but not utilizing parallel execution"
    suggestion = "Consider enabling parallel query execution or restructuring the query"

    def evaluate(self, plan: QueryPlan, thresholds: Thresholds) -> Iterator[Issue]:
        if not plan.execution_time > thresholds.slow_query_ms:
            return
        if any("Parallel" in node.node_type for node in plan.iter_nodes()):
            return
        yield self.issue(self.description, Severity.MEDIUM)


class HighPlanningTimeRule(PlanRule):
    """Planning takes a large share of execution time."""

    rule_id = "PLAN-TIME-001"
    name = "High Planning Time"
    issue_type = IssueType.HIGH_PLANNING_TIME
    description = "Planning time is high relative to execution time"
    suggestion = "Consider simplifying the query or creating helper views"

    def evaluate(self, plan: QueryPlan, thresholds: Thresholds) -> Iterator[Issue]:
        if plan.planning_time > plan.execution_time * thresholds.planning_time_ratio:
            yield self.issue(self.description, Severity.MEDIUM)
