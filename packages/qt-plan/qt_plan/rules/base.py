"""Core classes for plan diagnostic rules.

Two kinds of rule:
- NodeRule: looks at one operator at a time. The engine hands it every
  node of the plan in pre-order (node before children, children in order).
- PlanRule: looks at whole-query fields (timings) and may scan the tree.

Rules are stateless; thresholds arrive with each call so one rule
instance can be shared across analyses and threads.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from ..models import Issue, IssueType, PlanNode, QueryPlan, Severity
from ..thresholds import Thresholds


class PlanRule(ABC):
    """Base class for plan rules.

    Subclasses must:
    1. Set class attributes (rule_id, name, issue_type, ...)
    2. Implement evaluate() to yield Issues

    Example:
        class HighPlanningTimeRule(PlanRule):
            rule_id = "PLAN-002"
            issue_type = IssueType.HIGH_PLANNING_TIME

            def evaluate(self, plan, thresholds):
                if plan.planning_time > plan.execution_time * thresholds.planning_time_ratio:
                    yield self.issue("Planning time is high", Severity.MEDIUM)
    """

    # Rule metadata - override in subclasses
    rule_id: str = ""
    name: str = ""
    issue_type: IssueType
    description: str = ""
    suggestion: str = ""

    # Extension attribute keys (PlanNode.attributes) this rule reads
    reads_attributes: tuple[str, ...] = ()

    @abstractmethod
    def evaluate(self, plan: QueryPlan, thresholds: Thresholds) -> Iterator[Issue]:
        """Yield an Issue for each violation in the plan."""
        ...

    def issue(
        self,
        description: str,
        severity: Severity,
        related_node: Optional[str] = None,
        suggested_fix: Optional[str] = None,
    ) -> Issue:
        """Build an Issue of this rule's type."""
        return Issue(
            type=self.issue_type,
            description=description,
            severity=severity,
            related_node=related_node,
            suggested_fix=suggested_fix if suggested_fix is not None else (self.suggestion or None),
        )


class NodeRule(PlanRule):
    """Rule evaluated once per operator, in pre-order."""

    def evaluate(self, plan: QueryPlan, thresholds: Thresholds) -> Iterator[Issue]:
        for node in plan.iter_nodes():
            if self.should_check(node):
                yield from self.check(node, thresholds)

    def should_check(self, node: PlanNode) -> bool:
        """Pre-filter hook, e.g. on node type."""
        return True

    @abstractmethod
    def check(self, node: PlanNode, thresholds: Thresholds) -> Iterator[Issue]:
        """Yield an Issue for each violation at this node."""
        ...
