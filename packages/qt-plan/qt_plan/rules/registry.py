"""Rule registry for plan diagnostics.

The battery runs in a fixed order so that the issue list of a plan is
reproducible:
    per-node: sequential scan, expensive join, estimation error,
              temporary files, inefficient index
    whole-plan: missing parallelism, high planning time
"""

from __future__ import annotations

from typing import Optional

from ..models import IssueType
from .base import PlanRule
from .node_rules import (
    EstimationErrorRule,
    ExpensiveJoinRule,
    InefficientIndexRule,
    SequentialScanRule,
    TemporaryFilesRule,
)
from .plan_rules import HighPlanningTimeRule, MissingParallelismRule

RULE_CLASSES: tuple[type[PlanRule], ...] = (
    SequentialScanRule,
    ExpensiveJoinRule,
    EstimationErrorRule,
    TemporaryFilesRule,
    InefficientIndexRule,
    MissingParallelismRule,
    HighPlanningTimeRule,
)


def get_all_rules() -> list[PlanRule]:
    """Fresh instances of every rule, in execution order."""
    return [rule_cls() for rule_cls in RULE_CLASSES]


def get_rule_by_id(rule_id: str) -> Optional[PlanRule]:
    """Get a rule by its ID."""
    for rule in get_all_rules():
        if rule.rule_id == rule_id:
            return rule
    return None


def get_rule_by_type(issue_type: IssueType | str) -> Optional[PlanRule]:
    """Get the rule that emits a given issue type."""
    wanted = IssueType(issue_type)
    for rule in get_all_rules():
        if rule.issue_type is wanted:
            return rule
    return None


def get_rule_count() -> int:
    return len(RULE_CLASSES)
