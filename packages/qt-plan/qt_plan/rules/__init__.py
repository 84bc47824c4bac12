"""Plan diagnostic rules."""

from .base import NodeRule, PlanRule
from .node_rules import (
    EstimationErrorRule,
    ExpensiveJoinRule,
    InefficientIndexRule,
    SequentialScanRule,
    TemporaryFilesRule,
)
from .plan_rules import HighPlanningTimeRule, MissingParallelismRule
from .registry import RULE_CLASSES, get_all_rules, get_rule_by_id, get_rule_by_type, get_rule_count

__all__ = [
    "NodeRule",
    "PlanRule",
    "SequentialScanRule",
    "ExpensiveJoinRule",
    "EstimationErrorRule",
    "TemporaryFilesRule",
    "InefficientIndexRule",
    "MissingParallelismRule",
    "HighPlanningTimeRule",
    "RULE_CLASSES",
    "get_all_rules",
    "get_rule_by_id",
    "get_rule_by_type",
    "get_rule_count",
]
