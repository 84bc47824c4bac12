"""Per-operator plan rules.

Numeric fields follow "present means non-zero": a rule that needs
Actual Rows or Plan Rows skips nodes where the value is missing or 0.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from ..models import Issue, IssueType, PlanNode, Severity
from ..thresholds import Thresholds
from .base import NodeRule

INDEX_SCAN_TYPES = frozenset({"Index Scan", "Index Only Scan"})

EXTERNAL_SORT_METHOD = "external merge"


def _present(value: Optional[float]) -> bool:
    return bool(value)


def _over(value: Optional[float], limit: float) -> bool:
    return _present(value) and value > limit


def _fmt(value: Any) -> str:
    """Render a plan count: 50000.0 -> "50000", None -> "unknown"."""
    if value is None:
        return "unknown"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class SequentialScanRule(NodeRule):
    """Seq Scan on a table that reads many rows or takes long."""

    rule_id = "PLAN-SCAN-001"
    name = "Sequential Scan"
    issue_type = IssueType.SEQUENTIAL_SCAN
    description = "Sequential scan over a large or slow table"

    def should_check(self, node: PlanNode) -> bool:
        return node.node_type == "Seq Scan" and bool(node.relation)

    def check(self, node: PlanNode, thresholds: Thresholds) -> Iterator[Issue]:
        if not (
            _over(node.actual_rows, thresholds.seq_scan_min_rows)
            or _over(node.actual_total_time, thresholds.seq_scan_min_time_ms)
        ):
            return

        high = _over(node.actual_rows, thresholds.seq_scan_high_rows)
        yield self.issue(
            f"Sequential scan on table {node.relation} with {_fmt(node.actual_rows)} rows",
            Severity.HIGH if high else Severity.MEDIUM,
            related_node=node.label,
            suggested_fix=(
                f"Consider adding an index on columns in the WHERE clause for table {node.relation}"
            ),
        )


class ExpensiveJoinRule(NodeRule):
    """Join producing many rows or taking long."""

    rule_id = "PLAN-JOIN-001"
    name = "Expensive Join"
    issue_type = IssueType.EXPENSIVE_JOIN
    description = "Join operator producing many rows or taking long"
    suggestion = "Consider adding indexes on join columns or restructuring the query"

    def should_check(self, node: PlanNode) -> bool:
        return "Join" in node.node_type

    def check(self, node: PlanNode, thresholds: Thresholds) -> Iterator[Issue]:
        if not (
            _over(node.actual_rows, thresholds.join_min_rows)
            or _over(node.actual_total_time, thresholds.join_min_time_ms)
        ):
            return

        high = _over(node.actual_total_time, thresholds.join_high_time_ms)
        yield self.issue(
            f"Expensive {node.node_type} producing {_fmt(node.actual_rows)} rows",
            Severity.HIGH if high else Severity.MEDIUM,
            related_node=node.node_type,
        )


class EstimationErrorRule(NodeRule):
    """Planner row estimate off by an order of magnitude or more."""

    rule_id = "PLAN-EST-001"
    name = "Row Estimation Error"
    issue_type = IssueType.ESTIMATION_ERROR
    description = "Actual rows differ from planned rows by 10x or more"
    suggestion = "Run ANALYZE on related tables to update statistics"

    def should_check(self, node: PlanNode) -> bool:
        return _present(node.plan_rows) and _present(node.actual_rows)

    def check(self, node: PlanNode, thresholds: Thresholds) -> Iterator[Issue]:
        ratio = node.actual_rows / node.plan_rows

        medium = thresholds.estimate_ratio_medium
        if not (ratio > medium or ratio < 1 / medium):
            return

        high = thresholds.estimate_ratio_high
        severe = ratio > high or ratio < 1 / high
        yield self.issue(
            f"Row estimation error in {node.node_type}: "
            f"estimated {_fmt(node.plan_rows)}, got {_fmt(node.actual_rows)}",
            Severity.HIGH if severe else Severity.MEDIUM,
            related_node=node.node_type,
        )


class TemporaryFilesRule(NodeRule):
    """Sort that spilled to disk or reports sort space."""

    rule_id = "PLAN-TEMP-001"
    name = "Temporary File Usage"
    issue_type = IssueType.TEMPORARY_FILES
    description = "Operator used temporary files"
    suggestion = "Increase work_mem setting or restructure query to reduce memory usage"
    reads_attributes = ("sortMethod", "sortSpaceUsed")

    def check(self, node: PlanNode, thresholds: Thresholds) -> Iterator[Issue]:
        if node.attribute("sortMethod") == EXTERNAL_SORT_METHOD or node.attribute("sortSpaceUsed"):
            yield self.issue(
                f"External temporary file used in {node.node_type}",
                Severity.HIGH,
                related_node=node.node_type,
            )


class InefficientIndexRule(NodeRule):
    """Index scan planned for many rows that returned almost none."""

    rule_id = "PLAN-IDX-001"
    name = "Inefficient Index"
    issue_type = IssueType.INEFFICIENT_INDEX
    description = "Index scan returns far fewer rows than planned"
    suggestion = "Consider creating a more specific index for this query pattern"
    reads_attributes = ("indexName",)

    def should_check(self, node: PlanNode) -> bool:
        return (
            node.node_type in INDEX_SCAN_TYPES
            and bool(node.relation)
            and bool(node.attribute("indexName"))
        )

    def check(self, node: PlanNode, thresholds: Thresholds) -> Iterator[Issue]:
        few_rows = _present(node.actual_rows) and node.actual_rows < thresholds.index_max_actual_rows
        if few_rows and _over(node.plan_rows, thresholds.index_min_plan_rows):
            yield self.issue(
                f"Inefficient index {node.attribute('indexName')} on {node.relation}",
                Severity.MEDIUM,
                related_node=node.label,
            )
