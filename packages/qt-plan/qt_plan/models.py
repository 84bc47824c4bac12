"""Plan diagnostic data model.

Value objects shared by every stage of the analysis pipeline:
- Plan: PlanNode, QueryPlan
- Findings: Severity, IssueType, Issue
- Output: AnalysisResult

All of them are frozen. ``to_dict()`` emits the camelCase shape consumers
of the analysis (API responses, persistence rows) expect.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional


class Severity(str, Enum):
    """Issue severity, ordered low < medium < high < critical."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {"low": 0, "medium": 1, "high": 2, "critical": 3}


class IssueType(str, Enum):
    """Fixed categories of plan anti-patterns."""
    SEQUENTIAL_SCAN = "sequential_scan"
    EXPENSIVE_JOIN = "expensive_join"
    ESTIMATION_ERROR = "estimation_error"
    TEMPORARY_FILES = "temporary_files"
    INEFFICIENT_INDEX = "inefficient_index"
    MISSING_PARALLELISM = "missing_parallelism"
    HIGH_PLANNING_TIME = "high_planning_time"


# Canonical PlanNode field -> serialized key
_NODE_FIELD_KEYS = (
    ("relation", "relation"),
    ("startup_cost", "startupCost"),
    ("total_cost", "totalCost"),
    ("plan_rows", "planRows"),
    ("plan_width", "planWidth"),
    ("actual_startup_time", "actualStartupTime"),
    ("actual_total_time", "actualTotalTime"),
    ("actual_rows", "actualRows"),
    ("actual_loops", "actualLoops"),
)


@dataclass(frozen=True)
class PlanNode:
    """One operator in a query execution plan.

    Attributes:
        node_type: Operator label (e.g. "Seq Scan", "Hash Join")
        relation: Table name for scan operators
        startup_cost / total_cost: Planner cost estimates
        plan_rows / plan_width: Planner row count and row width estimates
        actual_startup_time / actual_total_time: Measured time in ms
        actual_rows / actual_loops: Measured row and loop counts
        children: Child operators, in execution order
        attributes: Engine-specific fields not modeled above, keyed by
            normalized camelCase name (e.g. "sortMethod", "indexName")
    """

    node_type: str = "Unknown"
    relation: Optional[str] = None
    startup_cost: Optional[float] = None
    total_cost: Optional[float] = None
    plan_rows: Optional[float] = None
    plan_width: Optional[float] = None
    actual_startup_time: Optional[float] = None
    actual_total_time: Optional[float] = None
    actual_rows: Optional[float] = None
    actual_loops: Optional[float] = None
    children: tuple["PlanNode", ...] = ()
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "children", tuple(self.children))
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def label(self) -> str:
        """Display label, e.g. "Seq Scan on orders"."""
        if self.relation:
            return f"{self.node_type} on {self.relation}"
        return self.node_type

    def attribute(self, key: str, default: Any = None) -> Any:
        """Read an engine-specific attribute by normalized key."""
        return self.attributes.get(key, default)

    def walk(self) -> Iterator["PlanNode"]:
        """Yield this node and all descendants in pre-order.

        Node before children, children in their original order. Iterative,
        so very deep plans don't hit the recursion limit.
        """
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_dict(self) -> dict[str, Any]:
        """Export as JSON-serializable dict (the whole subtree, iteratively)."""
        root: dict[str, Any] = {}
        stack: list[tuple[PlanNode, Optional[list]]] = [(self, None)]
        while stack:
            node, siblings = stack.pop()
            data = node._fields_dict()
            if siblings is None:
                root = data
            else:
                siblings.append(data)
            if node.children:
                data["children"] = []
                stack.extend((child, data["children"]) for child in reversed(node.children))
        return root

    def _fields_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"nodeType": self.node_type}
        for attr, key in _NODE_FIELD_KEYS:
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        for key, value in self.attributes.items():
            result.setdefault(key, value)
        return result


@dataclass(frozen=True)
class QueryPlan:
    """A captured plan: root operator plus whole-query timings (ms)."""

    execution_time: float = 0.0
    planning_time: float = 0.0
    plan: PlanNode = field(default_factory=PlanNode)
    triggers: Optional[tuple[Any, ...]] = None
    warnings: Optional[tuple[str, ...]] = None
    query: Optional[str] = None

    def __post_init__(self):
        if self.triggers is not None:
            object.__setattr__(self, "triggers", tuple(self.triggers))
        if self.warnings is not None:
            object.__setattr__(self, "warnings", tuple(self.warnings))

    def iter_nodes(self) -> Iterator[PlanNode]:
        """All operators of the plan, pre-order."""
        return self.plan.walk()

    def to_dict(self) -> dict[str, Any]:
        """Export as JSON-serializable dict."""
        result: dict[str, Any] = {
            "executionTime": self.execution_time,
            "planningTime": self.planning_time,
            "plan": self.plan.to_dict(),
        }
        if self.triggers is not None:
            result["triggers"] = list(self.triggers)
        if self.query is not None:
            result["query"] = self.query
        if self.warnings is not None:
            result["warnings"] = list(self.warnings)
        return result


@dataclass(frozen=True)
class Issue:
    """A detected plan anti-pattern."""
    type: IssueType
    description: str
    severity: Severity
    related_node: Optional[str] = None  # Display label of the operator
    suggested_fix: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Export as JSON-serializable dict."""
        result: dict[str, Any] = {
            "type": self.type.value,
            "description": self.description,
            "severity": self.severity.value,
        }
        if self.related_node is not None:
            result["relatedNode"] = self.related_node
        if self.suggested_fix is not None:
            result["suggestedFix"] = self.suggested_fix
        return result


@dataclass(frozen=True)
class AnalysisResult:
    """Complete diagnosis of one plan."""
    plan: QueryPlan
    plan_text: str
    issues: tuple[Issue, ...] = ()
    recommendations: tuple[str, ...] = ()
    health_score: int = 100

    def __post_init__(self):
        object.__setattr__(self, "issues", tuple(self.issues))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))

    @property
    def severity_counts(self) -> dict[str, int]:
        """Issue count per severity, every level present."""
        counts = {s.value: 0 for s in Severity}
        for issue in self.issues:
            counts[issue.severity.value] += 1
        return counts

    def issues_of(self, issue_type: IssueType | str) -> list[Issue]:
        """Issues of one type, in detection order."""
        wanted = IssueType(issue_type)
        return [issue for issue in self.issues if issue.type is wanted]

    def to_dict(self) -> dict[str, Any]:
        """Export as JSON-serializable dict."""
        return {
            "plan": self.plan.to_dict(),
            "planText": self.plan_text,
            "issues": [issue.to_dict() for issue in self.issues],
            "recommendations": list(self.recommendations),
            "healthScore": self.health_score,
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)
