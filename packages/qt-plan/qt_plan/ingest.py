"""Normalize raw EXPLAIN (ANALYZE, FORMAT JSON) output into a QueryPlan.

PostgreSQL's JSON format is a one-element list wrapping an object:

    [{"Plan": {...}, "Planning Time": 0.1, "Execution Time": 12.3,
      "Triggers": [...]}]

Each plan node has:
- Node Type: e.g. "Seq Scan", "Hash Join", "Index Scan"
- Relation Name: Table name (for scans)
- Startup Cost / Total Cost: Planner estimates
- Plan Rows / Plan Width: Estimated row count and width
- Actual Startup Time / Actual Total Time: ms (ANALYZE only)
- Actual Rows / Actual Loops: (ANALYZE only)
- Plans: Child nodes

Every other node key (Sort Method, Index Name, Filter, ...) is kept in
``PlanNode.attributes`` under a camelCase name ("sortMethod").

Parsing never raises on bad shapes: anything that is not a plan object
degrades to an empty plan with an "Unknown" root.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any, Mapping, Optional

from .models import PlanNode, QueryPlan

logger = logging.getLogger(__name__)


# Node key -> PlanNode field
NODE_FIELDS: dict[str, str] = {
    "Node Type": "node_type",
    "Relation Name": "relation",
    "Startup Cost": "startup_cost",
    "Total Cost": "total_cost",
    "Plan Rows": "plan_rows",
    "Plan Width": "plan_width",
    "Actual Startup Time": "actual_startup_time",
    "Actual Total Time": "actual_total_time",
    "Actual Rows": "actual_rows",
    "Actual Loops": "actual_loops",
}

CHILD_PLANS_KEY = "Plans"

RECOGNIZED_NODE_KEYS = frozenset(NODE_FIELDS) | {CHILD_PLANS_KEY}

UNKNOWN_NODE_TYPE = "Unknown"


def empty_plan() -> QueryPlan:
    """The degenerate plan returned for uninterpretable input."""
    return QueryPlan(execution_time=0, planning_time=0, plan=PlanNode(node_type=UNKNOWN_NODE_TYPE))


def normalize_key(key: Any) -> str:
    """Convert an EXPLAIN key to camelCase ("Sort Space Used" -> "sortSpaceUsed")."""
    words = str(key).split()
    if not words:
        return str(key)
    first = words[0][:1].lower() + words[0][1:]
    rest = [w[:1].upper() + w[1:] for w in words[1:]]
    return first + "".join(rest)


def parse_plan(raw: Any) -> QueryPlan:
    """Parse raw EXPLAIN output into a QueryPlan.

    Args:
        raw: EXPLAIN JSON as a dict, a one-element list wrapping a dict,
            or the same as a JSON document (str/bytes).

    Returns:
        QueryPlan. Uninterpretable or empty input gives ``empty_plan()``.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.debug(f"Plan is not valid JSON, using empty plan: {e}")
            return empty_plan()

    if isinstance(raw, (list, tuple)):
        if not raw:
            logger.debug("Plan list is empty, using empty plan")
            return empty_plan()
        raw = raw[0]

    if not isinstance(raw, Mapping) or not raw:
        logger.debug(f"Plan of type {type(raw).__name__} is not interpretable, using empty plan")
        return empty_plan()

    triggers = raw.get("Triggers")
    warnings = raw.get("Warnings")
    query = raw.get("Query")

    return QueryPlan(
        execution_time=_top_level_time(raw, "Execution Time", "Execution"),
        planning_time=_top_level_time(raw, "Planning Time", "Planning"),
        plan=parse_plan_node(raw.get("Plan")),
        triggers=tuple(triggers) if isinstance(triggers, list) else None,
        warnings=tuple(str(w) for w in warnings) if isinstance(warnings, list) else (),
        query=query if isinstance(query, str) else None,
    )


def parse_plan_node(node: Any) -> PlanNode:
    """Parse a plan node and all its descendants.

    Walks the raw tree with an explicit stack and builds nodes leaves
    first, so very deep plans don't hit the recursion limit.
    """
    # Pre-order list of raw nodes; child_ids[i] are the indices of i's children
    raw_nodes: list[Any] = []
    child_ids: list[list[int]] = []
    stack: list[tuple[Any, Optional[int]]] = [(node, None)]
    while stack:
        raw, parent = stack.pop()
        index = len(raw_nodes)
        raw_nodes.append(raw)
        child_ids.append([])
        if parent is not None:
            child_ids[parent].append(index)
        stack.extend((child, index) for child in reversed(_child_plans(raw)))

    built: list[Optional[PlanNode]] = [None] * len(raw_nodes)
    for index in reversed(range(len(raw_nodes))):
        children = tuple(built[i] for i in child_ids[index])
        built[index] = _build_node(raw_nodes[index], children)
    return built[0]


def _child_plans(node: Any) -> list[Any]:
    if not isinstance(node, Mapping):
        return []
    child_plans = node.get(CHILD_PLANS_KEY)
    return child_plans if isinstance(child_plans, list) else []


def _build_node(node: Any, children: tuple[PlanNode, ...]) -> PlanNode:
    """Build one PlanNode from its raw mapping and already-built children."""
    if not isinstance(node, Mapping) or not node:
        return PlanNode(node_type=UNKNOWN_NODE_TYPE)

    node_type = node.get("Node Type")
    if not isinstance(node_type, str) or not node_type:
        node_type = UNKNOWN_NODE_TYPE

    relation = node.get("Relation Name")
    if not isinstance(relation, str):
        relation = None

    numeric = {
        field_name: _number(node.get(key))
        for key, field_name in NODE_FIELDS.items()
        if field_name not in ("node_type", "relation")
    }

    attributes = {
        normalize_key(key): value
        for key, value in node.items()
        if key not in RECOGNIZED_NODE_KEYS
    }

    return PlanNode(
        node_type=node_type,
        relation=relation,
        children=children,
        attributes=attributes,
        **numeric,
    )


def _top_level_time(plan_data: Mapping[str, Any], key: str, section: str) -> float:
    """Read a whole-query timing.

    PostgreSQL puts "Execution Time" at the top level; some capture
    functions nest it under an "Execution" object instead.
    """
    value = _number(plan_data.get(key))
    if value is None:
        nested = plan_data.get(section)
        if isinstance(nested, Mapping):
            value = _number(nested.get(key))
    return value or 0


def _number(value: Any) -> Optional[float]:
    """Finite numeric value or None (bools, strings, NaN and inf count as absent)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value
