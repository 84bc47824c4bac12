"""Plain-text rendering of a canonical plan tree.

Used as the display text of an AnalysisResult when the caller did not
capture the engine's own text EXPLAIN. Display only; nothing parses it.
"""

from __future__ import annotations

from typing import Any

from .models import PlanNode, QueryPlan


def format_plan_text(plan: QueryPlan) -> str:
    """Format a QueryPlan as an indented operator tree.

    Example:
        -> Hash Join  (rows=12 loops=1 time=3.2ms)
          -> Seq Scan on orders  (rows=50000 loops=1 time=250.0ms)
        Planning Time: 0.150 ms
        Execution Time: 260.000 ms
    """
    lines: list[str] = []
    stack = [(plan.plan, 0)]
    while stack:
        node, depth = stack.pop()
        _render_node(node, depth, lines)
        stack.extend((child, depth + 1) for child in reversed(node.children))
    lines.append(f"Planning Time: {plan.planning_time:.3f} ms")
    lines.append(f"Execution Time: {plan.execution_time:.3f} ms")
    return "\n".join(lines)


def _render_node(node: PlanNode, depth: int, lines: list[str]) -> None:
    indent = "  " * depth

    parts = [f"{indent}-> {node.label}"]
    index_name = node.attribute("indexName")
    if index_name:
        parts.append(f"using {index_name}")
    line = " ".join(parts)

    # Prefer ANALYZE actuals; fall back to planner estimates
    if node.actual_rows is not None:
        loops = node.actual_loops or 1
        time_ms = node.actual_total_time or 0
        stats = f"(rows={_fmt_count(node.actual_rows)} loops={_fmt_count(loops)} time={time_ms:.1f}ms)"
    elif node.plan_rows is not None:
        stats = f"(est_rows={_fmt_count(node.plan_rows)} cost={node.total_cost or 0:.0f})"
    else:
        stats = ""
    lines.append(f"{line}  {stats}" if stats else line)

    sort_method = node.attribute("sortMethod")
    if sort_method:
        space = node.attribute("sortSpaceUsed", 0)
        space_type = node.attribute("sortSpaceType", "")
        lines.append(f"{indent}   Sort Method: {sort_method}  Space: {space}kB ({space_type})")

    filter_expr = node.attribute("filter")
    if filter_expr:
        lines.append(f"{indent}   Filter: {filter_expr}")


def _fmt_count(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
