"""Turn detected issues into deduplicated, human-readable advice."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Optional

from .models import Issue, IssueType, QueryPlan
from .thresholds import DEFAULT_THRESHOLDS, Thresholds

SEQ_SCAN_NODE_PREFIX = "Seq Scan on "

# One fixed sentence per issue type; sequential scans are built separately
# because they name the tables involved.
ADVICE: dict[IssueType, str] = {
    IssueType.ESTIMATION_ERROR: "Run ANALYZE on tables with statistics errors to improve query planning",
    IssueType.EXPENSIVE_JOIN: "Review join conditions and add appropriate indexes for join columns",
    IssueType.TEMPORARY_FILES: "Increase work_mem setting or break down the query into smaller operations",
    IssueType.INEFFICIENT_INDEX: "Consider creating more specific indexes that better match query patterns",
    IssueType.MISSING_PARALLELISM: (
        "Enable parallel query execution for this operation (increase max_parallel_workers)"
    ),
}

# Output order of recommendation groups
RECOMMENDATION_ORDER: tuple[IssueType, ...] = (
    IssueType.SEQUENTIAL_SCAN,
    IssueType.ESTIMATION_ERROR,
    IssueType.EXPENSIVE_JOIN,
    IssueType.TEMPORARY_FILES,
    IssueType.INEFFICIENT_INDEX,
    IssueType.MISSING_PARALLELISM,
)

CACHING_ADVICE = "Consider caching frequently accessed query results"


def generate_recommendations(
    plan: QueryPlan,
    issues: Iterable[Issue],
    thresholds: Optional[Thresholds] = None,
) -> list[str]:
    """Build the recommendation list for an analyzed plan.

    Args:
        plan: The analyzed plan (its execution time drives caching advice)
        issues: Detected issues, in detection order
        thresholds: Threshold overrides (slow_query_ms)

    Returns:
        At most one recommendation per issue type, in RECOMMENDATION_ORDER,
        plus caching advice for slow queries.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS

    by_type: dict[IssueType, list[Issue]] = defaultdict(list)
    for issue in issues:
        by_type[issue.type].append(issue)

    recommendations = []
    for issue_type in RECOMMENDATION_ORDER:
        group = by_type.get(issue_type)
        if not group:
            continue
        if issue_type is IssueType.SEQUENTIAL_SCAN:
            tables = _scanned_tables(group)
            if tables:
                recommendations.append(f"Consider adding indexes for tables: {', '.join(tables)}")
        else:
            recommendations.append(ADVICE[issue_type])

    if plan.execution_time > thresholds.slow_query_ms:
        recommendations.append(CACHING_ADVICE)

    return recommendations


def _scanned_tables(issues: list[Issue]) -> list[str]:
    """Distinct table names from sequential scan issues, first-seen order."""
    tables = []
    for issue in issues:
        node = issue.related_node or ""
        table = node[len(SEQ_SCAN_NODE_PREFIX):] if node.startswith(SEQ_SCAN_NODE_PREFIX) else node
        if table and table not in tables:
            tables.append(table)
    return tables
