"""Row shape for storing an analysis in query performance history.

The storage itself belongs to the caller; this only assembles the record,
keyed by query fingerprint so runs of the same query shape group together.
"""

from __future__ import annotations

from typing import Any, Optional

from .fingerprint import fingerprint_query
from .models import AnalysisResult


def build_analysis_record(
    query: str,
    analysis: AnalysisResult,
    execution_time: Optional[float] = None,
) -> dict[str, Any]:
    """Assemble a history record for one analyzed query.

    Args:
        query: SQL text that was analyzed
        analysis: Its AnalysisResult
        execution_time: Measured wall-clock time in ms (defaults to the
            plan's own Execution Time)

    Returns:
        JSON-serializable dict with query_text, query_fingerprint,
        execution_time, query_plan, explain_analyze and analysis_result.
    """
    if execution_time is None:
        execution_time = analysis.plan.execution_time

    return {
        "query_text": query,
        "query_fingerprint": fingerprint_query(query),
        "execution_time": execution_time,
        "query_plan": analysis.plan.to_dict(),
        "explain_analyze": analysis.plan_text,
        "analysis_result": {
            "issues": [issue.to_dict() for issue in analysis.issues],
            "recommendations": list(analysis.recommendations),
            "healthScore": analysis.health_score,
        },
    }
