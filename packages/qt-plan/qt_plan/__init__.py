"""QueryTorque Plan — execution plan diagnostics.

Takes a captured EXPLAIN (ANALYZE, FORMAT JSON) plan and reports:
- Issues: sequential scans, expensive joins, row estimation errors,
  temporary file usage, inefficient indexes, missing parallelism,
  high planning time
- Recommendations: one piece of advice per issue type
- Health score: 0-100

Pure and synchronous: plan in, diagnosis out. No database access.

Usage:
    from qt_plan import analyze_plan, fingerprint_query

    result = analyze_plan(explain_json, plan_text=explain_text)
    print(result.health_score, result.recommendations)

    record = build_analysis_record(sql, result)   # for history storage
"""

__version__ = "0.1.0"

from .analyzer import PlanAnalyzer, analyze_plan
from .fingerprint import fingerprint_query
from .ingest import empty_plan, parse_plan
from .models import AnalysisResult, Issue, IssueType, PlanNode, QueryPlan, Severity
from .recommendations import generate_recommendations
from .records import build_analysis_record
from .renderer import format_plan_text
from .scoring import calculate_health_score
from .thresholds import DEFAULT_THRESHOLDS, Thresholds

__all__ = [
    "PlanAnalyzer",
    "analyze_plan",
    "fingerprint_query",
    "empty_plan",
    "parse_plan",
    "AnalysisResult",
    "Issue",
    "IssueType",
    "PlanNode",
    "QueryPlan",
    "Severity",
    "generate_recommendations",
    "build_analysis_record",
    "format_plan_text",
    "calculate_health_score",
    "DEFAULT_THRESHOLDS",
    "Thresholds",
]
