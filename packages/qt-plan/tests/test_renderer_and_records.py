"""Tests for plan text rendering and history record assembly."""

from qt_plan import analyze_plan, build_analysis_record, fingerprint_query
from qt_plan.ingest import parse_plan
from qt_plan.models import PlanNode, QueryPlan
from qt_plan.renderer import format_plan_text


class TestFormatPlanText:
    def test_tree_indentation(self, join_plan):
        lines = format_plan_text(parse_plan(join_plan)).splitlines()
        assert lines[0].startswith("-> Sort")
        assert "   Sort Method: external merge" in lines[1]
        assert lines[2].startswith("  -> Hash Join")
        assert lines[3].startswith("    -> Seq Scan on orders")
        assert lines[-2] == "Planning Time: 1.200 ms"
        assert lines[-1] == "Execution Time: 950.000 ms"

    def test_actual_stats(self, seq_scan_plan):
        text = format_plan_text(parse_plan(seq_scan_plan))
        assert "(rows=50000 loops=1 time=250.0ms)" in text

    def test_estimate_only(self, make_node, make_plan):
        raw = make_plan(make_node("Seq Scan", relation="t", plan_rows=500, total_cost=35.5))
        assert "(est_rows=500 cost=36)" in format_plan_text(parse_plan(raw))

    def test_index_name(self, healthy_plan):
        assert "-> Index Scan on users using users_pkey" in format_plan_text(parse_plan(healthy_plan))

    def test_empty_plan(self):
        assert format_plan_text(parse_plan(None)).splitlines()[0] == "-> Unknown"

    def test_deep_plan(self):
        root = PlanNode("Seq Scan", relation="t")
        for _ in range(3000):
            root = PlanNode("Nested Loop", children=(root,))

        lines = format_plan_text(QueryPlan(plan=root)).splitlines()
        assert len(lines) == 3001 + 2
        assert lines[1] == "  -> Nested Loop"
        assert lines[3000] == "  " * 3000 + "-> Seq Scan on t"


class TestBuildAnalysisRecord:
    SQL = "SELECT * FROM orders WHERE customer_id = 42 AND status = 'open'"

    def test_record_shape(self, seq_scan_plan):
        result = analyze_plan(seq_scan_plan, plan_text="text plan")
        record = build_analysis_record(self.SQL, result, execution_time=251.3)

        assert record["query_text"] == self.SQL
        assert record["query_fingerprint"] == "SELECT * FROM orders WHERE customer_id = N AND status = S"
        assert record["execution_time"] == 251.3
        assert record["query_plan"] == result.plan.to_dict()
        assert record["explain_analyze"] == "text plan"
        assert record["analysis_result"]["healthScore"] == 60
        assert len(record["analysis_result"]["issues"]) == 2
        assert record["analysis_result"]["recommendations"] == list(result.recommendations)

    def test_execution_time_defaults_to_plan(self, make_node, make_plan):
        result = analyze_plan(make_plan(make_node("Result"), execution_time=12.0))
        assert build_analysis_record("SELECT 1", result)["execution_time"] == 12.0

    def test_same_shape_groups_together(self, seq_scan_plan):
        result = analyze_plan(seq_scan_plan)
        a = build_analysis_record("SELECT * FROM t WHERE id = 1", result)
        b = build_analysis_record("SELECT * FROM t WHERE id = 2", result)
        assert a["query_fingerprint"] == b["query_fingerprint"] == fingerprint_query("SELECT * FROM t WHERE id = 3")
