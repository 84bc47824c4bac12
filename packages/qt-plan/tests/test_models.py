"""Tests for the plan data model."""

import dataclasses

import pytest

from qt_plan.models import AnalysisResult, Issue, IssueType, PlanNode, QueryPlan, Severity


class TestSeverity:
    def test_total_order(self):
        assert Severity.LOW < Severity.MEDIUM < Severity.HIGH < Severity.CRITICAL
        assert Severity.CRITICAL >= Severity.HIGH
        assert Severity.LOW <= Severity.LOW
        assert max(Severity) is Severity.CRITICAL

    def test_sorting(self):
        assert sorted([Severity.HIGH, Severity.LOW, Severity.CRITICAL, Severity.MEDIUM]) == [
            Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL,
        ]

    def test_string_values(self):
        assert Severity("high") is Severity.HIGH
        assert Severity.MEDIUM.value == "medium"


class TestPlanNode:
    def test_label(self):
        assert PlanNode("Seq Scan", relation="orders").label == "Seq Scan on orders"
        assert PlanNode("Hash Join").label == "Hash Join"

    def test_frozen(self):
        node = PlanNode("Seq Scan")
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.node_type = "Index Scan"

    def test_attributes_read_only(self):
        node = PlanNode("Sort", attributes={"sortMethod": "quicksort"})
        with pytest.raises(TypeError):
            node.attributes["sortMethod"] = "external merge"

    def test_attributes_copied(self):
        source = {"sortMethod": "quicksort"}
        node = PlanNode("Sort", attributes=source)
        source["sortMethod"] = "external merge"
        assert node.attribute("sortMethod") == "quicksort"

    def test_children_tuple(self):
        node = PlanNode("Append", children=[PlanNode("Result")])
        assert isinstance(node.children, tuple)

    def test_walk_preorder(self):
        tree = PlanNode("a", children=(
            PlanNode("b", children=(PlanNode("d"), PlanNode("e"))),
            PlanNode("c", children=(PlanNode("f"),)),
        ))
        assert [n.node_type for n in tree.walk()] == ["a", "b", "d", "e", "c", "f"]

    def test_walk_deep_tree(self):
        node = PlanNode("leaf")
        for _ in range(5000):
            node = PlanNode("Nested Loop", children=(node,))
        assert sum(1 for _ in node.walk()) == 5001

    def test_to_dict_deep_tree(self):
        node = PlanNode("leaf")
        for _ in range(5000):
            node = PlanNode("Nested Loop", children=(node,))

        data = node.to_dict()
        depth = 0
        while "children" in data:
            assert data["nodeType"] == "Nested Loop"
            data = data["children"][0]
            depth += 1
        assert depth == 5000
        assert data == {"nodeType": "leaf"}

    def test_to_dict_children_order(self):
        node = PlanNode("Append", children=(
            PlanNode("Hash", children=(PlanNode("Seq Scan", relation="a"),)),
            PlanNode("Seq Scan", relation="b"),
        ))
        assert node.to_dict()["children"] == [
            {"nodeType": "Hash", "children": [{"nodeType": "Seq Scan", "relation": "a"}]},
            {"nodeType": "Seq Scan", "relation": "b"},
        ]

    def test_to_dict(self):
        node = PlanNode(
            "Seq Scan",
            relation="orders",
            actual_rows=10,
            attributes={"filter": "(id > 5)"},
            children=(PlanNode("Result"),),
        )
        assert node.to_dict() == {
            "nodeType": "Seq Scan",
            "relation": "orders",
            "actualRows": 10,
            "filter": "(id > 5)",
            "children": [{"nodeType": "Result"}],
        }


class TestQueryPlan:
    def test_defaults(self):
        plan = QueryPlan()
        assert plan.execution_time == 0.0
        assert plan.plan.node_type == "Unknown"

    def test_iter_nodes(self):
        plan = QueryPlan(plan=PlanNode("a", children=(PlanNode("b"),)))
        assert [n.node_type for n in plan.iter_nodes()] == ["a", "b"]

    def test_to_dict_optional_fields(self):
        plan = QueryPlan(execution_time=1.5, planning_time=0.2, warnings=["w"], query="SELECT 1")
        assert plan.to_dict() == {
            "executionTime": 1.5,
            "planningTime": 0.2,
            "plan": {"nodeType": "Unknown"},
            "query": "SELECT 1",
            "warnings": ["w"],
        }


class TestIssueAndResult:
    def test_issue_to_dict_omits_missing(self):
        issue = Issue(IssueType.HIGH_PLANNING_TIME, "slow planning", Severity.MEDIUM)
        assert issue.to_dict() == {
            "type": "high_planning_time",
            "description": "slow planning",
            "severity": "medium",
        }

    def test_severity_counts(self):
        result = AnalysisResult(
            plan=QueryPlan(),
            plan_text="",
            issues=[
                Issue(IssueType.SEQUENTIAL_SCAN, "a", Severity.HIGH),
                Issue(IssueType.ESTIMATION_ERROR, "b", Severity.HIGH),
                Issue(IssueType.MISSING_PARALLELISM, "c", Severity.MEDIUM),
            ],
            health_score=50,
        )
        assert result.severity_counts == {"low": 0, "medium": 1, "high": 2, "critical": 0}
        assert len(result.issues_of("sequential_scan")) == 1
        assert isinstance(result.issues, tuple)
