"""Pytest configuration and fixtures for qt-plan tests."""

import pytest

from qt_plan.analyzer import PlanAnalyzer


# =============================================================================
# ANALYZER FIXTURES
# =============================================================================

@pytest.fixture
def analyzer() -> PlanAnalyzer:
    """Analyzer with the default rule battery and thresholds."""
    return PlanAnalyzer()


# =============================================================================
# RAW PLAN BUILDERS
# =============================================================================

@pytest.fixture
def make_node():
    """Build a raw PostgreSQL EXPLAIN JSON node.

    Usage:
        make_node("Seq Scan", relation="orders", actual_rows=5000)
    """
    keys = {
        "relation": "Relation Name",
        "startup_cost": "Startup Cost",
        "total_cost": "Total Cost",
        "plan_rows": "Plan Rows",
        "plan_width": "Plan Width",
        "actual_startup_time": "Actual Startup Time",
        "actual_total_time": "Actual Total Time",
        "actual_rows": "Actual Rows",
        "actual_loops": "Actual Loops",
    }

    def _make(node_type, children=None, extra=None, **fields):
        node = {"Node Type": node_type}
        for name, value in fields.items():
            node[keys[name]] = value
        if extra:
            node.update(extra)
        if children:
            node["Plans"] = list(children)
        return node

    return _make


@pytest.fixture
def make_plan():
    """Wrap a raw root node the way EXPLAIN (FORMAT JSON) does."""

    def _make(root, execution_time=None, planning_time=None, **top_level):
        top = {"Plan": root}
        if planning_time is not None:
            top["Planning Time"] = planning_time
        if execution_time is not None:
            top["Execution Time"] = execution_time
        top.update(top_level)
        return [top]

    return _make


# =============================================================================
# SAMPLE PLANS
# =============================================================================

@pytest.fixture
def healthy_plan(make_node, make_plan):
    """Small indexed lookup - should score 100."""
    root = make_node(
        "Index Scan",
        relation="users",
        startup_cost=0.29,
        total_cost=8.31,
        plan_rows=1,
        plan_width=72,
        actual_startup_time=0.012,
        actual_total_time=0.013,
        actual_rows=1,
        actual_loops=1,
        extra={"Index Name": "users_pkey", "Index Cond": "(id = 42)"},
    )
    return make_plan(root, execution_time=0.05, planning_time=0.02)


@pytest.fixture
def seq_scan_plan(make_node, make_plan):
    """Large sequential scan with a bad estimate."""
    root = make_node(
        "Seq Scan",
        relation="orders",
        plan_rows=100,
        actual_rows=50000,
        actual_total_time=250,
    )
    return make_plan(root)


@pytest.fixture
def join_plan(make_node, make_plan):
    """Hash Join over two scans, with a spilling sort on top."""
    orders = make_node(
        "Seq Scan", relation="orders", plan_rows=60000, actual_rows=50000, actual_total_time=120
    )
    customers = make_node(
        "Seq Scan", relation="customers", plan_rows=2000, actual_rows=2000, actual_total_time=15
    )
    hash_node = make_node("Hash", plan_rows=2000, actual_rows=2000, children=[customers])
    join = make_node(
        "Hash Join",
        plan_rows=45000,
        actual_rows=50000,
        actual_total_time=700,
        children=[orders, hash_node],
    )
    sort = make_node(
        "Sort",
        plan_rows=45000,
        actual_rows=50000,
        actual_total_time=900,
        children=[join],
        extra={"Sort Key": ["o.created_at"], "Sort Method": "external merge", "Sort Space Type": "Disk"},
    )
    return make_plan(sort, execution_time=950, planning_time=1.2)
