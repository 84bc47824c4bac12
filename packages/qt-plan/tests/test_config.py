"""Tests for configuration module."""

import pytest

from qt_plan.config import Settings, get_settings
from qt_plan.thresholds import DEFAULT_THRESHOLDS, Thresholds


def test_settings_defaults():
    """Test that settings mirror the built-in thresholds."""
    settings = Settings()
    assert settings.seq_scan_min_rows == 1000
    assert settings.slow_query_ms == 1000.0
    assert settings.deduction_critical == 40
    assert settings.uses_default_thresholds is True
    assert settings.thresholds() == DEFAULT_THRESHOLDS


def test_env_override(monkeypatch):
    """Test QT_PLAN_* environment variables override thresholds."""
    monkeypatch.setenv("QT_PLAN_SEQ_SCAN_MIN_ROWS", "5000")
    monkeypatch.setenv("QT_PLAN_DEDUCTION_HIGH", "25")
    settings = Settings()
    thresholds = settings.thresholds()
    assert thresholds.seq_scan_min_rows == 5000
    assert thresholds.deduction_for("high") == 25
    assert settings.uses_default_thresholds is False


def test_get_settings_cached():
    """Test get_settings returns a cached instance."""
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()


def test_thresholds_with_overrides():
    """Test Thresholds.with_overrides ignores None values."""
    t = Thresholds().with_overrides(join_min_rows=50, slow_query_ms=None)
    assert t.join_min_rows == 50
    assert t.slow_query_ms == DEFAULT_THRESHOLDS.slow_query_ms


def test_deduction_for_unknown_severity():
    """Test unknown severity labels deduct nothing."""
    assert Thresholds().deduction_for("info") == 0


def test_severity_deductions_read_only():
    """Test the shared defaults cannot be mutated through a Thresholds value."""
    with pytest.raises(TypeError):
        DEFAULT_THRESHOLDS.severity_deductions["high"] = 0
    assert DEFAULT_THRESHOLDS.deduction_for("high") == 20


def test_severity_deductions_copied():
    """Test a Thresholds value does not alias the caller's mapping."""
    deductions = {"low": 1, "medium": 2, "high": 3, "critical": 4}
    t = Thresholds(severity_deductions=deductions)
    deductions["high"] = 99
    assert t.deduction_for("high") == 3


def test_thresholds_hashable():
    """Test Thresholds can be hashed and compared."""
    assert hash(Thresholds()) == hash(DEFAULT_THRESHOLDS)
    assert Thresholds() == DEFAULT_THRESHOLDS
    assert len({Thresholds(), DEFAULT_THRESHOLDS}) == 1


def test_settings_thresholds_start_from_defaults(monkeypatch):
    """Test settings only replace what the environment overrides."""
    monkeypatch.setenv("QT_PLAN_SLOW_QUERY_MS", "2500")
    thresholds = Settings().thresholds()
    assert thresholds == DEFAULT_THRESHOLDS.with_overrides(slow_query_ms=2500.0)
    assert thresholds.severity_deductions == DEFAULT_THRESHOLDS.severity_deductions
