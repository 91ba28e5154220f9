"""Test utilities for process comparison testing."""

from .telemetry import SpanAnalyzer, analyze_spans, clear_spans, telemetry_setup

__all__ = ["SpanAnalyzer", "telemetry_setup", "analyze_spans", "clear_spans"]
