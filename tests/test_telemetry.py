import pytest

from ado_compare.config import TelemetryConfig
from ado_compare.telemetry import TelemetryManager


def test_disabled_manager_traces_nothing():
    manager = TelemetryManager(TelemetryConfig(enabled=False))

    with manager.trace_operation("compare_processes", process_count=2) as span:
        assert span is None

    manager.shutdown()


def test_enabled_manager_yields_span_and_reraises():
    manager = TelemetryManager(TelemetryConfig(enabled=True, metrics_enabled=False))

    with manager.trace_operation("compare_processes", process_count=2) as span:
        assert span is not None

    with pytest.raises(ValueError):
        with manager.trace_operation("compare_processes"):
            raise ValueError("boom")
