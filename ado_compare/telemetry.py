"""Telemetry and observability for ado-process-compare."""

import logging
import os
import time
from contextlib import contextmanager
from typing import Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes

from .config import TelemetryConfig

logger = logging.getLogger(__name__)


class TelemetryManager:
    """
    Manages telemetry for comparison operations.

    Sets up OpenTelemetry tracer and meter providers (with OTLP exporters when
    the standard endpoint variables are set) and offers a context manager for
    tracing service operations such as snapshot loading and comparison.
    """

    def __init__(self, config: TelemetryConfig):
        """
        Initialize telemetry manager.

        Args:
            config: Telemetry configuration
        """
        self.config = config
        self.tracer: Optional[trace.Tracer] = None
        self.meter: Optional[metrics.Meter] = None
        self._initialized = False

        self._operation_counter = None
        self._operation_duration = None
        self._error_counter = None

        if config.enabled:
            self._setup_telemetry()

    def _setup_telemetry(self):
        """Set up OpenTelemetry providers and exporters."""
        try:
            resource = Resource(attributes={
                ResourceAttributes.SERVICE_NAME: self.config.service_name,
                ResourceAttributes.SERVICE_VERSION: self.config.service_version,
                ResourceAttributes.PROCESS_PID: os.getpid(),
            })

            self._setup_tracing(resource)

            if self.config.metrics_enabled:
                self._setup_metrics(resource)

            self._initialized = True
            logger.info("Telemetry initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize telemetry: {e}")
            # Don't fail the application if telemetry setup fails
            self.config.enabled = False

    def _setup_tracing(self, resource: Resource):
        """Set up distributed tracing."""
        tracer_provider = TracerProvider(
            resource=resource,
            sampler=TraceIdRatioBased(self.config.trace_sampling_rate)
        )

        otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
        if otlp_endpoint:
            otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
            tracer_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

        trace.set_tracer_provider(tracer_provider)
        self.tracer = trace.get_tracer(__name__)

    def _setup_metrics(self, resource: Resource):
        """Set up metrics collection."""
        otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_METRICS_ENDPOINT")
        if otlp_endpoint:
            metric_exporter = OTLPMetricExporter(endpoint=otlp_endpoint)
            metric_reader = PeriodicExportingMetricReader(
                exporter=metric_exporter,
                export_interval_millis=30000  # 30 seconds
            )

            meter_provider = MeterProvider(
                resource=resource,
                metric_readers=[metric_reader]
            )

            metrics.set_meter_provider(meter_provider)

        self.meter = metrics.get_meter(__name__)
        self._create_metrics()

    def _create_metrics(self):
        """Create service-level metrics."""
        if not self.meter:
            return

        self._operation_counter = self.meter.create_counter(
            name="ado_compare_operations_total",
            description="Total number of service operations",
            unit="1"
        )

        self._operation_duration = self.meter.create_histogram(
            name="ado_compare_operation_duration_seconds",
            description="Duration of service operations in seconds",
            unit="s"
        )

        self._error_counter = self.meter.create_counter(
            name="ado_compare_errors_total",
            description="Total number of errors",
            unit="1"
        )

    @contextmanager
    def trace_operation(self, operation: str, **attributes):
        """
        Context manager for tracing a service operation.

        Args:
            operation: Name of the operation
            **attributes: Additional span attributes
        """
        if not self._initialized or not self.tracer:
            yield None
            return

        with self.tracer.start_as_current_span(f"ado_compare_{operation}") as span:
            span.set_attribute("ado_compare.operation", operation)
            for key, value in attributes.items():
                span.set_attribute(key, value)

            start_time = time.time()

            try:
                yield span

                if self._operation_counter:
                    self._operation_counter.add(1, {
                        "operation": operation,
                        "status": "success"
                    })

            except Exception as e:
                span.record_exception(e)
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))

                if self._error_counter:
                    self._error_counter.add(1, {
                        "operation": operation,
                        "error_type": type(e).__name__
                    })

                if self._operation_counter:
                    self._operation_counter.add(1, {
                        "operation": operation,
                        "status": "error"
                    })

                raise

            finally:
                duration = time.time() - start_time
                if self._operation_duration:
                    self._operation_duration.record(duration, {
                        "operation": operation
                    })

    def shutdown(self):
        """Shutdown telemetry providers."""
        if not self._initialized:
            return

        try:
            provider = trace.get_tracer_provider()
            if hasattr(provider, "shutdown"):
                provider.shutdown()

            provider = metrics.get_meter_provider()
            if hasattr(provider, "shutdown"):
                provider.shutdown()

            logger.info("Telemetry shutdown complete")

        except Exception as e:
            logger.error(f"Error during telemetry shutdown: {e}")


# Global telemetry manager instance
_telemetry_manager: Optional[TelemetryManager] = None


def initialize_telemetry(config: TelemetryConfig) -> TelemetryManager:
    """
    Initialize global telemetry manager.

    Args:
        config: Telemetry configuration

    Returns:
        TelemetryManager: Initialized telemetry manager
    """
    global _telemetry_manager
    _telemetry_manager = TelemetryManager(config)
    return _telemetry_manager


def get_telemetry_manager() -> Optional[TelemetryManager]:
    """
    Get the global telemetry manager.

    Returns:
        Optional[TelemetryManager]: The telemetry manager if initialized
    """
    return _telemetry_manager


def shutdown_telemetry():
    """Shutdown the global telemetry manager."""
    global _telemetry_manager
    if _telemetry_manager:
        _telemetry_manager.shutdown()
        _telemetry_manager = None
