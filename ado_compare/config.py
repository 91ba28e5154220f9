"""Configuration management for ado-process-compare with structured settings and validation."""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .errors import AdoCompareConfigurationError

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()


@dataclass
class CacheConfig:
    """Configuration for the in-memory snapshot cache."""

    ttl_seconds: int = 300
    max_size: int = 100

    def __post_init__(self):
        """Validate cache configuration values."""
        if self.ttl_seconds < 0:
            raise AdoCompareConfigurationError(
                "ttl_seconds must be non-negative", context={"ttl_seconds": self.ttl_seconds}
            )

        if self.max_size <= 0:
            raise AdoCompareConfigurationError(
                "max_size must be positive", context={"max_size": self.max_size}
            )


@dataclass
class TelemetryConfig:
    """Configuration for telemetry and observability."""

    enabled: bool = True
    service_name: str = "ado-process-compare"
    service_version: str = "0.1.0"
    trace_sampling_rate: float = 1.0
    metrics_enabled: bool = True

    def __post_init__(self):
        """Validate telemetry configuration values."""
        if not 0.0 <= self.trace_sampling_rate <= 1.0:
            raise AdoCompareConfigurationError(
                "trace_sampling_rate must be between 0.0 and 1.0",
                context={"trace_sampling_rate": self.trace_sampling_rate},
            )


@dataclass
class AdoCompareConfig:
    """
    Main configuration class for ado-process-compare.

    Values passed explicitly win; anything left unset is read from the
    environment (including a ``.env`` file).
    """

    snapshot_dir: str | None = None

    cache: CacheConfig = field(default_factory=CacheConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)

    def __post_init__(self):
        """Load configuration from environment variables and validate."""
        self.snapshot_dir = self.snapshot_dir or os.getenv("ADO_COMPARE_SNAPSHOT_DIR", "temp")

        # Override cache config from environment
        self.cache.ttl_seconds = int(os.getenv("ADO_COMPARE_CACHE_TTL", self.cache.ttl_seconds))
        self.cache.max_size = int(os.getenv("ADO_COMPARE_CACHE_MAX_SIZE", self.cache.max_size))

        # Override telemetry config from environment
        self.telemetry.enabled = os.getenv("ADO_COMPARE_TELEMETRY_ENABLED", "true").lower() == "true"
        self.telemetry.service_name = os.getenv(
            "ADO_COMPARE_TELEMETRY_SERVICE_NAME", self.telemetry.service_name
        )
        self.telemetry.service_version = os.getenv(
            "ADO_COMPARE_TELEMETRY_SERVICE_VERSION", self.telemetry.service_version
        )
        self.telemetry.trace_sampling_rate = float(
            os.getenv("ADO_COMPARE_TELEMETRY_TRACE_SAMPLING_RATE", self.telemetry.trace_sampling_rate)
        )
        self.telemetry.metrics_enabled = (
            os.getenv("ADO_COMPARE_TELEMETRY_METRICS_ENABLED", "true").lower() == "true"
        )

        self._validate()

        logger.info(
            f"Configuration loaded: snapshot_dir={self.snapshot_dir}, "
            f"cache_ttl={self.cache.ttl_seconds}, "
            f"telemetry_enabled={self.telemetry.enabled}"
        )

    def _validate(self):
        """Validate the complete configuration."""
        # Sub-configs validate themselves on construction; env overrides bypass that.
        self.cache.__post_init__()
        self.telemetry.__post_init__()

        if not self.snapshot_dir:
            raise AdoCompareConfigurationError(
                "snapshot_dir must not be empty", context={"snapshot_dir": self.snapshot_dir}
            )

    @classmethod
    def from_env(cls, **overrides) -> "AdoCompareConfig":
        """
        Create configuration from environment variables with optional overrides.

        Args:
            **overrides: Configuration values to override

        Returns:
            AdoCompareConfig: Configured instance
        """
        return cls(**overrides)
