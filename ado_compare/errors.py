from typing import Any


class AdoCompareError(Exception):
    """Base exception class for comparison errors with structured error information."""

    def __init__(
        self,
        message: str,
        error_code: str,
        context: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        """
        Initialize structured comparison error.

        Args:
            message: Human-readable error message
            error_code: Structured error code for programmatic handling
            context: Additional context information about the error
            original_exception: The original exception that caused this error
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}
        self.original_exception = original_exception


class ComparisonPreconditionError(AdoCompareError):
    """Raised before any diffing when the comparison input is unusable."""

    def __init__(
        self,
        message: str = "At least two processes are required for comparison",
        context: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            error_code="COMPARE_PRECONDITION",
            context=context,
            original_exception=original_exception,
        )


class SnapshotNotFoundError(AdoCompareError):
    """Exception for process snapshots that have not been pulled yet."""

    def __init__(
        self,
        missing: list[dict[str, str]],
        context: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        descriptions = "; ".join(
            f'connectionId="{m["connectionId"]}", processId="{m["processId"]}"' for m in missing
        )
        context = context or {}
        context["missing"] = missing

        super().__init__(
            message=f"The following processes need to be pulled first: {descriptions}",
            error_code="SNAPSHOT_NOT_FOUND",
            context=context,
            original_exception=original_exception,
        )
        self.missing = missing


class SnapshotFormatError(AdoCompareError):
    """Exception for stored snapshots that cannot be parsed or validated."""

    def __init__(
        self,
        message: str = "Snapshot data is invalid",
        context: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            error_code="SNAPSHOT_INVALID",
            context=context,
            original_exception=original_exception,
        )


class AdoCompareConfigurationError(AdoCompareError):
    """Exception for configuration-related errors."""

    def __init__(
        self,
        message: str = "Configuration error",
        context: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            error_code="CONFIG_ERROR",
            context=context,
            original_exception=original_exception,
        )
