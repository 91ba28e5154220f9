"""Multi-process inherited process configuration comparison."""

from .engine import compare, compare_summary
from .models import ComparisonResult, ComparisonSummaryResult, ProcessInput, ProcessSnapshot
from .normalizer import NormalizedSnapshot, normalize_snapshot

__all__ = [
    "compare",
    "compare_summary",
    "ComparisonResult",
    "ComparisonSummaryResult",
    "ProcessInput",
    "ProcessSnapshot",
    "NormalizedSnapshot",
    "normalize_snapshot",
]
