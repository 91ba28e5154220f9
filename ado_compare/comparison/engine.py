"""
Multi-process comparison entry points.

``compare`` normalizes every snapshot, runs the five independent comparison
passes and rolls their difference records up into a summary. It is a pure,
synchronous computation: snapshots must be fully resolved by the caller.
"""

import logging
from typing import Any, Mapping, Sequence

from opentelemetry import metrics, trace
from pydantic import ValidationError

from ado_compare.errors import ComparisonPreconditionError, SnapshotFormatError

from .behaviors import compare_behaviors, compare_work_item_type_behaviors
from .fields import compare_fields
from .models import (
    Comparison,
    ComparisonResult,
    ComparisonSummary,
    ComparisonSummaryResult,
    ProcessInput,
    ProcessSummary,
)
from .normalizer import NormalizedSnapshot, normalize_snapshot
from .states import compare_states
from .utils import first_key
from .work_item_types import compare_work_item_types

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)
meter = metrics.get_meter(__name__)

_comparison_counter = meter.create_counter(
    name="ado_compare_comparisons_total",
    description="Number of process comparisons run",
    unit="1",
)
_difference_counter = meter.create_counter(
    name="ado_compare_differences_total",
    description="Number of difference records produced, by dimension",
    unit="1",
)


def _coerce_inputs(snapshots: Sequence[ProcessInput | Mapping[str, Any]]) -> list[ProcessInput]:
    inputs = []
    for entry in snapshots:
        if isinstance(entry, ProcessInput):
            inputs.append(entry)
            continue
        try:
            inputs.append(ProcessInput.model_validate(entry))
        except ValidationError as e:
            raise SnapshotFormatError(
                f"Invalid process snapshot: {e}",
                context={"processId": entry.get("processId") if isinstance(entry, Mapping) else None},
                original_exception=e,
            ) from e
    return inputs


def _check_preconditions(inputs: Sequence[ProcessInput], process_ids: Sequence[str]) -> None:
    if len(inputs) < 2 or len(process_ids) < 2:
        raise ComparisonPreconditionError(
            context={"snapshot_count": len(inputs), "process_ids": list(process_ids)}
        )

    if len(set(process_ids)) != len(process_ids):
        raise ComparisonPreconditionError(
            "Process ids must be unique within one comparison",
            context={"process_ids": list(process_ids)},
        )

    snapshot_ids = [entry.processId for entry in inputs]
    if len(set(snapshot_ids)) != len(snapshot_ids) or set(snapshot_ids) != set(process_ids):
        raise ComparisonPreconditionError(
            "Every process id must have exactly one snapshot",
            context={"process_ids": list(process_ids), "snapshot_ids": snapshot_ids},
        )


def _process_summary(snapshot: NormalizedSnapshot) -> ProcessSummary:
    process = snapshot.snapshot.process or {}
    return ProcessSummary(
        connectionId=snapshot.connection_id,
        processId=snapshot.process_id,
        processName=first_key(process, "name") or snapshot.process_id,
        orgUrl=process.get("orgUrl") or snapshot.snapshot.orgUrl,
    )


def compare(
    snapshots: Sequence[ProcessInput | Mapping[str, Any]],
    process_ids: Sequence[str] | None = None,
) -> ComparisonResult:
    """
    Compare two or more process snapshots.

    Args:
        snapshots: ``{processId, data, connectionId?}`` entries, one per process
        process_ids: Ordered process id list; defaults to the snapshot order

    Returns:
        ComparisonResult: processes plus the five comparison sections and summary

    Raises:
        ComparisonPreconditionError: fewer than two processes, or ids that do
            not match the snapshots one-to-one
        SnapshotFormatError: a snapshot entry does not have the expected shape
    """
    inputs = _coerce_inputs(snapshots)
    if process_ids is None:
        process_ids = [entry.processId for entry in inputs]
    process_ids = list(process_ids)
    _check_preconditions(inputs, process_ids)
    inputs.sort(key=lambda entry: process_ids.index(entry.processId))

    with tracer.start_as_current_span("process_comparison") as span:
        span.set_attribute("comparison.process_count", len(process_ids))

        normalized = [
            normalize_snapshot(entry.processId, entry.data, entry.connectionId) for entry in inputs
        ]

        work_item_types = compare_work_item_types(normalized, process_ids)
        fields = compare_fields(normalized, process_ids)
        states = compare_states(normalized, process_ids)
        behaviors = compare_behaviors(normalized, process_ids)
        bindings = compare_work_item_type_behaviors(normalized, process_ids)

        wit_differences = len(work_item_types.differences)
        field_differences = sum(len(t.differences) for t in fields.byWorkItemType.values())
        state_differences = sum(len(t.differences) for t in states.byWorkItemType.values())
        behavior_differences = len(behaviors.differences)
        binding_differences = sum(len(t.differences) for t in bindings.byWorkItemType.values())

        summary = ComparisonSummary(
            totalDifferences=(
                wit_differences
                + field_differences
                + state_differences
                + behavior_differences
                + binding_differences
            ),
            witDifferences=wit_differences,
            fieldDifferences=field_differences,
            stateDifferences=state_differences,
            behaviorDifferences=behavior_differences,
            witBehaviorDifferences=binding_differences,
        )

        span.set_attribute("comparison.total_differences", summary.totalDifferences)
        _comparison_counter.add(1, {"process_count": len(process_ids)})
        for dimension, count in (
            ("workItemTypes", wit_differences),
            ("fields", field_differences),
            ("states", state_differences),
            ("behaviors", behavior_differences),
            ("workItemTypeBehaviors", binding_differences),
        ):
            _difference_counter.add(count, {"dimension": dimension})

        logger.info(
            f"Compared {len(process_ids)} processes: {summary.totalDifferences} differences "
            f"(types={wit_differences}, fields={field_differences}, states={state_differences}, "
            f"behaviors={behavior_differences}, bindings={binding_differences})"
        )

        return ComparisonResult(
            processes=[_process_summary(snapshot) for snapshot in normalized],
            comparison=Comparison(
                workItemTypes=work_item_types,
                fields=fields,
                states=states,
                behaviors=behaviors,
                workItemTypeBehaviors=bindings,
                summary=summary,
            ),
        )


def compare_summary(
    snapshots: Sequence[ProcessInput | Mapping[str, Any]],
    process_ids: Sequence[str] | None = None,
) -> ComparisonSummaryResult:
    """Run a full comparison and keep only the processes and summary counts."""
    result = compare(snapshots, process_ids)
    return ComparisonSummaryResult(processes=result.processes, summary=result.comparison.summary)
