"""Process behavior and work-item-type behavior binding comparison."""

import logging
from typing import Any, Sequence

from .models import (
    BehaviorComparison,
    BehaviorDifference,
    BindingComparison,
    BindingDifference,
    WorkItemTypeBindings,
)
from .normalizer import NormalizedSnapshot
from .utils import (
    BINDING_COMPARED_PROPERTIES,
    collect_type_names,
    diff_properties,
    first_key,
    split_presence,
)

logger = logging.getLogger(__name__)


def behavior_id(behavior: dict[str, Any]) -> str:
    return first_key(behavior, "id", "referenceName", "name")


def binding_behavior_id(binding: dict[str, Any]) -> str | None:
    """Behavior id of a binding; the pulled API nests it under ``behavior``."""
    nested = binding.get("behavior") or {}
    return first_key(nested, "id") or first_key(binding, "behaviorId", "id") or None


def compare_behaviors(
    snapshots: Sequence[NormalizedSnapshot], process_ids: Sequence[str]
) -> BehaviorComparison:
    """
    Align process-level behaviors by identifier.

    Behavior ids are well-known constants shared across processes, so they
    are the alignment key rather than the display name. Only presence is
    compared.
    """
    behavior_map: dict[str, dict[str, dict[str, Any]]] = {}
    for snapshot in snapshots:
        for behavior in snapshot.behaviors:
            behavior_map.setdefault(behavior_id(behavior), {})[snapshot.process_id] = behavior

    names = {
        bid: first_key(next(iter(records.values())), "name") or bid
        for bid, records in behavior_map.items()
    }

    differences = []
    for bid, records in behavior_map.items():
        present_in, missing_from = split_presence(records, process_ids)
        if missing_from:
            differences.append(
                BehaviorDifference(
                    behaviorId=bid,
                    behaviorName=names[bid],
                    presentIn=present_in,
                    missingFrom=missing_from,
                )
            )

    return BehaviorComparison(all=list(names.values()), differences=differences)


def compare_type_bindings(
    type_name: str, snapshots: Sequence[NormalizedSnapshot], process_ids: Sequence[str]
) -> WorkItemTypeBindings:
    """Compare the behavior bindings of one work item type, aligned by behavior id."""
    binding_map: dict[str, dict[str, dict[str, Any]]] = {}
    for snapshot in snapshots:
        for binding in snapshot.bindings_by_type.get(type_name) or []:
            bid = binding_behavior_id(binding)
            if not bid:
                continue
            binding_map.setdefault(bid, {})[snapshot.process_id] = binding

    differences = []
    for bid, records in binding_map.items():
        present_in, missing_from = split_presence(records, process_ids)
        property_differences = diff_properties(records, present_in, BINDING_COMPARED_PROPERTIES)

        if missing_from or property_differences:
            differences.append(
                BindingDifference(
                    behaviorId=bid,
                    presentIn=present_in,
                    missingFrom=missing_from,
                    propertyDifferences=property_differences,
                )
            )

    return WorkItemTypeBindings(differences=differences)


def compare_work_item_type_behaviors(
    snapshots: Sequence[NormalizedSnapshot], process_ids: Sequence[str]
) -> BindingComparison:
    """Compare behavior bindings for every work item type that has any."""
    type_names = collect_type_names(snapshot.bindings_by_type for snapshot in snapshots)
    by_work_item_type = {
        type_name: compare_type_bindings(type_name, snapshots, process_ids)
        for type_name in type_names
    }

    logger.debug(f"Compared behavior bindings for {len(by_work_item_type)} work item types")
    return BindingComparison(byWorkItemType=by_work_item_type)
