"""State comparison per work item type."""

import logging
from typing import Any, Sequence

from .models import StateComparison, StateDifference, StateInfo, WorkItemTypeStates
from .normalizer import NormalizedSnapshot
from .utils import (
    STATE_IGNORED_PROPERTIES,
    collect_type_names,
    comparable_properties,
    diff_properties,
    first_key,
    split_presence,
)

logger = logging.getLogger(__name__)


def state_name(state: dict[str, Any]) -> str:
    return first_key(state, "name", "id")


def _state_info(state: dict[str, Any], name: str) -> StateInfo:
    return StateInfo(
        id=state.get("id") or "",
        name=name,
        color=state.get("color") or "",
        stateCategory=state.get("stateCategory") or "",
        order=state.get("order"),
        customizationType=state.get("customizationType") or "",
    )


def compare_type_states(
    type_name: str, snapshots: Sequence[NormalizedSnapshot], process_ids: Sequence[str]
) -> WorkItemTypeStates:
    """Compare the states of one work item type, aligned by state name."""
    wit_ref_names = {}
    state_map: dict[str, dict[str, dict[str, Any]]] = {}
    for snapshot in snapshots:
        ref = snapshot.work_item_type_ref(type_name)
        if ref:
            wit_ref_names[snapshot.process_id] = ref
        for state in snapshot.states_by_type.get(type_name) or []:
            state_map.setdefault(state_name(state), {})[snapshot.process_id] = state

    by_state = {
        name: {pid: _state_info(state, name) for pid, state in records.items()}
        for name, records in state_map.items()
    }

    differences = []
    for name, records in state_map.items():
        present_in, missing_from = split_presence(records, process_ids)
        properties = comparable_properties(
            (records[pid] for pid in present_in), STATE_IGNORED_PROPERTIES
        )
        property_differences = diff_properties(records, present_in, properties)

        if missing_from or property_differences:
            differences.append(
                StateDifference(
                    stateName=name,
                    presentIn=present_in,
                    missingFrom=missing_from,
                    propertyDifferences=property_differences,
                )
            )

    return WorkItemTypeStates(
        all=list(state_map),
        differences=differences,
        byState=by_state,
        witRefNames=wit_ref_names,
    )


def compare_states(
    snapshots: Sequence[NormalizedSnapshot], process_ids: Sequence[str]
) -> StateComparison:
    """Compare states for every work item type that has state data in any process."""
    type_names = collect_type_names(snapshot.states_by_type for snapshot in snapshots)
    by_work_item_type = {
        type_name: compare_type_states(type_name, snapshots, process_ids) for type_name in type_names
    }

    logger.debug(f"Compared states for {len(by_work_item_type)} work item types")
    return StateComparison(byWorkItemType=by_work_item_type)
