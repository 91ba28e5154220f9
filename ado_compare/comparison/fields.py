"""Field comparison per work item type, cross-referenced with form layouts."""

import logging
from typing import Any, Sequence

from .models import (
    FieldComparison,
    FieldDifference,
    FieldInfo,
    LayoutControl,
    LayoutGroup,
    PropertyDifference,
    WorkItemTypeFields,
)
from .normalizer import NormalizedSnapshot, build_layout_index
from .utils import (
    FIELD_IGNORED_PROPERTIES,
    collect_type_names,
    comparable_properties,
    diff_properties,
    first_key,
    split_presence,
    values_differ,
)

logger = logging.getLogger(__name__)


def field_reference_name(field: dict[str, Any]) -> str:
    return first_key(field, "referenceName", "name", "id")


def field_display_name(field: dict[str, Any]) -> str:
    return first_key(field, "name", "referenceName", "id")


def _align_fields(
    type_name: str, snapshots: Sequence[NormalizedSnapshot]
) -> dict[str, dict[str, dict[str, Any]]]:
    """
    Map field display name -> {processId: raw field}.

    Within a process fields are first de-duplicated by reference name, then
    aligned across processes by display name, since the same logical field
    can carry a different reference name in each process.
    """
    field_map: dict[str, dict[str, dict[str, Any]]] = {}
    for snapshot in snapshots:
        by_ref: dict[str, dict[str, Any]] = {}
        for field in snapshot.fields_by_type.get(type_name) or []:
            by_ref[field_reference_name(field)] = field
        for field in by_ref.values():
            field_map.setdefault(field_display_name(field), {})[snapshot.process_id] = field
    return field_map


def _field_info(field: dict[str, Any], control: LayoutControl | None) -> FieldInfo:
    reference_name = field_reference_name(field)
    return FieldInfo(
        referenceName=reference_name,
        name=field_display_name(field),
        type=field.get("type") or "",
        required=field.get("required") or False,
        readOnly=field.get("readOnly") or False,
        defaultValue=field.get("defaultValue"),
        onLayout=control is not None,
        layoutVisible=control.visible if control else False,
        layoutGroupId=control.groupId if control else None,
        layoutGroupLabel=control.groupLabel if control else None,
        layoutControlType=control.controlType if control else None,
        layoutLabel=control.label if control else "",
    )


def _layout_differences(
    field_infos: dict[str, FieldInfo], present_in: Sequence[str]
) -> list[PropertyDifference]:
    """Compare form placement: onLayout always, layoutVisible only if every copy is on the form."""
    differences = []
    if len(present_in) < 2:
        return differences

    on_layout = {pid: field_infos[pid].onLayout for pid in present_in}
    if values_differ(on_layout):
        differences.append(PropertyDifference(property="onLayout", values=on_layout))

    if all(on_layout.values()):
        visible = {pid: field_infos[pid].layoutVisible for pid in present_in}
        if values_differ(visible):
            differences.append(PropertyDifference(property="layoutVisible", values=visible))

    return differences


def compare_type_fields(
    type_name: str, snapshots: Sequence[NormalizedSnapshot], process_ids: Sequence[str]
) -> WorkItemTypeFields:
    """
    Compare the fields of one work item type across processes.

    Args:
        type_name: Work item type display name
        snapshots: Normalized snapshots
        process_ids: Full ordered process id list

    Returns:
        WorkItemTypeFields: aligned fields, per-process info, differences and
        the eligible layout groups per process.
    """
    wit_ref_names = {}
    layout_indices: dict[str, dict[str, LayoutControl]] = {}
    layout_groups: dict[str, list[LayoutGroup]] = {}
    for snapshot in snapshots:
        ref = snapshot.work_item_type_ref(type_name)
        if ref:
            wit_ref_names[snapshot.process_id] = ref
        index, groups = build_layout_index(snapshot.layout_by_type.get(type_name))
        layout_indices[snapshot.process_id] = index
        layout_groups[snapshot.process_id] = groups

    field_map = _align_fields(type_name, snapshots)

    by_field: dict[str, dict[str, FieldInfo]] = {}
    differences = []
    for field_name, records in field_map.items():
        by_field[field_name] = {
            pid: _field_info(field, layout_indices[pid].get(field_reference_name(field)))
            for pid, field in records.items()
        }

        present_in, missing_from = split_presence(records, process_ids)
        properties = comparable_properties(
            (records[pid] for pid in present_in), FIELD_IGNORED_PROPERTIES
        )
        property_differences = diff_properties(records, present_in, properties)
        property_differences.extend(_layout_differences(by_field[field_name], present_in))

        if missing_from or property_differences:
            first_field = next(iter(records.values()))
            differences.append(
                FieldDifference(
                    fieldRefName=field_reference_name(first_field),
                    fieldName=field_name,
                    presentIn=present_in,
                    missingFrom=missing_from,
                    propertyDifferences=property_differences,
                )
            )

    return WorkItemTypeFields(
        all=list(field_map),
        differences=differences,
        byField=by_field,
        witRefNames=wit_ref_names,
        layoutGroups=layout_groups,
    )


def compare_fields(
    snapshots: Sequence[NormalizedSnapshot], process_ids: Sequence[str]
) -> FieldComparison:
    """Compare fields for every work item type that has field data in any process."""
    type_names = collect_type_names(snapshot.fields_by_type for snapshot in snapshots)
    by_work_item_type = {
        type_name: compare_type_fields(type_name, snapshots, process_ids) for type_name in type_names
    }

    logger.debug(
        f"Compared fields for {len(by_work_item_type)} work item types, "
        f"{sum(len(t.differences) for t in by_work_item_type.values())} differences"
    )
    return FieldComparison(byWorkItemType=by_work_item_type)
