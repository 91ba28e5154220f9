"""
Snapshot normalization.

Pulled snapshots nest fields, states, behavior bindings and layouts inside
each work item type record. The comparators work on per-type indices keyed by
the type's display name instead, so each snapshot is reshaped once into a
NormalizedSnapshot before any comparison runs.

The caller's snapshot is never modified: the derived maps are new dicts, and
the entity records they hold are shared read-only with the input. This keeps
cached snapshots safe to reuse across concurrent comparisons.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from .models import LayoutControl, LayoutGroup, ProcessSnapshot
from .utils import NON_FIELD_PAGE_TYPES, first_key, work_item_type_name, work_item_type_ref

logger = logging.getLogger(__name__)


@dataclass
class NormalizedSnapshot:
    """A process snapshot plus its per-work-item-type indices."""

    process_id: str
    snapshot: ProcessSnapshot
    connection_id: str | None = None
    fields_by_type: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    states_by_type: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    bindings_by_type: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    layout_by_type: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def work_item_types(self) -> list[dict[str, Any]]:
        return self.snapshot.workItemTypes

    @property
    def behaviors(self) -> list[dict[str, Any]]:
        return self.snapshot.behaviors

    def find_work_item_type(self, name: str) -> dict[str, Any] | None:
        """First work item type whose display name is ``name``."""
        for wit in self.work_item_types:
            if work_item_type_name(wit) == name:
                return wit
        return None

    def work_item_type_ref(self, name: str) -> str | None:
        wit = self.find_work_item_type(name)
        return work_item_type_ref(wit) if wit is not None else None

    def to_snapshot(self) -> ProcessSnapshot:
        """Return a copy of the snapshot with the derived maps as top-level maps."""
        return self.snapshot.model_copy(
            update={
                "fields": dict(self.fields_by_type),
                "states": dict(self.states_by_type),
                "workItemTypeBehaviors": dict(self.bindings_by_type),
                "layouts": dict(self.layout_by_type),
            }
        )


def _first_writer(index: dict[str, Any], name: str, value: Any, keep_empty: bool = False) -> None:
    # Types sharing a display name merge under one key; the first
    # non-empty value seen wins and is never overwritten. An empty layout
    # tree still counts as a layout.
    present = value is not None if keep_empty else bool(value)
    if present and name not in index:
        index[name] = value


def normalize_snapshot(
    process_id: str, snapshot: ProcessSnapshot, connection_id: str | None = None
) -> NormalizedSnapshot:
    """
    Build the per-work-item-type indices for one snapshot.

    Pre-populated top-level maps on the snapshot take precedence. Otherwise
    each index entry is taken from the first work item type with that display
    name that carries a non-empty collection. Missing collections are simply
    absent from the index.

    Args:
        process_id: Process id the snapshot is compared under
        snapshot: The pulled snapshot (not modified)
        connection_id: Optional connection the snapshot came from

    Returns:
        NormalizedSnapshot: Snapshot with derived indices
    """
    normalized = NormalizedSnapshot(
        process_id=process_id,
        snapshot=snapshot,
        connection_id=connection_id or snapshot.connectionId,
        fields_by_type=dict(snapshot.fields or {}),
        states_by_type=dict(snapshot.states or {}),
        bindings_by_type=dict(snapshot.workItemTypeBehaviors or {}),
        layout_by_type=dict(snapshot.layouts or {}),
    )

    for wit in snapshot.workItemTypes:
        name = work_item_type_name(wit)
        _first_writer(normalized.fields_by_type, name, wit.get("fields"))
        _first_writer(normalized.states_by_type, name, wit.get("states"))
        _first_writer(normalized.bindings_by_type, name, wit.get("behaviors"))
        _first_writer(normalized.layout_by_type, name, wit.get("layout"), keep_empty=True)

    logger.debug(
        f"Normalized process '{process_id}': {len(snapshot.workItemTypes)} work item types, "
        f"{len(normalized.fields_by_type)} with fields, {len(normalized.states_by_type)} with states"
    )
    return normalized


def build_layout_index(
    layout: dict[str, Any] | None,
) -> tuple[dict[str, LayoutControl], list[LayoutGroup]]:
    """
    Flatten a layout tree into a field placement index.

    Pages with no field controls (history, links, attachments) and
    contribution pages/groups are skipped. Groups holding non-field controls
    are still listed as placement targets.

    Args:
        layout: Layout tree (pages -> sections -> groups -> controls)

    Returns:
        (index, groups): control placement keyed by field reference name, and
        every eligible group in layout order.
    """
    index: dict[str, LayoutControl] = {}
    groups: list[LayoutGroup] = []
    if not layout:
        return index, groups

    for page in layout.get("pages") or []:
        if page.get("isContribution") or page.get("pageType") in NON_FIELD_PAGE_TYPES:
            continue
        for section in page.get("sections") or []:
            for group in section.get("groups") or []:
                group_id = first_key(group, "id")
                if not group_id or group.get("isContribution"):
                    continue
                group_label = first_key(group, "label") or group_id
                groups.append(LayoutGroup(groupId=group_id, label=group_label))

                for control in group.get("controls") or []:
                    control_id = first_key(control, "id")
                    if not control_id:
                        continue
                    index[control_id] = LayoutControl(
                        groupId=group_id,
                        groupLabel=group_label,
                        visible=control.get("visible") is not False,
                        controlType=control.get("controlType"),
                        label=first_key(control, "label"),
                    )

    return index, groups
