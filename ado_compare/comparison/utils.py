"""Alignment and property-comparison primitives shared by the comparators."""

import json
from typing import Any, Iterable, Mapping, Sequence

from .models import PropertyDifference

# Properties that vary per process by construction (process-specific URLs,
# inheritance bookkeeping) and are never reported as field differences.
FIELD_IGNORED_PROPERTIES = frozenset({"url", "customization", "hidden", "isLocked"})

# System-vs-custom status is an expected asymmetry between processes, not drift.
STATE_IGNORED_PROPERTIES = frozenset({"url", "customization", "customizationType", "id"})

BINDING_COMPARED_PROPERTIES = ("isDefault", "isLegacyDefault")

# Layout pages that never hold field controls.
NON_FIELD_PAGE_TYPES = frozenset({"history", "links", "attachments"})


def serialize_value(value: Any) -> str:
    """
    Serialize a property value for exact comparison; missing values become ``null``.

    Numbers keep their Python type, so ``1`` and ``1.0`` serialize differently
    and are reported as a difference.
    """
    return json.dumps(value, sort_keys=True, default=str)


def split_presence(
    entries: Mapping[str, Any], process_ids: Sequence[str]
) -> tuple[list[str], list[str]]:
    """Partition ``process_ids`` into (presentIn, missingFrom), keeping input order."""
    present_in = [pid for pid in process_ids if pid in entries]
    missing_from = [pid for pid in process_ids if pid not in entries]
    return present_in, missing_from


def values_differ(values: Mapping[str, Any]) -> bool:
    """True when the serialized values are not all identical."""
    serialized = {serialize_value(value) for value in values.values()}
    return len(serialized) > 1


def comparable_properties(
    records: Iterable[Mapping[str, Any]], ignored: frozenset[str]
) -> list[str]:
    """Union of property names across records, minus ``ignored``, in first-seen order."""
    properties: dict[str, None] = {}
    for record in records:
        for key in record:
            if key not in ignored:
                properties.setdefault(key, None)
    return list(properties)


def diff_properties(
    records: Mapping[str, Mapping[str, Any]],
    present_in: Sequence[str],
    properties: Iterable[str],
) -> list[PropertyDifference]:
    """
    Compare each property across the processes where the entity is present.

    Args:
        records: Raw entity record per process id
        present_in: Process ids to compare, in output order
        properties: Property names to compare

    Returns:
        One PropertyDifference per property whose serialized values differ.
    """
    differences = []
    if len(present_in) < 2:
        return differences

    for prop in properties:
        values = {pid: records[pid].get(prop) for pid in present_in}
        if values_differ(values):
            differences.append(PropertyDifference(property=prop, values=values))
    return differences


def first_key(record: Mapping[str, Any], *names: str) -> str:
    """
    First non-empty value among ``names``, as a string.

    Source records sometimes carry only a numeric ``id``; alignment keys and
    result labels are always strings, so the value is stringified.
    """
    for name in names:
        value = record.get(name)
        if value:
            return str(value)
    return ""


def work_item_type_name(wit: Mapping[str, Any]) -> str:
    """Display name used to align work item types across processes."""
    return first_key(wit, "name", "referenceName", "id")


def work_item_type_ref(wit: Mapping[str, Any]) -> str | None:
    return first_key(wit, "referenceName", "id") or None


def collect_type_names(index_maps: Iterable[Mapping[str, Any]]) -> list[str]:
    """Union of work item type keys across per-process index maps, in discovery order."""
    names: dict[str, None] = {}
    for index in index_maps:
        for name in index:
            names.setdefault(name, None)
    return list(names)
