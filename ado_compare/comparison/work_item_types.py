"""Work item type alignment across processes."""

import logging
from typing import Sequence

from .models import WorkItemTypeAttributes, WorkItemTypeComparison, WorkItemTypeDifference
from .normalizer import NormalizedSnapshot
from .utils import split_presence, work_item_type_name, work_item_type_ref

logger = logging.getLogger(__name__)


def _sort_key(name: str) -> tuple[str, str]:
    # Case-insensitive first, original spelling as a stable tie-breaker.
    # Not locale collation: accented letters sort by code point (so "Épic"
    # sorts after "Task").
    return name.casefold(), name


def compare_work_item_types(
    snapshots: Sequence[NormalizedSnapshot], process_ids: Sequence[str]
) -> WorkItemTypeComparison:
    """
    Align work item types by display name.

    Reference names are process-local and are reported per process but never
    used for alignment. A difference is recorded only when a type is missing
    from at least one process; attribute drift such as ``isDisabled`` is left
    to the caller via ``byName``.

    Names are ordered case-insensitively by code point rather than by locale
    collation, so accented names sort after unaccented ones.
    """
    by_name: dict[str, dict[str, WorkItemTypeAttributes]] = {}
    by_process: dict[str, list[str]] = {}

    for snapshot in snapshots:
        ref_names = []
        for wit in snapshot.work_item_types:
            name = work_item_type_name(wit)
            ref = work_item_type_ref(wit)
            ref_names.append(ref)
            by_name.setdefault(name, {})[snapshot.process_id] = WorkItemTypeAttributes(
                isDisabled=bool(wit.get("isDisabled")),
                referenceName=ref,
                color=wit.get("color") or "",
                description=wit.get("description") or "",
                icon=wit.get("icon") or "",
                isDefault=bool(wit.get("isDefault")),
            )
        by_process[snapshot.process_id] = ref_names

    all_names = sorted(by_name, key=_sort_key)

    differences = []
    for wit_name in all_names:
        present_in, missing_from = split_presence(by_name[wit_name], process_ids)
        if missing_from:
            differences.append(
                WorkItemTypeDifference(witName=wit_name, presentIn=present_in, missingFrom=missing_from)
            )

    logger.debug(f"Aligned {len(all_names)} work item types, {len(differences)} with presence gaps")
    return WorkItemTypeComparison(
        all=all_names,
        byProcess=by_process,
        byName=by_name,
        differences=differences,
    )
