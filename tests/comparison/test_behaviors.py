"""Tests for process behavior and behavior binding comparison."""

from ado_compare.comparison.behaviors import (
    binding_behavior_id,
    compare_behaviors,
    compare_work_item_type_behaviors,
)
from ado_compare.comparison.models import ProcessSnapshot
from ado_compare.comparison.normalizer import normalize_snapshot
from tests.utils.snapshots import make_behavior, make_binding, make_snapshot, make_work_item_type

REQUIREMENT = "System.RequirementBacklogBehavior"
TASK = "System.TaskBacklogBehavior"
PORTFOLIO = "System.PortfolioBacklogBehavior"


def process(process_id, work_item_types=None, behaviors=None):
    snapshot = make_snapshot(process_id, work_item_types or [], behaviors=behaviors)
    return normalize_snapshot(process_id, ProcessSnapshot.model_validate(snapshot))


def story(bindings):
    return make_work_item_type("User Story", behaviors=bindings)


class TestCompareBehaviors:

    def test_aligned_by_id_not_name(self):
        snapshots = [
            process("A", behaviors=[make_behavior(REQUIREMENT, "Stories")]),
            process("B", behaviors=[make_behavior(REQUIREMENT, "Requirements")]),
        ]

        result = compare_behaviors(snapshots, ["A", "B"])

        assert result.differences == []
        assert result.all == ["Stories"]

    def test_missing_behavior(self):
        snapshots = [
            process("A", behaviors=[make_behavior(REQUIREMENT, "Stories"), make_behavior(TASK, "Tasks")]),
            process("B", behaviors=[make_behavior(REQUIREMENT, "Stories")]),
        ]

        result = compare_behaviors(snapshots, ["A", "B"])

        assert [d.model_dump() for d in result.differences] == [
            {"behaviorId": TASK, "behaviorName": "Tasks", "presentIn": ["A"], "missingFrom": ["B"]}
        ]

    def test_reference_name_used_when_id_absent(self):
        snapshots = [
            process("A", behaviors=[{"referenceName": PORTFOLIO, "name": "Epics"}]),
            process("B", behaviors=[{"id": PORTFOLIO, "name": "Epics"}]),
        ]

        assert compare_behaviors(snapshots, ["A", "B"]).differences == []

    def test_name_defaults_to_id(self):
        snapshots = [process("A", behaviors=[{"id": PORTFOLIO}]), process("B")]

        result = compare_behaviors(snapshots, ["A", "B"])

        assert result.all == [PORTFOLIO]
        assert result.differences[0].behaviorName == PORTFOLIO


class TestCompareWorkItemTypeBehaviors:

    def test_identical_bindings_produce_no_record(self):
        snapshots = [
            process("A", [story([make_binding(REQUIREMENT, True)])]),
            process("B", [story([make_binding(REQUIREMENT, True)])]),
        ]

        result = compare_work_item_type_behaviors(snapshots, ["A", "B"])

        assert result.byWorkItemType["User Story"].differences == []

    def test_default_flag_difference(self):
        snapshots = [
            process("A", [story([make_binding(REQUIREMENT, True)])]),
            process("B", [story([make_binding(REQUIREMENT, False)])]),
        ]

        result = compare_work_item_type_behaviors(snapshots, ["A", "B"])

        difference = result.byWorkItemType["User Story"].differences[0]
        assert difference.behaviorId == REQUIREMENT
        assert difference.missingFrom == []
        assert [p.model_dump() for p in difference.propertyDifferences] == [
            {"property": "isDefault", "values": {"A": True, "B": False}}
        ]

    def test_only_default_flags_are_compared(self):
        binding_a = make_binding(REQUIREMENT)
        binding_a["url"] = "https://a/behaviors/1"
        binding_b = make_binding(REQUIREMENT)
        binding_b["url"] = "https://b/behaviors/2"
        snapshots = [process("A", [story([binding_a])]), process("B", [story([binding_b])])]

        result = compare_work_item_type_behaviors(snapshots, ["A", "B"])

        assert result.byWorkItemType["User Story"].differences == []

    def test_missing_binding(self):
        snapshots = [
            process("A", [story([make_binding(REQUIREMENT), make_binding(TASK, False)])]),
            process("B", [story([make_binding(REQUIREMENT)])]),
        ]

        result = compare_work_item_type_behaviors(snapshots, ["A", "B"])

        differences = result.byWorkItemType["User Story"].differences
        assert [(d.behaviorId, d.presentIn, d.missingFrom) for d in differences] == [
            (TASK, ["A"], ["B"])
        ]
        assert differences[0].propertyDifferences == []

    def test_bindings_without_behavior_id_are_skipped(self):
        snapshots = [
            process("A", [story([{"isDefault": True}, make_binding(REQUIREMENT)])]),
            process("B", [story([make_binding(REQUIREMENT)])]),
        ]

        result = compare_work_item_type_behaviors(snapshots, ["A", "B"])

        assert result.byWorkItemType["User Story"].differences == []

    def test_binding_id_fallbacks(self):
        assert binding_behavior_id({"behavior": {"id": REQUIREMENT}}) == REQUIREMENT
        assert binding_behavior_id({"behaviorId": TASK}) == TASK
        assert binding_behavior_id({"id": PORTFOLIO}) == PORTFOLIO
        assert binding_behavior_id({"behavior": None}) is None
        assert binding_behavior_id({"behaviorId": 3}) == "3"

    def test_numeric_behavior_ids_are_aligned_as_strings(self):
        snapshots = [
            process("A", [story([{"behaviorId": 3, "isDefault": True}])], behaviors=[{"id": 3}]),
            process("B", [story([{"behaviorId": 3, "isDefault": False}])]),
        ]

        bindings = compare_work_item_type_behaviors(snapshots, ["A", "B"])
        behaviors = compare_behaviors(snapshots, ["A", "B"])

        assert bindings.byWorkItemType["User Story"].differences[0].behaviorId == "3"
        assert [(d.behaviorId, d.behaviorName) for d in behaviors.differences] == [("3", "3")]
