"""Shared fixtures for comparison tests."""

import pytest

from ado_compare.snapshots import SnapshotCache, SnapshotStore
from tests.utils.snapshots import (
    make_behavior,
    make_binding,
    make_control,
    make_field,
    make_layout,
    make_snapshot,
    make_state,
    make_work_item_type,
)

REQUIREMENT_BEHAVIOR = "System.RequirementBacklogBehavior"
TASK_BEHAVIOR = "System.TaskBacklogBehavior"


@pytest.fixture
def agile_snapshot():
    """A process with Bug and User Story, as pulled from the contoso organization."""
    bug = make_work_item_type(
        "Bug",
        "Custom.Bug",
        fields=[
            make_field("Microsoft.VSTS.Common.Priority", "Priority", type="integer"),
            make_field("Microsoft.VSTS.TCM.ReproSteps", "Repro Steps", type="html"),
        ],
        states=[
            make_state("New", "Proposed", 1),
            make_state("Active", "InProgress", 2),
            make_state("Closed", "Completed", 3),
        ],
        behaviors=[make_binding(REQUIREMENT_BEHAVIOR)],
        layout=make_layout(
            {"Details": [make_control("Microsoft.VSTS.Common.Priority")]}
        ),
    )
    story = make_work_item_type(
        "User Story",
        "Custom.UserStory",
        fields=[make_field("Microsoft.VSTS.Scheduling.StoryPoints", "Story Points", type="double")],
        states=[make_state("New", "Proposed", 1), make_state("Closed", "Completed", 2)],
        behaviors=[make_binding(REQUIREMENT_BEHAVIOR)],
    )
    return make_snapshot(
        "Contoso Agile",
        [bug, story],
        behaviors=[
            make_behavior(REQUIREMENT_BEHAVIOR, "Stories"),
            make_behavior(TASK_BEHAVIOR, "Tasks"),
        ],
        org_url="https://dev.azure.com/contoso",
    )


@pytest.fixture
def fabrikam_snapshot():
    """The same logical process pulled from fabrikam, with some drift."""
    bug = make_work_item_type(
        "Bug",
        "Fabrikam.Bug",
        fields=[
            make_field("Microsoft.VSTS.Common.Priority", "Priority", type="integer", required=True),
            make_field("Microsoft.VSTS.TCM.ReproSteps", "Repro Steps", type="html"),
        ],
        states=[
            make_state("New", "Proposed", 1),
            make_state("Active", "InProgress", 2),
            make_state("Closed", "Completed", 4),
        ],
        behaviors=[make_binding(REQUIREMENT_BEHAVIOR)],
        layout=make_layout(
            {"Details": [make_control("Microsoft.VSTS.Common.Priority")]}
        ),
    )
    return make_snapshot(
        "Fabrikam Agile",
        [bug],
        behaviors=[make_behavior(REQUIREMENT_BEHAVIOR, "Stories")],
        org_url="https://dev.azure.com/fabrikam",
    )


@pytest.fixture
def snapshot_store(tmp_path):
    return SnapshotStore(tmp_path / "snapshots", cache=SnapshotCache(ttl_seconds=60, max_size=10))
