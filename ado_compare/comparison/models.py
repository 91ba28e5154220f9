"""Data models for process snapshots and comparison results."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProcessSnapshot(BaseModel):
    """
    Represents one pulled inherited process configuration.

    Work item types carry their own nested ``fields``, ``states``,
    ``behaviors`` and ``layout``. Entity records are kept as raw dicts so that
    property comparison sees values exactly as they were pulled.
    """

    process: dict[str, Any] | None = Field(None, description="Process descriptor (id, name, ...)")
    orgUrl: str | None = Field(None, description="Organization URL the process was pulled from")
    connectionId: str | None = Field(None, description="Connection the process was pulled with")
    pulledAt: str | None = Field(None, description="ISO timestamp of the pull")
    workItemTypes: list[dict[str, Any]] = Field(
        default_factory=list, description="Work item type descriptors with nested configuration"
    )
    behaviors: list[dict[str, Any]] = Field(
        default_factory=list, description="Process-level behaviors"
    )

    # Optional pre-populated maps keyed by work item type display name
    fields: dict[str, list[dict[str, Any]]] | None = Field(None, description="Fields per type")
    states: dict[str, list[dict[str, Any]]] | None = Field(None, description="States per type")
    workItemTypeBehaviors: dict[str, list[dict[str, Any]]] | None = Field(
        None, description="Behavior bindings per type"
    )
    layouts: dict[str, dict[str, Any]] | None = Field(None, description="Layout tree per type")

    model_config = ConfigDict(extra="allow")

    @field_validator("workItemTypes", "behaviors", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value


class ProcessInput(BaseModel):
    """A snapshot paired with the process id it is compared under."""

    processId: str = Field(..., description="Process identifier used as the comparison column")
    data: ProcessSnapshot = Field(..., description="The pulled process snapshot")
    connectionId: str | None = Field(None, description="Connection the snapshot came from")


class LayoutControl(BaseModel):
    """Placement of a single field control on a work item form."""

    groupId: str
    groupLabel: str
    visible: bool = True
    controlType: str | None = None
    label: str = ""


class LayoutGroup(BaseModel):
    """A layout group a field control can be placed in."""

    groupId: str
    label: str


class PropertyDifference(BaseModel):
    """A per-property mismatch among the processes where an entity is present."""

    property: str = Field(..., description="Name of the differing property")
    values: dict[str, Any] = Field(..., description="Value per process id")


class WorkItemTypeAttributes(BaseModel):
    """Per-process attributes of a work item type."""

    present: bool = True
    isDisabled: bool = False
    referenceName: str | None = None
    color: Any = ""
    description: Any = ""
    icon: Any = ""
    isDefault: bool = False


class WorkItemTypeDifference(BaseModel):
    witName: str
    presentIn: list[str]
    missingFrom: list[str]


class WorkItemTypeComparison(BaseModel):
    """
    Work item types aligned by display name.

    Only presence is reported as a difference; enabled/disabled drift is read
    from ``byName[name][processId].isDisabled``.
    """

    all: list[str] = Field(default_factory=list)
    byProcess: dict[str, list[str | None]] = Field(default_factory=dict)
    byName: dict[str, dict[str, WorkItemTypeAttributes]] = Field(default_factory=dict)
    differences: list[WorkItemTypeDifference] = Field(default_factory=list)


class FieldInfo(BaseModel):
    """A field as configured in one process, with its form placement."""

    present: bool = True
    referenceName: str
    name: str
    type: Any = ""
    required: Any = False
    readOnly: Any = False
    defaultValue: Any = None
    onLayout: bool = False
    layoutVisible: bool = False
    layoutGroupId: str | None = None
    layoutGroupLabel: str | None = None
    layoutControlType: str | None = None
    layoutLabel: str = ""


class FieldDifference(BaseModel):
    fieldRefName: str
    fieldName: str
    presentIn: list[str]
    missingFrom: list[str]
    propertyDifferences: list[PropertyDifference] = Field(default_factory=list)


class WorkItemTypeFields(BaseModel):
    """Field comparison for one work item type."""

    all: list[str] = Field(default_factory=list)
    differences: list[FieldDifference] = Field(default_factory=list)
    byField: dict[str, dict[str, FieldInfo]] = Field(default_factory=dict)
    witRefNames: dict[str, str] = Field(default_factory=dict)
    layoutGroups: dict[str, list[LayoutGroup]] = Field(default_factory=dict)


class FieldComparison(BaseModel):
    byWorkItemType: dict[str, WorkItemTypeFields] = Field(default_factory=dict)


class StateInfo(BaseModel):
    """A state as configured in one process."""

    present: bool = True
    id: Any = ""
    name: str
    color: Any = ""
    stateCategory: Any = ""
    order: Any = None
    customizationType: Any = ""


class StateDifference(BaseModel):
    stateName: str
    presentIn: list[str]
    missingFrom: list[str]
    propertyDifferences: list[PropertyDifference] = Field(default_factory=list)


class WorkItemTypeStates(BaseModel):
    """State comparison for one work item type."""

    all: list[str] = Field(default_factory=list)
    differences: list[StateDifference] = Field(default_factory=list)
    byState: dict[str, dict[str, StateInfo]] = Field(default_factory=dict)
    witRefNames: dict[str, str] = Field(default_factory=dict)


class StateComparison(BaseModel):
    byWorkItemType: dict[str, WorkItemTypeStates] = Field(default_factory=dict)


class BehaviorDifference(BaseModel):
    behaviorId: str
    behaviorName: str
    presentIn: list[str]
    missingFrom: list[str]


class BehaviorComparison(BaseModel):
    """Process-level behaviors aligned by identifier (presence only)."""

    all: list[str] = Field(default_factory=list)
    differences: list[BehaviorDifference] = Field(default_factory=list)


class BindingDifference(BaseModel):
    behaviorId: str
    presentIn: list[str]
    missingFrom: list[str]
    propertyDifferences: list[PropertyDifference] = Field(default_factory=list)


class WorkItemTypeBindings(BaseModel):
    differences: list[BindingDifference] = Field(default_factory=list)


class BindingComparison(BaseModel):
    byWorkItemType: dict[str, WorkItemTypeBindings] = Field(default_factory=dict)


class ComparisonSummary(BaseModel):
    """Rollup counts; every difference record counts once."""

    totalDifferences: int = 0
    witDifferences: int = 0
    fieldDifferences: int = 0
    stateDifferences: int = 0
    behaviorDifferences: int = 0
    witBehaviorDifferences: int = 0


class Comparison(BaseModel):
    workItemTypes: WorkItemTypeComparison
    fields: FieldComparison
    states: StateComparison
    behaviors: BehaviorComparison
    workItemTypeBehaviors: BindingComparison
    summary: ComparisonSummary


class ProcessSummary(BaseModel):
    """Identifies one compared process in the result."""

    connectionId: str | None = None
    processId: str
    processName: str
    orgUrl: str | None = None


class ComparisonResult(BaseModel):
    processes: list[ProcessSummary]
    comparison: Comparison


class ComparisonSummaryResult(BaseModel):
    processes: list[ProcessSummary]
    summary: ComparisonSummary
