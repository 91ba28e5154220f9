"""
MCP Resources for providing guidance to LLM clients.

Explains how to read a process comparison so clients can summarize
differences for users without guessing at the result shape.
"""

import logging

logger = logging.getLogger(__name__)


def register_mcp_resources(mcp_instance):
    """Register MCP resources that document the comparison tools."""

    @mcp_instance.resource("ado-compare://user-guide/comparison")
    def comparison_guide():
        """Guide to running and reading process comparisons."""
        return """# Process Comparison Guide

## Workflow
1. `list_pulled_processes` to see which snapshots are available
2. `import_process_snapshot` to store a pulled process if it is missing
3. `compare_processes` with two or more {connectionId, processId} entries
   (or `compare_processes_summary` for counts only)

## Reading the result
- `comparison.workItemTypes.differences`: types missing from some processes.
  Enabled/disabled drift is NOT listed here; compare
  `workItemTypes.byName[<type>][<processId>].isDisabled` instead.
- `comparison.fields.byWorkItemType[<type>].differences`: fields missing from
  some processes or with `propertyDifferences` (including `onLayout` and
  `layoutVisible` for form placement). `layoutGroups` lists where a missing
  field could be placed.
- `comparison.states.byWorkItemType[<type>].differences`: state gaps and
  category/color/order mismatches.
- `comparison.behaviors.differences`: process behaviors missing somewhere.
- `comparison.workItemTypeBehaviors.byWorkItemType[<type>].differences`:
  behavior bindings missing or with different `isDefault`/`isLegacyDefault`.
- `comparison.summary`: counts per dimension and `totalDifferences`.

## Alignment rules
- Work item types, fields and states are matched by display name.
- Behaviors and bindings are matched by behavior id.
- Values are compared exactly: "1" and 1 are different.
"""

    logger.info("Registered MCP resources")
