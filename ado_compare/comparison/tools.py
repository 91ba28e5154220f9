"""MCP tools for comparing pulled Azure DevOps processes."""

import logging
from contextlib import nullcontext
from typing import Any, Optional

from ado_compare.errors import ComparisonPreconditionError
from ado_compare.telemetry import get_telemetry_manager

from .engine import compare, compare_summary

logger = logging.getLogger(__name__)


def _validate_process_requests(processes: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Check the request list before any snapshot is loaded."""
    if not isinstance(processes, list) or len(processes) < 2:
        raise ComparisonPreconditionError(
            "At least two processes are required for comparison",
            context={"process_count": len(processes) if isinstance(processes, list) else 0},
        )

    requests = []
    for entry in processes:
        connection_id = entry.get("connectionId") if isinstance(entry, dict) else None
        process_id = entry.get("processId") if isinstance(entry, dict) else None
        if not connection_id or not process_id:
            raise ComparisonPreconditionError(
                "Each process entry must include connectionId and processId",
                context={"entry": entry},
            )
        requests.append({"connectionId": connection_id, "processId": process_id})
    return requests


def register_comparison_tools(mcp_instance, store_container):
    """
    Register process comparison tools with the MCP server.

    Args:
        mcp_instance: The MCP server instance
        store_container: Container holding the SnapshotStore
    """

    def load_inputs(processes: list[dict[str, Any]]):
        requests = _validate_process_requests(processes)
        return store_container["store"].load_many(requests)

    def traced(operation: str, process_count: int):
        manager = get_telemetry_manager()
        if manager is None:
            return nullcontext()
        return manager.trace_operation(operation, process_count=process_count)

    @mcp_instance.tool
    def compare_processes(processes: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Compare two or more pulled processes side by side.

        Work item types, fields, states, process behaviors and work item type
        behavior bindings are aligned across the processes and every
        presence gap or property mismatch is reported.

        Args:
            processes: Entries of the form {"connectionId": ..., "processId": ...}.
                At least two are required and each must already be pulled.

        Returns:
            dict: {"processes": [...], "comparison": {...}} with per-dimension
            differences and a summary of counts.

        Examples:
            compare_processes(processes=[
                {"connectionId": "contoso", "processId": "adcc42ab-9882-485e-a3ed-7678f01f66bc"},
                {"connectionId": "fabrikam", "processId": "6b724908-ef14-45cf-84f8-768b5384da45"},
            ])
        """
        inputs = load_inputs(processes)
        with traced("compare_processes", len(inputs)):
            result = compare(inputs)

        logger.info(
            f"Compared {len(inputs)} processes with {result.comparison.summary.totalDifferences} differences"
        )
        return result.model_dump()

    @mcp_instance.tool
    def compare_processes_summary(processes: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Get only the difference counts for two or more pulled processes.

        Args:
            processes: Entries of the form {"connectionId": ..., "processId": ...}.

        Returns:
            dict: {"processes": [...], "summary": {...}}
        """
        inputs = load_inputs(processes)
        with traced("compare_processes_summary", len(inputs)):
            result = compare_summary(inputs)
        return result.model_dump()

    @mcp_instance.tool
    def list_pulled_processes(connection_id: Optional[str] = None) -> list[dict[str, str]]:
        """
        List processes that have a stored snapshot and can be compared.

        Args:
            connection_id: Only list snapshots pulled with this connection.

        Returns:
            List of {"connectionId": ..., "processId": ...} entries.
        """
        entries = store_container["store"].list_snapshots(connection_id)
        logger.info(f"Found {len(entries)} pulled processes")
        return entries

    @mcp_instance.tool
    def import_process_snapshot(
        connection_id: str, process_id: str, snapshot: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Store a pulled process snapshot so it can be compared.

        The snapshot holds the process descriptor, its work item types (each
        with nested fields, states, behaviors and layout) and the process
        level behaviors. An existing snapshot for the same pair is replaced.

        Args:
            connection_id: Connection the process was pulled with.
            process_id: The process identifier.
            snapshot: The pulled process data.

        Returns:
            dict: {"connectionId", "processId", "workItemTypes"} for the stored snapshot.
        """
        store = store_container["store"]
        store.save(connection_id, process_id, snapshot)
        stored = store.get(connection_id, process_id)
        return {
            "connectionId": connection_id,
            "processId": process_id,
            "workItemTypes": len(stored.workItemTypes),
        }
