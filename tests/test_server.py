import pytest
from fastmcp.client import Client
from fastmcp.exceptions import ToolError

from server import mcp
from tests.utils.telemetry import analyze_spans, telemetry_setup  # noqa: F401

pytestmark = pytest.mark.asyncio


@pytest.fixture
async def mcp_client(tmp_path):
    async with Client(mcp) as client:
        await client.call_tool("set_snapshot_directory", {"snapshot_dir": str(tmp_path)})
        yield client


@pytest.fixture
async def pulled_client(mcp_client, agile_snapshot, fabrikam_snapshot):
    await mcp_client.call_tool(
        "import_process_snapshot",
        {"connection_id": "contoso", "process_id": "agile", "snapshot": agile_snapshot},
    )
    await mcp_client.call_tool(
        "import_process_snapshot",
        {"connection_id": "fabrikam", "process_id": "fabrikam-agile", "snapshot": fabrikam_snapshot},
    )
    return mcp_client


PROCESSES = [
    {"connectionId": "contoso", "processId": "agile"},
    {"connectionId": "fabrikam", "processId": "fabrikam-agile"},
]


async def test_comparison_tools_are_registered(mcp_client: Client):
    tools = await mcp_client.list_tools()
    names = {tool.name for tool in tools}

    assert {
        "compare_processes",
        "compare_processes_summary",
        "list_pulled_processes",
        "import_process_snapshot",
        "set_snapshot_directory",
    } <= names


async def test_import_process_snapshot_reports_stored_types(mcp_client: Client, agile_snapshot):
    result = await mcp_client.call_tool(
        "import_process_snapshot",
        {"connection_id": "contoso", "process_id": "agile", "snapshot": agile_snapshot},
    )

    assert result.data == {"connectionId": "contoso", "processId": "agile", "workItemTypes": 2}


async def test_list_pulled_processes(pulled_client: Client):
    result = await pulled_client.call_tool("list_pulled_processes")
    assert result.data == PROCESSES

    result = await pulled_client.call_tool("list_pulled_processes", {"connection_id": "fabrikam"})
    assert result.data == [{"connectionId": "fabrikam", "processId": "fabrikam-agile"}]


async def test_compare_processes_returns_full_comparison(pulled_client: Client):
    result = await pulled_client.call_tool("compare_processes", {"processes": PROCESSES})
    comparison = result.data["comparison"]

    assert comparison["summary"]["totalDifferences"] == 8
    assert [p["connectionId"] for p in result.data["processes"]] == ["contoso", "fabrikam"]
    assert comparison["workItemTypes"]["differences"] == [
        {"witName": "User Story", "presentIn": ["agile"], "missingFrom": ["fabrikam-agile"]}
    ]


async def test_compare_processes_summary(pulled_client: Client):
    result = await pulled_client.call_tool("compare_processes_summary", {"processes": PROCESSES})

    assert set(result.data) == {"processes", "summary"}
    assert result.data["summary"]["stateDifferences"] == 3


async def test_compare_requires_pulled_snapshots(pulled_client: Client):
    processes = PROCESSES + [{"connectionId": "northwind", "processId": "scrum"}]

    with pytest.raises(ToolError) as exc_info:
        await pulled_client.call_tool("compare_processes", {"processes": processes})

    assert "need to be pulled first" in str(exc_info.value)
    assert "northwind" in str(exc_info.value)


async def test_compare_requires_two_processes(pulled_client: Client):
    with pytest.raises(ToolError) as exc_info:
        await pulled_client.call_tool("compare_processes", {"processes": PROCESSES[:1]})

    assert "At least two processes are required for comparison" in str(exc_info.value)


async def test_compare_requires_connection_and_process_ids(pulled_client: Client):
    with pytest.raises(ToolError) as exc_info:
        await pulled_client.call_tool(
            "compare_processes_summary", {"processes": [PROCESSES[0], {"processId": "agile"}]}
        )

    assert "connectionId and processId" in str(exc_info.value)


async def test_repeated_comparison_reads_snapshots_from_cache(
    pulled_client: Client, telemetry_setup, tmp_path  # noqa: F811
):
    # A fresh store starts with an empty cache
    await pulled_client.call_tool("set_snapshot_directory", {"snapshot_dir": str(tmp_path)})

    await pulled_client.call_tool("compare_processes_summary", {"processes": PROCESSES})
    first_loads = analyze_spans(telemetry_setup).count_snapshot_loads()

    await pulled_client.call_tool("compare_processes_summary", {"processes": PROCESSES})

    assert first_loads == 2
    assert analyze_spans(telemetry_setup).count_snapshot_loads() == 2


async def test_comparison_guide_resource(mcp_client: Client):
    contents = await mcp_client.read_resource("ado-compare://user-guide/comparison")

    assert "Process Comparison Guide" in contents[0].text
    assert "compare_processes" in contents[0].text
