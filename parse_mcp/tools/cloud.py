"""Cloud Code tools: call functions, start background jobs, list what is deployed."""

from typing import Annotated, Any

from fastmcp.tools.tool import ToolResult
from pydantic import Field

from parse_mcp.client import ParseClient
from parse_mcp.tools.base import ToolRegistrar, text_result


def register_cloud_tools(tools: ToolRegistrar, client: ParseClient) -> None:
    @tools.tool(
        "parse_call_cloud_function",
        "Run a Cloud Function with optional JSON params and return its result.",
    )
    async def parse_call_cloud_function(
        functionName: Annotated[str, Field(description="Cloud Function name")],
        params: Annotated[
            dict[str, Any] | None, Field(description='Function parameters, e.g. {"patientId": "..."}')
        ] = None,
    ) -> ToolResult:
        """POST /functions/<name>; params default to an empty object."""
        return text_result(
            await client.request_json(f"/functions/{functionName}", "POST", params or {})
        )

    @tools.tool(
        "parse_run_job",
        "Start a Background Job (cleanups, reports, other heavy tasks). Requires the master key.",
    )
    async def parse_run_job(
        jobName: Annotated[str, Field(description="Job name")],
        params: Annotated[dict[str, Any] | None, Field(description="Job parameters")] = None,
    ) -> ToolResult:
        """POST /jobs/<name> with the master key."""
        return text_result(
            await client.request_json(
                f"/jobs/{jobName}", "POST", params or {}, use_master_key=True
            )
        )

    @tools.tool(
        "parse_get_cloud_code_info",
        "List the Cloud Functions and Background Jobs deployed on the server. "
        "Requires the master key.",
    )
    async def parse_get_cloud_code_info() -> ToolResult:
        """GET /cloudCode."""
        return text_result(await client.request("/cloudCode", use_master_key=True))
