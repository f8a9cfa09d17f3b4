"""
MCP tools for the Parse Server REST API, grouped by concern.

    read        get/query/count/aggregate objects
    write       create/update/delete objects, batch, atomic field operations
    schema      class and field definitions
    security    roles, users, class level permissions
    cloud       Cloud Functions and Background Jobs
    relations   Relation field editing and exploration
"""

from parse_mcp.client import ParseClient
from parse_mcp.tools.base import ToolRegistrar, text_result
from parse_mcp.tools.cloud import register_cloud_tools
from parse_mcp.tools.read import register_read_tools
from parse_mcp.tools.relations import register_relation_tools
from parse_mcp.tools.schema import register_schema_tools
from parse_mcp.tools.security import register_security_tools
from parse_mcp.tools.write import register_write_tools

__all__ = ["ToolRegistrar", "register_all_tools", "text_result"]


def register_all_tools(tools: ToolRegistrar, client: ParseClient) -> None:
    register_read_tools(tools, client)
    register_write_tools(tools, client)
    register_schema_tools(tools, client)
    register_security_tools(tools, client)
    register_cloud_tools(tools, client)
    register_relation_tools(tools, client)
