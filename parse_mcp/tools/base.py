"""
Shared plumbing for tool modules.

ToolRegistrar wraps FastMCP's tool decorator and remembers the argument
names each tool declares. ToolCallMiddleware (parse_mcp.server) uses that
record to reject calls carrying undeclared arguments before the handler,
and therefore before any network call, runs.

Every tool answers with the same envelope: one text block holding the Parse
response as indented JSON.
"""

import inspect
import json
from typing import Any, Callable

from fastmcp import FastMCP
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent


class ToolRegistrar:
    def __init__(self, mcp: FastMCP):
        self.mcp = mcp
        self.arguments: dict[str, frozenset[str]] = {}

    def tool(self, name: str, description: str) -> Callable:
        """Register the decorated coroutine as an MCP tool called `name`."""

        def decorator(fn: Callable) -> Callable:
            self.mcp.tool(name=name, description=description)(fn)
            self.arguments[name] = frozenset(inspect.signature(fn).parameters)
            return fn

        return decorator


def text_result(data: Any) -> ToolResult:
    return ToolResult(
        content=[TextContent(type="text", text=json.dumps(data, indent=2, ensure_ascii=False))]
    )
