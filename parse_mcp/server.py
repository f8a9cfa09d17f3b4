"""
MCP server exposing the Parse Server REST API as tools, built on FastMCP v2.

This module wires the pieces together:
- Settings are read once in main() and passed down explicitly
- One ParseClient (the HTTP dispatcher) is shared by every tool handler
- ToolCallMiddleware rejects undeclared arguments and logs every tool call
- Structured JSON logging on stderr (stdout carries the stdio MCP stream)
- Health and readiness HTTP endpoints when served over HTTP

Request flow for a tool call:

    1. FastMCP receives tools/call and runs the middleware chain
    2. ToolCallMiddleware checks the argument names against the tool's signature
    3. FastMCP validates argument types against the signature (pydantic)
    4. The handler builds the Parse payload (normalizing relations if it writes objects)
    5. ParseClient sends the HTTP request; non-2xx raises UpstreamError
    6. The JSON response comes back as a single indented text block

Running the server:
    python -m parse_mcp.server          (stdio, for editors and desktop agents)
    PARSE_MCP_TRANSPORT=streamable-http python -m parse_mcp.server

    Over HTTP the MCP endpoint is /mcp, with /health and /ready beside it.
"""

import json
import logging
import sys
import time
import uuid

import httpx
from fastmcp import FastMCP
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult
from mcp.types import CallToolRequestParams
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from parse_mcp.client import ParseClient
from parse_mcp.config import Settings, load_settings
from parse_mcp.errors import ConfigurationError, InvalidToolInput, ParseMCPError
from parse_mcp.tools import ToolRegistrar, register_all_tools

logger = logging.getLogger("parse-mcp")


# ---------------------------------------------------------------------------
# Structured JSON Logging
# ---------------------------------------------------------------------------


class JSONLogFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Structured fields are passed as logger.info("msg", extra={"log_data": {...}})
    and merged into the line. Example output:

        {"timestamp": "2026-10-19 10:30:00,123", "level": "INFO", "logger": "parse-mcp",
         "message": "Tool call finished", "request_id": "1f2e3d4c", "tool": "parse_query"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "log_data"):
            log_entry.update(record.log_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONLogFormatter())
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )


# ---------------------------------------------------------------------------
# Tool call middleware
# ---------------------------------------------------------------------------


class ToolCallMiddleware(Middleware):
    """
    Guards and logs every tools/call request.

    FastMCP validates argument *types* itself but silently drops argument
    names a tool does not declare. This middleware turns those into an error
    instead, so a misspelled optional argument (say "wehre") never becomes an
    unfiltered query against Parse Server.

    Args:
        known_arguments: Tool name -> declared argument names, filled in by
            ToolRegistrar as tools are registered.
    """

    def __init__(self, known_arguments: dict[str, frozenset[str]]):
        self.known_arguments = known_arguments

    async def on_call_tool(
        self,
        context: MiddlewareContext[CallToolRequestParams],
        call_next: CallNext[CallToolRequestParams, ToolResult],
    ) -> ToolResult:
        request_id = str(uuid.uuid4())[:8]
        tool_name = context.message.name
        arguments = context.message.arguments or {}

        declared = self.known_arguments.get(tool_name)
        if declared is not None:
            unexpected = sorted(set(arguments) - declared)
            if unexpected:
                logger.warning(
                    "Tool call rejected: unexpected arguments",
                    extra={
                        "log_data": {
                            "request_id": request_id,
                            "tool": tool_name,
                            "unexpected": unexpected,
                            "decision": "rejected",
                        }
                    },
                )
                raise InvalidToolInput(
                    f"Tool '{tool_name}' got unexpected argument(s): {', '.join(unexpected)}"
                )

        started = time.perf_counter()
        try:
            result = await call_next(context)
        except Exception as exc:
            # FastMCP re-raises handler errors as ToolError chained to the real one.
            cause = exc.__cause__ or exc
            logger.warning(
                "Tool call failed",
                extra={
                    "log_data": {
                        "request_id": request_id,
                        "tool": tool_name,
                        "error": type(cause).__name__,
                        "status_code": getattr(cause, "status_code", None),
                        "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                    }
                },
            )
            raise

        logger.info(
            "Tool call finished",
            extra={
                "log_data": {
                    "request_id": request_id,
                    "tool": tool_name,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                }
            },
        )
        return result


# ---------------------------------------------------------------------------
# Server factory
# ---------------------------------------------------------------------------


def build_server(settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> FastMCP:
    """
    Create the FastMCP server with every Parse tool registered.

    Args:
        settings: Parse connection and server settings
        transport: Optional httpx transport for the Parse client (tests use
            httpx.MockTransport)
    """
    client = ParseClient(settings, transport=transport)
    known_arguments: dict[str, frozenset[str]] = {}

    mcp = FastMCP(
        name="parse-server",
        instructions=(
            "Tools for a Parse Server backend: query and edit objects, manage class "
            "schemas, roles, users and permissions, call Cloud Code and work with "
            "Pointer and Relation fields. Every tool returns the raw Parse JSON response."
        ),
        middleware=[ToolCallMiddleware(known_arguments)],
    )

    registrar = ToolRegistrar(mcp)
    register_all_tools(registrar, client)
    known_arguments.update(registrar.arguments)

    # Plain HTTP endpoints, only reachable with the streamable-http transport.

    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> Response:
        """Liveness probe: is the server process alive and responsive?"""
        return JSONResponse({"status": "healthy"})

    @mcp.custom_route("/ready", methods=["GET"])
    async def readiness_check(request: Request) -> Response:
        """Readiness probe: does Parse Server answer its own health check?"""
        try:
            upstream = await client.request("/health")
        except (ParseMCPError, httpx.HTTPError, ValueError) as exc:
            logger.warning("Readiness check failed: %s", exc)
            return JSONResponse(
                {"status": "not_ready", "reason": "parse server unreachable"},
                status_code=503,
            )
        return JSONResponse({"status": "ready", "parse": upstream})

    return mcp


# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------


def main() -> None:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        configure_logging("info")
        logger.error("Refusing to start: %s", exc.message)
        sys.exit(1)

    configure_logging(settings.mcp_log_level)
    logger.info("Configuration loaded", extra={"log_data": settings.masked()})
    if settings.allow_self_signed:
        logger.warning("Self-signed TLS certificates are accepted (do not use in production)")

    mcp = build_server(settings)

    if settings.mcp_transport == "stdio":
        logger.info("Starting MCP server (transport=stdio)")
        mcp.run(transport="stdio")
    else:
        logger.info(
            "Starting MCP server on %s:%d (transport=streamable-http)",
            settings.mcp_host,
            settings.mcp_port,
        )
        mcp.run(
            transport="streamable-http",
            host=settings.mcp_host,
            port=settings.mcp_port,
            log_level=settings.mcp_log_level,
        )


if __name__ == "__main__":
    main()
