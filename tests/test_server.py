"""
Tests for the server wiring (parse_mcp/server.py).

- JSONLogFormatter output shape
- ToolRegistrar bookkeeping used by ToolCallMiddleware
- /health and /ready HTTP endpoints, exercised through httpx.ASGITransport
  against the Starlette app FastMCP builds for the HTTP transport
- main() refusing to start without configuration
"""

import json
import logging

import httpx
import pytest
from fastmcp import FastMCP

from parse_mcp import server
from parse_mcp.server import JSONLogFormatter
from parse_mcp.tools import ToolRegistrar, register_all_tools
from parse_mcp.tools.read import register_read_tools


def make_record(message: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("parse-mcp", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONLogFormatter:
    def test_plain_record(self):
        line = json.loads(JSONLogFormatter().format(make_record("hello")))

        assert line["level"] == "INFO"
        assert line["logger"] == "parse-mcp"
        assert line["message"] == "hello"
        assert "timestamp" in line

    def test_log_data_is_merged(self):
        record = make_record("Tool call finished", log_data={"tool": "parse_query", "duration_ms": 1.5})

        line = json.loads(JSONLogFormatter().format(record))

        assert line["tool"] == "parse_query"
        assert line["duration_ms"] == 1.5


class TestToolRegistrar:
    def test_records_declared_arguments(self, make_client):
        registrar = ToolRegistrar(FastMCP(name="test"))
        register_read_tools(registrar, make_client())

        assert registrar.arguments["parse_get_object"] == frozenset(
            {"className", "objectId", "include"}
        )
        assert registrar.arguments["parse_count"] == frozenset({"className", "where"})

    def test_every_handler_has_a_docstring(self, make_client):
        handlers = {}

        class RecordingRegistrar(ToolRegistrar):
            def tool(self, name, description):
                register = super().tool(name, description)

                def decorator(fn):
                    handlers[name] = fn
                    return register(fn)

                return decorator

        register_all_tools(RecordingRegistrar(FastMCP(name="test")), make_client())

        assert len(handlers) == 37
        assert [name for name, fn in handlers.items() if not (fn.__doc__ or "").strip()] == []


# ---------------------------------------------------------------------------
# HTTP endpoints
# ---------------------------------------------------------------------------


@pytest.fixture
async def http_client(mcp_server):
    """httpx client bound to the server's ASGI app (no lifespan needed for plain routes)."""
    app = mcp_server.http_app(transport="streamable-http")
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    ) as client:
        yield client


class TestHTTPRoutes:
    async def test_health(self, http_client, parse_server):
        response = await http_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
        assert parse_server.requests == []

    async def test_ready_when_parse_answers(self, http_client, parse_server):
        parse_server.respond({"status": "ok"})

        response = await http_client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "parse": {"status": "ok"}}
        assert parse_server.path(parse_server.last) == "/health"

    async def test_not_ready_when_parse_fails(self, http_client, parse_server):
        parse_server.respond(status_code=503, text="down")

        response = await http_client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    async def test_not_ready_when_parse_health_is_not_json(self, http_client, parse_server):
        parse_server.respond(status_code=200, text="OK")

        response = await http_client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


class TestMain:
    def test_missing_configuration_exits(self, monkeypatch):
        monkeypatch.setattr(server, "configure_logging", lambda level: None)
        monkeypatch.chdir("/")  # keep any local .env out of the way

        with pytest.raises(SystemExit) as excinfo:
            server.main()

        assert excinfo.value.code == 1

