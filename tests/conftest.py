"""
Shared test fixtures for the Parse MCP server test suite.

No real Parse Server is involved. ParseClient accepts an httpx transport, and
the tests hand it an httpx.MockTransport backed by FakeParseServer, which
records every request and answers from a queue of canned responses.

Key fixtures:
- make_settings: factory for Settings with test credentials (no env, no .env)
- parse_server: the FakeParseServer standing in for Parse
- mcp_server: a FastMCP server built against the fake
- call_tool: invoke a tool through an in-memory fastmcp.Client and return
  the raw text block of the result

Testing approach:
- test_normalize.py / test_operations.py: pure functions, no I/O
- test_client.py: the dispatcher against the fake (headers, bodies, errors)
- test_config.py: environment loading and validation
- test_tools.py: every tool end to end through the MCP protocol
- test_server.py: middleware, logging formatter, HTTP routes
"""

import json

import httpx
import pytest
from fastmcp import Client

from parse_mcp.client import ParseClient
from parse_mcp.config import Settings
from parse_mcp.server import build_server

PARSE_URL = "https://parse.example.com/parse"
APP_ID = "test-app-id"
REST_KEY = "test-rest-key"
MASTER_KEY = "test-master-key"

ENV_VARS = [
    "PARSE_URL",
    "PARSE_SERVER_URL",
    "PARSE_APP_ID",
    "PARSE_REST_KEY",
    "PARSE_MASTER_KEY",
    "PARSE_ALLOW_SELF_SIGNED",
    "ALLOW_SELF_SIGNED_CERT",
    "NODE_TLS_REJECT_UNAUTHORIZED",
    "PARSE_REQUEST_TIMEOUT",
    "PARSE_MCP_TRANSPORT",
    "PARSE_MCP_HOST",
    "PARSE_MCP_PORT",
    "PARSE_MCP_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the developer's own Parse credentials out of the tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ---------------------------------------------------------------------------
# Fake Parse Server
# ---------------------------------------------------------------------------


class FakeParseServer:
    """Records requests and replies with queued responses (200 {} when the queue is empty)."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response] = []

    def respond(self, json_body=None, status_code: int = 200, text: str | None = None) -> None:
        if text is not None:
            self._responses.append(httpx.Response(status_code, text=text))
        else:
            self._responses.append(
                httpx.Response(status_code, json=json_body if json_body is not None else {})
            )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responses:
            return self._responses.pop(0)
        return httpx.Response(200, json={})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content)

    @staticmethod
    def path(request: httpx.Request) -> str:
        """Request path relative to the Parse mount, e.g. /classes/Post."""
        return request.url.path.removeprefix("/parse")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_settings():
    """
    Factory fixture for Settings.

    Usage in tests:
        def test_something(make_settings):
            settings = make_settings(master_key=None)
    """

    def _make_settings(**overrides) -> Settings:
        values = {
            "url": PARSE_URL,
            "app_id": APP_ID,
            "rest_key": REST_KEY,
            "master_key": MASTER_KEY,
            "_env_file": None,
        }
        values.update(overrides)
        return Settings(**values)

    return _make_settings


@pytest.fixture
def parse_server():
    return FakeParseServer()


@pytest.fixture
def make_client(make_settings, parse_server):
    """Factory for a ParseClient wired to the fake server."""

    def _make_client(**overrides) -> ParseClient:
        return ParseClient(
            make_settings(**overrides), transport=httpx.MockTransport(parse_server.handler)
        )

    return _make_client


@pytest.fixture
def mcp_server(make_settings, parse_server):
    return build_server(make_settings(), transport=httpx.MockTransport(parse_server.handler))


@pytest.fixture
def call_tool(mcp_server):
    """
    Call a tool over an in-memory MCP session and return its text block.

    Errors surface as fastmcp.exceptions.ToolError, exactly as an MCP client
    would see them.
    """

    async def _call_tool(name: str, arguments: dict | None = None) -> str:
        async with Client(mcp_server) as client:
            result = await client.call_tool(name, arguments or {})
        assert len(result.content) == 1
        assert result.content[0].type == "text"
        return result.content[0].text

    return _call_tool
