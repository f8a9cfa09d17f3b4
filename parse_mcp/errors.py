"""
Error types raised by the Parse MCP server.

There are two moments when something can go wrong:

- **Startup**: the configuration is incomplete. This is fatal; the process
  refuses to start (ConfigurationError).
- **Tool call**: the caller sent arguments the tool does not declare
  (InvalidToolInput), Parse Server answered with a non-2xx status
  (UpstreamError), or a relation could not be resolved from schema
  metadata (RelationLookupError).

Tool-time errors are never retried or recovered here. They propagate to
FastMCP, which turns them into an MCP error result (isError=true) whose text
is the exception message.
"""


class ParseMCPError(Exception):
    """
    Base class for every error raised by this package.

    Attributes:
        message: Human-readable error description (shown to the MCP caller)
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(ParseMCPError):
    """Required settings are missing or invalid. Raised only at startup."""


class UpstreamError(ParseMCPError):
    """
    Parse Server responded with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by Parse Server
        text: Raw response body (usually a JSON string like
            '{"code":101,"error":"Object not found."}')
    """

    def __init__(self, status_code: int, text: str):
        self.status_code = status_code
        self.text = text
        super().__init__(f"Parse error {status_code}: {text}")


class RelationLookupError(ParseMCPError):
    """The target class of a relation field could not be found in the schema."""


class InvalidToolInput(ParseMCPError):
    """A tool call carried argument names the tool does not declare."""
