"""MCP tool server for the Parse Server REST API."""

__version__ = "1.0.0"
