"""Run a stdio-based MCP server and relay JSON-RPC messages to it over HTTP."""

__version__ = "0.1.0"

__all__ = ["__version__"]