"""Error types raised by the MCP HTTP core."""

from __future__ import annotations


class McpCoreError(Exception):
    """Base class for every error raised by this package."""

    prefix = "MCP core error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.prefix}: {self.message}"


class AuthenticationError(McpCoreError):
    """A request could not be authenticated."""

    prefix = "Authentication failed"


class ConfigurationError(McpCoreError):
    """The configuration could not be read, parsed or resolved."""

    prefix = "Configuration error"


class ProcessError(McpCoreError):
    """Starting or talking to a child process failed."""

    prefix = "Process communication error"


class McpRuntimeError(McpCoreError):
    """A runtime environment could not be prepared or used."""

    prefix = "Runtime error"


class HttpServerError(McpCoreError):
    """The HTTP server could not be started or stopped running."""

    prefix = "HTTP server error"


class SerializationError(McpCoreError, ValueError):
    """Data could not be converted to or from JSON."""

    prefix = "Serialization error"


class McpIoError(McpCoreError, OSError):
    """An input/output operation failed."""

    prefix = "IO error"

    def __init__(self, message: str) -> None:
        McpCoreError.__init__(self, message)

    def __str__(self) -> str:
        return McpCoreError.__str__(self)