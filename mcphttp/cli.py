"""Command-line entry point that starts the MCP HTTP server."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import re
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .errors import McpCoreError
from .http_server import McpHttpServer

logger = logging.getLogger("mcphttp")

DEFAULT_CONFIG_FILE = "mcp_servers.config.json"
DEFAULT_SERVER_NAME = "redmine"
DEFAULT_PORT = 3000


@dataclass(frozen=True)
class Settings:
    """Values that select the configuration, the server and the port."""

    config_file: str
    server_name: str
    port: int


def _parse_port(text: str | None) -> int:
    if text is None or not re.fullmatch(r"\+?[0-9]+", text):
        return DEFAULT_PORT
    value = int(text)
    return value if value <= 0xFFFF else DEFAULT_PORT


def settings_from_env(environ: Mapping[str, str] | None = None) -> Settings:
    """Read MCP_CONFIG_FILE, MCP_SERVER_NAME and PORT, with defaults."""
    if environ is None:
        environ = os.environ
    return Settings(
        config_file=environ.get("MCP_CONFIG_FILE", DEFAULT_CONFIG_FILE),
        server_name=environ.get("MCP_SERVER_NAME", DEFAULT_SERVER_NAME),
        port=_parse_port(environ.get("PORT")),
    )


async def _run(settings: Settings) -> None:
    server = await McpHttpServer.create(settings.config_file, settings.server_name)
    logger.info("MCP HTTP Core server ready to accept connections")
    try:
        await server.serve(settings.port)
    finally:
        await server.process.close()


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="mcphttp",
        description=(
            "Serve an MCP server over HTTP. Configured through MCP_CONFIG_FILE, "
            "MCP_SERVER_NAME, PORT, HTTP_API_KEY and DISABLE_AUTH."
        ),
    )
    parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    logger.setLevel(logging.DEBUG)
    logger.info("Starting MCP HTTP Core server...")

    settings = settings_from_env()
    logger.info(
        "Configuration - Config: %s, Server: %s, Port: %d",
        settings.config_file,
        settings.server_name,
        settings.port,
    )
    try:
        asyncio.run(_run(settings))
    except McpCoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())