"""HTTP front end that relays JSON-RPC messages to an MCP server process."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from collections.abc import Mapping
from datetime import datetime, timezone

from aiohttp import web

from .config import AuthConfig, McpServerConfig, McpServersConfig
from .errors import HttpServerError, McpCoreError, ProcessError, SerializationError
from .process import McpProcess, McpRequest

logger = logging.getLogger(__name__)

WORK_ROOT = "/tmp/mcp-servers"


def get_server_work_dir(server_name: str) -> str:
    """Return the working directory used for the named server."""
    return f"{WORK_ROOT}/{server_name}"


def _child_env(env_vars: Mapping[str, str]) -> dict[str, str]:
    # Configured variables first; the parent environment takes precedence.
    return {**env_vars, **os.environ}


async def _run_captured(
    argv: list[str], cwd: str, env: Mapping[str, str] | None = None
) -> tuple[int | None, bytes, bytes]:
    proc = await asyncio.create_subprocess_exec(
        *argv,
        cwd=cwd,
        env=None if env is None else dict(env),
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    return proc.returncode, stdout, stderr


def _text(data: bytes) -> str:
    return data.decode("utf-8", "replace").strip()


async def clone_repository_if_needed(repository_url: str, work_dir: str) -> None:
    """Clone ``repository_url`` into ``work_dir`` unless it already holds a repository."""
    logger.info("Checking repository: %s", repository_url)
    if os.path.exists(os.path.join(work_dir, ".git")):
        logger.info("Repository already exists in '%s', skipping clone", work_dir)
        return

    logger.info("Cloning repository '%s' to '%s'", repository_url, work_dir)
    start = time.monotonic()
    logger.debug("Executing: git clone %s .", repository_url)
    try:
        code, stdout, stderr = await _run_captured(
            ["git", "clone", repository_url, "."], cwd=work_dir
        )
    except OSError as exc:
        raise ProcessError(f"Failed to execute git clone: {exc}") from exc
    duration = time.monotonic() - start

    if stdout:
        logger.debug("Git clone stdout: %s", _text(stdout))
    if stderr:
        level = logging.DEBUG if code == 0 else logging.ERROR
        logger.log(level, "Git clone stderr: %s", _text(stderr))

    if code == 0:
        logger.info(
            "Repository cloned successfully in %.3fs: %s", duration, repository_url
        )
        return
    message = f"Git clone failed with exit code {code}: {repository_url}"
    logger.error("%s", message)
    raise ProcessError(message)


async def execute_build_command(
    build_cmd: str, work_dir: str, env_vars: Mapping[str, str]
) -> None:
    """Run ``build_cmd`` through the system shell inside ``work_dir``."""
    logger.info("Starting build process: %s", build_cmd)
    if os.name == "nt":
        argv = ["cmd", "/C", build_cmd]
    else:
        argv = ["sh", "-c", build_cmd]

    logger.debug("Executing build command in directory: %s", work_dir)
    start = time.monotonic()
    try:
        code, stdout, stderr = await _run_captured(
            argv, cwd=work_dir, env=_child_env(env_vars)
        )
    except OSError as exc:
        raise ProcessError(
            f"Failed to execute build command '{build_cmd}': {exc}"
        ) from exc
    duration = time.monotonic() - start

    if stdout:
        logger.info("Build stdout: %s", _text(stdout))
    if stderr:
        level = logging.INFO if code == 0 else logging.ERROR
        logger.log(level, "Build stderr: %s", _text(stderr))

    if code == 0:
        logger.info(
            "Build command completed successfully in %.3fs: %s", duration, build_cmd
        )
        return
    message = f"Build command failed with exit code {code}: {build_cmd}"
    logger.error("%s", message)
    raise ProcessError(message)


async def start_mcp_process(config: McpServerConfig, server_name: str) -> McpProcess:
    """Prepare the server's work directory, then clone, build and start it."""
    logger.info(
        "Starting MCP server '%s': %s %s", server_name, config.command, config.args
    )
    work_dir = get_server_work_dir(server_name)
    try:
        os.makedirs(work_dir, exist_ok=True)
    except OSError as exc:
        raise ProcessError(
            f"Failed to create work directory '{work_dir}': {exc}"
        ) from exc

    if config.repository is not None:
        await clone_repository_if_needed(config.repository, work_dir)

    if config.build_command is not None:
        logger.info("Executing build command: %s", config.build_command)
        await execute_build_command(config.build_command, work_dir, config.env)

    return await McpProcess.spawn(
        config.command, config.args, env=_child_env(config.env), cwd=work_dir
    )


async def health_check(request: web.Request) -> web.Response:
    """Report that the service is up, with the current UTC time."""
    return web.json_response(
        {
            "status": "healthy",
            "service": "mcp-http-core",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


def create_health_app() -> web.Application:
    """Build an application serving only ``GET /health``."""
    app = web.Application()
    app.router.add_get("/health", health_check)
    return app


class McpHttpServer:
    """Serves ``POST /api/v1`` by forwarding each request to one MCP process."""

    def __init__(self, auth_config: AuthConfig, process: McpProcess) -> None:
        self.auth_config = auth_config
        self.process = process

    @classmethod
    async def create(cls, config_file_path: str, server_name: str) -> McpHttpServer:
        """Load the configuration, start the named server and wrap it."""
        logger.info("Initializing MCP HTTP server...")
        logger.info("Config file: '%s', Server: '%s'", config_file_path, server_name)
        servers_config = McpServersConfig.load_from_file(config_file_path)
        server_config = servers_config.get_server(server_name)
        process = await start_mcp_process(server_config, server_name)
        auth_config = AuthConfig.from_env()
        logger.info("MCP HTTP server initialized successfully")
        return cls(auth_config, process)

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/api/v1", self.handle_mcp_request)
        return app

    async def handle_mcp_request(self, request: web.Request) -> web.Response:
        if request.content_type != "application/json":
            return web.Response(
                status=415, text="Expected request with `Content-Type: application/json`"
            )
        body = await request.text()
        try:
            json.loads(body)
        except json.JSONDecodeError as exc:
            return web.Response(status=400, text=f"Failed to parse the request body as JSON: {exc}")
        try:
            payload = McpRequest.from_json(body)
        except SerializationError as exc:
            return web.Response(status=422, text=str(exc))

        logger.debug("Received HTTP request: %r", payload)
        try:
            response = await self.process.query(payload)
        except McpCoreError as exc:
            logger.error("MCP query failed: %s", exc)
            return web.Response(status=500)
        logger.debug("MCP query successful: %r", response)
        return web.json_response({"result": response.result})

    async def serve(self, port: int) -> None:
        """Listen on all interfaces at ``port`` until cancelled."""
        address = f"0.0.0.0:{port}"
        logger.info("Starting HTTP server on %s", address)
        runner = web.AppRunner(self.create_app())
        await runner.setup()
        try:
            site = web.TCPSite(runner, "0.0.0.0", port)
            try:
                await site.start()
            except OSError as exc:
                raise HttpServerError(
                    f"Failed to bind to address {address}: {exc}"
                ) from exc
            logger.info("HTTP server listening on http://%s", address)
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()