"""Wrapper around an MCP server child process speaking line-delimited JSON-RPC."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from .errors import ProcessError, SerializationError

logger = logging.getLogger(__name__)

_STREAM_LIMIT = 64 * 1024 * 1024


def _load_object(text: str | bytes) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SerializationError(str(exc)) from exc
    if not isinstance(data, dict):
        raise SerializationError("expected a JSON object")
    return data


def _string_field(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise SerializationError(f"missing field '{key}'")
    value = data[key]
    if not isinstance(value, str):
        raise SerializationError(f"invalid type for '{key}': expected a string")
    return value


@dataclass
class McpRequest:
    """An HTTP request body; ``command`` holds the JSON-RPC message to send."""

    command: str

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, text: str | bytes) -> McpRequest:
        return cls(command=_string_field(_load_object(text), "command"))


@dataclass
class McpResponse:
    """The reply line the MCP server produced, as raw text."""

    result: str

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, text: str | bytes) -> McpResponse:
        return cls(result=_string_field(_load_object(text), "result"))


class McpProcess:
    """A running MCP server talked to over its standard input and output."""

    response_timeout: float = 3600.0

    def __init__(self, proc: asyncio.subprocess.Process) -> None:
        self._proc = proc
        self._lock = asyncio.Lock()
        self._stderr_task = asyncio.create_task(self._watch_stderr())

    @classmethod
    async def spawn(
        cls,
        command: str,
        args: Sequence[str] = (),
        env: Mapping[str, str] | None = None,
        cwd: str | os.PathLike[str] | None = None,
    ) -> McpProcess:
        """Start ``command`` with piped stdio; ``env`` is the full child environment."""
        logger.debug("Spawning MCP process...")
        try:
            proc = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=None if env is None else dict(env),
                cwd=cwd,
                limit=_STREAM_LIMIT,
            )
        except OSError as exc:
            raise ProcessError(f"Failed to spawn MCP process: {exc}") from exc
        logger.debug("MCP process spawned successfully")
        return cls(proc)

    @property
    def pid(self) -> int:
        return self._proc.pid

    async def _watch_stderr(self) -> None:
        stderr = self._proc.stderr
        if stderr is None:
            return
        try:
            while line := await stderr.readline():
                logger.debug("MCP server stderr: %s", line.decode("utf-8", "replace").strip())
        except (OSError, ValueError, asyncio.LimitOverrunError) as exc:
            logger.error("MCP server stderr read error: %s", exc)
            return
        logger.debug("MCP server stderr: EOF, task finishing")

    async def query(self, request: McpRequest) -> McpResponse:
        """Send one message and wait for one line of reply."""
        async with self._lock:
            start = time.monotonic()
            logger.debug("Starting MCP query: %r", request)
            message = request.command
            logger.debug("Sending to MCP server: %s", message)

            stdin = self._proc.stdin
            if stdin is None:
                raise ProcessError("Failed to open stdin for MCP process")
            try:
                stdin.write((message + "\n").encode("utf-8"))
                await stdin.drain()
            except (OSError, RuntimeError) as exc:
                raise ProcessError(f"Failed to write to MCP stdin: {exc}") from exc

            logger.debug("Data sent to MCP server, waiting for response...")
            try:
                response = await asyncio.wait_for(
                    self._read_response(), timeout=self.response_timeout
                )
            except asyncio.TimeoutError:
                logger.debug("MCP query timed out after %g seconds", self.response_timeout)
                raise ProcessError(
                    f"MCP server response timeout ({self.response_timeout:g} seconds)"
                ) from None
            logger.debug("MCP query completed in %.3fs", time.monotonic() - start)
            return response

    async def _read_response(self) -> McpResponse:
        stdout = self._proc.stdout
        if stdout is None:
            raise ProcessError("Failed to open stdout for MCP process")
        try:
            raw = await stdout.readline()
            line = raw.decode("utf-8")
        except (OSError, ValueError, asyncio.LimitOverrunError) as exc:
            raise ProcessError(f"Failed to read from MCP stdout: {exc}") from exc
        if not raw:
            logger.debug("MCP server closed connection (EOF)")
            raise ProcessError("MCP server closed the connection (EOF)")
        logger.debug("Read %d bytes from MCP server", len(raw))
        text = line.strip()
        if not text:
            raise ProcessError("MCP server returned an empty line")
        return McpResponse(result=text)

    async def close(self) -> None:
        """Close stdin, stop the process and wait for it to exit."""
        stdin = self._proc.stdin
        if stdin is not None and not stdin.is_closing():
            stdin.close()
        if self._proc.returncode is None:
            try:
                self._proc.terminate()
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(self._proc.wait(), timeout=5)
            except asyncio.TimeoutError:
                self._proc.kill()
                await self._proc.wait()
        try:
            await asyncio.wait_for(self._stderr_task, timeout=5)
        except (asyncio.TimeoutError, asyncio.CancelledError):
            self._stderr_task.cancel()

    async def __aenter__(self) -> McpProcess:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()