import json
import os
import sys

import pytest

from mcphttp.errors import ProcessError, SerializationError
from mcphttp.process import McpProcess, McpRequest, McpResponse

ECHO = (
    "import sys\n"
    "for line in sys.stdin:\n"
    "    sys.stdout.write(line)\n"
    "    sys.stdout.flush()\n"
)


def script(code):
    return [sys.executable, "-c", code]


def test_mcp_request_serialization():
    request = McpRequest(
        command='{"jsonrpc": "2.0", "id": 1, "method": "tools/list", "params": {}}'
    )
    text = request.to_json()
    assert "command" in text
    assert "tools/list" in text


def test_mcp_response_serialization():
    response = McpResponse(result='{"jsonrpc": "2.0", "id": 1, "result": {"tools": []}}')
    text = response.to_json()
    assert "result" in text
    assert "tools" in text


def test_request_and_response_round_trip():
    request = McpRequest(command='{"id": 7}')
    assert McpRequest.from_json(request.to_json()) == request
    response = McpResponse(result="ok")
    assert McpResponse.from_json(response.to_json()) == response
    assert json.loads(request.to_json()) == {"command": '{"id": 7}'}


@pytest.mark.parametrize("text", ["{}", "[]", "not json", '{"command": 3}'])
def test_invalid_request_json(text):
    with pytest.raises(SerializationError):
        McpRequest.from_json(text)


@pytest.mark.asyncio
async def test_query_returns_trimmed_line():
    command, *args = script(ECHO)
    async with await McpProcess.spawn(command, args) as proc:
        message = '{"jsonrpc": "2.0", "id": 1, "method": "tools/list"}'
        response = await proc.query(McpRequest(command=message))
        assert response.result == message
        second = await proc.query(McpRequest(command="  padded  "))
        assert second.result == "padded"


@pytest.mark.asyncio
async def test_env_and_cwd_are_passed(tmp_path):
    code = (
        "import os, sys\n"
        "for line in sys.stdin:\n"
        "    print(os.environ['MCP_TEST_VALUE'] + '|' + os.getcwd(), flush=True)\n"
    )
    command, *args = script(code)
    env = {**os.environ, "MCP_TEST_VALUE": "hello"}
    async with await McpProcess.spawn(command, args, env, str(tmp_path)) as proc:
        response = await proc.query(McpRequest(command="x"))
    value, cwd = response.result.split("|", 1)
    assert value == "hello"
    assert os.path.realpath(cwd) == os.path.realpath(tmp_path)


@pytest.mark.asyncio
async def test_empty_line_is_an_error():
    code = "import sys\nfor line in sys.stdin:\n    print(flush=True)\n"
    command, *args = script(code)
    async with await McpProcess.spawn(command, args) as proc:
        with pytest.raises(ProcessError) as info:
            await proc.query(McpRequest(command="x"))
    assert info.value.message == "MCP server returned an empty line"


@pytest.mark.asyncio
async def test_eof_is_an_error():
    code = "import sys\nsys.stdin.readline()\n"
    command, *args = script(code)
    async with await McpProcess.spawn(command, args) as proc:
        with pytest.raises(ProcessError) as info:
            await proc.query(McpRequest(command="x"))
    assert "EOF" in info.value.message or "write" in info.value.message


@pytest.mark.asyncio
async def test_timeout_is_an_error():
    code = "import sys, time\nsys.stdin.readline()\ntime.sleep(30)\n"
    command, *args = script(code)
    async with await McpProcess.spawn(command, args) as proc:
        proc.response_timeout = 0.2
        with pytest.raises(ProcessError) as info:
            await proc.query(McpRequest(command="x"))
    assert info.value.message == "MCP server response timeout (0.2 seconds)"


@pytest.mark.asyncio
async def test_spawn_missing_command(tmp_path):
    missing = str(tmp_path / "no-such-program")
    with pytest.raises(ProcessError) as info:
        await McpProcess.spawn(missing, [])
    assert info.value.message.startswith("Failed to spawn MCP process")