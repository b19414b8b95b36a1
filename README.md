# mcphttp

`mcphttp` runs an MCP (Model Context Protocol) server that speaks JSON-RPC
over stdin/stdout and puts an HTTP endpoint in front of it. Each HTTP request
carries one JSON-RPC message; it is written to the server's stdin as a single
line, and the next line the server prints is returned as the response.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Configuration file

Servers are described in a JSON file. Only `servers` and, for each server,
`command` are required; `version` defaults to `"1.0"`, `args` to an empty
list and `env` to an empty map.

```json
{
  "version": "1.0",
  "servers": {
    "redmine": {
      "repository": "https://git.example.com/tools/redmine-mcp.git",
      "build_command": "npm install && npm run build",
      "command": "node",
      "args": ["dist/index.js"],
      "env": {
        "REDMINE_URL": "https://redmine.example.com",
        "REDMINE_API_KEY": "placeholder"
      },
      "runtime_config": {
        "node": {"version": "20", "package_manager": "npm"}
      }
    }
  }
}
```

`runtime_config` may hold `node`, `python` and `go` sections. They are read
and checked for type, but nothing is done with them when the server starts.

On start-up the selected server gets its own working directory,
`/tmp/mcp-servers/<server name>`, created if needed. If `repository` is set
and that directory has no `.git` entry yet, `git clone <repository> .` is run
there (so `git` must be installed). If `build_command` is set, it is run in
that directory through `sh -c` (`cmd /C` on Windows); a non-zero exit stops
start-up. The server `command` is then started in that directory with its
`args`. Its environment is the configured `env` merged with the current
process environment; where both set a variable, the current environment wins.

## Running

```
mcphttp
```

The command takes no options besides `--help`. Settings come from the
environment:

| Variable          | Default                   | Meaning                            |
|-------------------|---------------------------|------------------------------------|
| `MCP_CONFIG_FILE` | `mcp_servers.config.json` | Path of the configuration file     |
| `MCP_SERVER_NAME` | `redmine`                 | Which entry of `servers` to run    |
| `PORT`            | `3000`                    | HTTP port, listening on `0.0.0.0`  |

A `PORT` that is not a whole number from 0 to 65535 falls back to 3000.
If start-up fails (unreadable configuration, unknown server name, failed
clone or build, port in use) the command prints the error and exits with
status 1. Ctrl-C stops it with status 130.

## Sending requests

`POST /api/v1` with `Content-Type: application/json` and a body whose
`command` field holds the JSON-RPC message as a string:

```
curl -X POST http://localhost:3000/api/v1 \
  -H "Content-Type: application/json" \
  -d '{"command": "{\"jsonrpc\": \"2.0\", \"id\": 1, \"method\": \"tools/list\", \"params\": {}}"}'
```

The reply has the server's output line, stripped of surrounding whitespace
but otherwise unchanged, in `result`:

```json
{"result": "{\"jsonrpc\": \"2.0\", \"id\": 1, \"result\": {\"tools\": []}}"}
```

Status codes:

- 415 when the content type is not `application/json`;
- 400 when the body is not valid JSON;
- 422 when the body has no string `command` field;
- 500 when the server process closes its output, prints an empty line, or
  does not answer within an hour.

Requests are handled one at a time against the single server process.

## What it does not do

- No authentication is enforced. `mcphttp.config.AuthConfig.from_env()`
  reads `HTTP_API_KEY` and `DISABLE_AUTH` (enabled only when a key is set and
  `DISABLE_AUTH` is not `true`), and `McpHttpServer` keeps the result as
  `auth_config`, but `POST /api/v1` accepts requests without checking any
  `Authorization` header. Put the service behind something that checks
  credentials if it must not be open.
- The server started by `mcphttp` has no health route. A `GET /health`
  route exists only in the separate application from `create_health_app()`.
- Runtime sections (`node`, `python`, `go`) do not install or select
  runtimes.

## Using it from Python

```python
import asyncio
import os

from mcphttp.config import McpServersConfig
from mcphttp.process import McpProcess, McpRequest


async def run() -> None:
    config = McpServersConfig.load_from_file("mcp_servers.config.json")
    server = config.get_server("redmine")
    process = await McpProcess.spawn(
        server.command, server.args, {**server.env, **os.environ}, None
    )
    async with process:
        request = McpRequest(
            command='{"jsonrpc": "2.0", "id": 1, "method": "tools/list", "params": {}}'
        )
        response = await process.query(request)
        print(response.result)


asyncio.run(run())
```

`McpProcess.spawn` uses `env`, when given, as the whole environment of the
child. `close()` (or leaving the `async with` block) closes stdin, terminates
the process and waits for it.

`mcphttp.http_server.McpHttpServer.create(config_file_path, server_name)`
prepares a server the same way the command does, `create_app()` returns its
aiohttp application for embedding elsewhere, and `serve(port)` runs it until
cancelled. The steps are also available on their own as
`get_server_work_dir`, `clone_repository_if_needed`, `execute_build_command`
and `start_mcp_process`.

Configuration objects convert to and from plain dictionaries with
`from_dict` and `to_dict`; `McpRequest` and `McpResponse` have `to_json` and
`from_json`.

Failures are raised as subclasses of `mcphttp.errors.McpCoreError`:
`ConfigurationError` for an unreadable or invalid file or an unknown server
name, `ProcessError` for problems running git, the build command or the
server process, `HttpServerError` when the port cannot be bound, and
`SerializationError` for data of the wrong shape.