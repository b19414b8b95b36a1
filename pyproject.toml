[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcphttp"
version = "0.1.0"
description = "Expose a stdio-based MCP (Model Context Protocol) server as an HTTP endpoint"
requires-python = ">=3.10"
dependencies = [
    "aiohttp",
]
keywords = ["mcp", "model-context-protocol", "http", "json-rpc", "server", "bridge"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
mcphttp = "mcphttp.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["mcphttp"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
