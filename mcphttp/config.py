"""Configuration of MCP servers and of HTTP authentication."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ConfigurationError, SerializationError

DEFAULT_VERSION = "1.0"


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise SerializationError(f"invalid type for {what}: expected an object")
    return data


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise SerializationError(f"invalid type for '{key}': expected a string")


def _str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SerializationError(f"invalid type for '{key}': expected a list of strings")
    return list(value)


def _optional_str_list(data: Mapping[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    return None if value is None else _str_list(value, key)


def _str_map(value: Any, key: str) -> dict[str, str]:
    if not isinstance(value, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise SerializationError(f"invalid type for '{key}': expected a map of strings")
    return dict(value)


@dataclass
class NodeConfig:
    """Node.js runtime settings."""

    version: str | None = None
    package_manager: str | None = None
    install_flags: list[str] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> NodeConfig:
        data = _mapping(data, "node configuration")
        return cls(
            version=_optional_str(data, "version"),
            package_manager=_optional_str(data, "package_manager"),
            install_flags=_optional_str_list(data, "install_flags"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "package_manager": self.package_manager,
            "install_flags": None if self.install_flags is None else list(self.install_flags),
        }


@dataclass
class PythonConfig:
    """Python runtime settings."""

    version: str | None = None
    venv_path: str | None = None
    requirements_file: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PythonConfig:
        data = _mapping(data, "python configuration")
        return cls(
            version=_optional_str(data, "version"),
            venv_path=_optional_str(data, "venv_path"),
            requirements_file=_optional_str(data, "requirements_file"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "venv_path": self.venv_path,
            "requirements_file": self.requirements_file,
        }


@dataclass
class GoConfig:
    """Go runtime settings."""

    version: str | None = None
    module_path: str | None = None
    build_flags: list[str] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> GoConfig:
        data = _mapping(data, "go configuration")
        return cls(
            version=_optional_str(data, "version"),
            module_path=_optional_str(data, "module_path"),
            build_flags=_optional_str_list(data, "build_flags"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "module_path": self.module_path,
            "build_flags": None if self.build_flags is None else list(self.build_flags),
        }


@dataclass
class RuntimeConfig:
    """Runtime-specific settings for a server."""

    node: NodeConfig | None = None
    python: PythonConfig | None = None
    go: GoConfig | None = None

    @classmethod
    def from_dict(cls, data: Any) -> RuntimeConfig:
        data = _mapping(data, "runtime_config")
        node, python, go = data.get("node"), data.get("python"), data.get("go")
        return cls(
            node=None if node is None else NodeConfig.from_dict(node),
            python=None if python is None else PythonConfig.from_dict(python),
            go=None if go is None else GoConfig.from_dict(go),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "node": None if self.node is None else self.node.to_dict(),
            "python": None if self.python is None else self.python.to_dict(),
            "go": None if self.go is None else self.go.to_dict(),
        }


@dataclass
class McpServerConfig:
    """How to fetch, build and run one MCP server."""

    command: str
    repository: str | None = None
    build_command: str | None = None
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    runtime_config: RuntimeConfig = field(default_factory=RuntimeConfig)

    @classmethod
    def from_dict(cls, data: Any) -> McpServerConfig:
        data = _mapping(data, "server configuration")
        if "command" not in data:
            raise SerializationError("missing field 'command'")
        command = data["command"]
        if not isinstance(command, str):
            raise SerializationError("invalid type for 'command': expected a string")
        return cls(
            command=command,
            repository=_optional_str(data, "repository"),
            build_command=_optional_str(data, "build_command"),
            args=_str_list(data["args"], "args") if "args" in data else [],
            env=_str_map(data["env"], "env") if "env" in data else {},
            runtime_config=(
                RuntimeConfig.from_dict(data["runtime_config"])
                if "runtime_config" in data
                else RuntimeConfig()
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "repository": self.repository,
            "build_command": self.build_command,
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
            "runtime_config": self.runtime_config.to_dict(),
        }


@dataclass
class McpServersConfig:
    """The set of configured MCP servers, keyed by name."""

    version: str = DEFAULT_VERSION
    servers: dict[str, McpServerConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> McpServersConfig:
        data = _mapping(data, "configuration")
        version = data.get("version", DEFAULT_VERSION)
        if not isinstance(version, str):
            raise SerializationError("invalid type for 'version': expected a string")
        if "servers" not in data:
            raise SerializationError("missing field 'servers'")
        servers = _mapping(data["servers"], "'servers'")
        return cls(
            version=version,
            servers={name: McpServerConfig.from_dict(cfg) for name, cfg in servers.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "servers": {name: cfg.to_dict() for name, cfg in self.servers.items()},
        }

    @classmethod
    def load_from_file(cls, path: str | os.PathLike[str]) -> McpServersConfig:
        """Read and parse a JSON configuration file."""
        try:
            with open(path, encoding="utf-8") as handle:
                content = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(
                f"Failed to read config file '{os.fspath(path)}': {exc}"
            ) from exc
        try:
            return cls.from_dict(json.loads(content))
        except (json.JSONDecodeError, SerializationError) as exc:
            detail = exc.message if isinstance(exc, SerializationError) else exc
            raise ConfigurationError(
                f"Failed to parse config file '{os.fspath(path)}': {detail}"
            ) from exc

    def get_server(self, name: str) -> McpServerConfig:
        try:
            return self.servers[name]
        except KeyError:
            raise ConfigurationError(
                f"Server configuration not found for '{name}'"
            ) from None


@dataclass
class AuthConfig:
    """Bearer-token authentication settings."""

    api_key: str | None = None
    enabled: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AuthConfig:
        """Build from HTTP_API_KEY and DISABLE_AUTH in the given environment."""
        if environ is None:
            environ = os.environ
        api_key = environ.get("HTTP_API_KEY")
        disable_auth = environ.get("DISABLE_AUTH", "false") == "true"
        return cls(api_key=api_key, enabled=not disable_auth and api_key is not None)