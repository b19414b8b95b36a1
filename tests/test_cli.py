import json

import pytest

from mcphttp.cli import main, settings_from_env


def test_defaults():
    settings = settings_from_env({})
    assert settings.config_file == "mcp_servers.config.json"
    assert settings.server_name == "redmine"
    assert settings.port == 3000


def test_values_from_environment():
    settings = settings_from_env(
        {"MCP_CONFIG_FILE": "custom.json", "MCP_SERVER_NAME": "github", "PORT": "8080"}
    )
    assert (settings.config_file, settings.server_name, settings.port) == (
        "custom.json",
        "github",
        8080,
    )


@pytest.mark.parametrize("value", ["abc", "70000", "-1", "", "80.5"])
def test_invalid_port_falls_back(value):
    assert settings_from_env({"PORT": value}).port == 3000


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("MCP_SERVER_NAME", "filesystem")
    monkeypatch.delenv("PORT", raising=False)
    settings = settings_from_env()
    assert settings.server_name == "filesystem"
    assert settings.port == 3000


def test_main_missing_config(monkeypatch, tmp_path, capsys):
    missing = tmp_path / "absent.json"
    monkeypatch.setenv("MCP_CONFIG_FILE", str(missing))
    assert main([]) == 1
    assert "Failed to read config file" in capsys.readouterr().err


def test_main_unknown_server(monkeypatch, tmp_path, capsys):
    path = tmp_path / "servers.json"
    path.write_text(json.dumps({"servers": {}}))
    monkeypatch.setenv("MCP_CONFIG_FILE", str(path))
    monkeypatch.setenv("MCP_SERVER_NAME", "ghost")
    assert main([]) == 1
    assert "Server configuration not found for 'ghost'" in capsys.readouterr().err


def test_main_help():
    with pytest.raises(SystemExit) as info:
        main(["--help"])
    assert info.value.code == 0