import pytest

from mcphttp.errors import (
    AuthenticationError,
    ConfigurationError,
    HttpServerError,
    McpCoreError,
    McpIoError,
    McpRuntimeError,
    ProcessError,
    SerializationError,
)


@pytest.mark.parametrize(
    "cls, prefix",
    [
        (AuthenticationError, "Authentication failed"),
        (ConfigurationError, "Configuration error"),
        (ProcessError, "Process communication error"),
        (McpRuntimeError, "Runtime error"),
        (HttpServerError, "HTTP server error"),
        (SerializationError, "Serialization error"),
        (McpIoError, "IO error"),
    ],
)
def test_display_carries_prefix_and_message(cls, prefix):
    err = cls("boom")
    assert str(err) == f"{prefix}: boom"
    assert err.message == "boom"


@pytest.mark.parametrize(
    "cls",
    [
        AuthenticationError,
        ConfigurationError,
        ProcessError,
        McpRuntimeError,
        HttpServerError,
        SerializationError,
        McpIoError,
    ],
)
def test_all_errors_are_caught_by_base(cls):
    err = cls("failure")
    assert isinstance(err, McpCoreError)
    assert err.message == "failure"
    assert str(err).endswith(": failure")


def test_serialization_error_is_value_error():
    err = SerializationError("bad json")
    assert isinstance(err, ValueError)
    assert str(err) == "Serialization error: bad json"
    assert err.message == "bad json"


def test_io_error_is_os_error():
    err = McpIoError("disk gone")
    assert isinstance(err, OSError)
    assert str(err) == "IO error: disk gone"
    assert err.message == "disk gone"