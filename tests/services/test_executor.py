"""Tests for the SambaTool executor."""

from __future__ import annotations

import asyncio

import pytest

from sambactl.config.settings import SambaSettings
from sambactl.domain.errors import ErrorKind, SambaToolError
from sambactl.infrastructure.process import (
    ProcessExitError,
    ProcessStartError,
    ProcessTimeoutError,
)
from sambactl.services import executor as executor_mod
from sambactl.services.executor import CommandOptions, SambaTool
from sambactl.services.retry import RetryOptions


class TestExecute:
    def test_returns_stdout(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = ["alice\nbob\n"]
        assert asyncio.run(tool.execute(tool.build("user", "list"))) == "alice\nbob\n"
        assert fake_spawner.calls[0].argv == ["samba-tool", "user", "list"]

    def test_empty_output_is_empty_string(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [""]
        assert asyncio.run(tool.execute(["samba-tool", "user", "list"])) == ""

    def test_arguments_sanitized_before_spawn(self, tool: SambaTool, fake_spawner) -> None:
        asyncio.run(tool.execute(["samba-tool", "user", "show", "alice; rm -rf /", "$(id)"]))
        argv = fake_spawner.calls[0].argv
        assert argv == ["samba-tool", "user", "show", "alice rm -rf /", "id"]

    def test_overlong_argument_never_spawns(self, fake_spawner) -> None:
        settings = SambaSettings(executor={"superuser": False, "max_arg_length": 10})
        tool = SambaTool(settings, spawner=fake_spawner)
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.execute(["samba-tool", "user", "show", "toolongname"]))
        assert excinfo.value.kind is ErrorKind.VALIDATION
        assert excinfo.value.code == "INVALID_INPUT"
        assert fake_spawner.calls == []

    def test_nul_byte_never_spawns(self, tool: SambaTool, fake_spawner) -> None:
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.execute(["samba-tool", "user", "show", "bob\x00"]))
        assert excinfo.value.kind is ErrorKind.VALIDATION
        assert excinfo.value.code == "INVALID_INPUT"
        assert fake_spawner.calls == []

    def test_empty_vector_never_spawns(self, tool: SambaTool, fake_spawner) -> None:
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.execute([], CommandOptions(superuser=False)))
        assert excinfo.value.kind is ErrorKind.VALIDATION
        assert fake_spawner.calls == []

    def test_timeout_and_input_forwarded(self, tool: SambaTool, fake_spawner) -> None:
        opts = CommandOptions(timeout=2.5, input="secret\n", env={"LC_ALL": "C"})
        asyncio.run(tool.execute(["samba-tool", "user", "setpassword", "alice"], opts))
        call = fake_spawner.calls[0]
        assert call.timeout == 2.5
        assert call.input == "secret\n"
        assert call.env == {"LC_ALL": "C"}

    def test_default_timeout_from_settings(self, fake_spawner) -> None:
        settings = SambaSettings(executor={"superuser": False, "timeout": 12})
        asyncio.run(SambaTool(settings, spawner=fake_spawner).execute(["samba-tool"]))
        assert fake_spawner.calls[0].timeout == 12

    def test_execute_sync(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = ["ok"]
        assert tool.execute_sync(["samba-tool", "fsmo", "show"]) == "ok"


class TestElevation:
    def test_elevation_prefix_when_not_root(self, fake_spawner, monkeypatch) -> None:
        monkeypatch.setattr(executor_mod, "_is_root", lambda: False)
        tool = SambaTool(SambaSettings(), spawner=fake_spawner)
        asyncio.run(tool.execute(["samba-tool", "user", "list"]))
        assert fake_spawner.calls[0].argv == ["sudo", "-n", "samba-tool", "user", "list"]

    def test_no_prefix_when_root(self, fake_spawner, monkeypatch) -> None:
        monkeypatch.setattr(executor_mod, "_is_root", lambda: True)
        tool = SambaTool(SambaSettings(), spawner=fake_spawner)
        asyncio.run(tool.execute(["samba-tool", "user", "list"]))
        assert fake_spawner.calls[0].argv[0] == "samba-tool"

    def test_per_call_override(self, fake_spawner, monkeypatch) -> None:
        monkeypatch.setattr(executor_mod, "_is_root", lambda: False)
        tool = SambaTool(SambaSettings(), spawner=fake_spawner)
        asyncio.run(tool.execute(["samba-tool", "user", "list"], CommandOptions(superuser=False)))
        assert fake_spawner.calls[0].argv[0] == "samba-tool"

    def test_custom_elevation_command(self, fake_spawner, monkeypatch) -> None:
        monkeypatch.setattr(executor_mod, "_is_root", lambda: False)
        settings = SambaSettings(tool={"elevation": ["doas"]})
        asyncio.run(SambaTool(settings, spawner=fake_spawner).execute(["samba-tool"]))
        assert fake_spawner.calls[0].argv == ["doas", "samba-tool"]


class TestFaultMapping:
    def test_timeout_becomes_timeout_error(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [ProcessTimeoutError(["samba-tool"], 30)]
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.execute(["samba-tool", "user", "list"]))
        error = excinfo.value.error
        assert error.kind is ErrorKind.TIMEOUT
        assert error.details["operation"] == "samba-tool user list"
        assert error.retryable is True

    def test_exit_error_classified(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [
            ProcessExitError(["samba-tool"], 255, "", "ERROR: group 'admins' already exists")
        ]
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.execute(["samba-tool", "group", "add", "admins"]))
        error = excinfo.value.error
        assert error.kind is ErrorKind.CONFLICT
        assert error.details["name"] == "admins"
        assert error.details["exit_status"] == 255
        assert error.details["operation"] == "samba-tool group add admins"

    def test_exit_error_falls_back_to_stdout(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [ProcessExitError(["samba-tool"], 1, "Connection refused", "")]
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.execute(["samba-tool", "domain", "info", "dc1"]))
        assert excinfo.value.kind is ErrorKind.NETWORK

    def test_start_failure_classified(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [
            ProcessStartError(["samba-tool"], FileNotFoundError(2, "No such file"))
        ]
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.execute(["samba-tool", "user", "list"]))
        error = excinfo.value.error
        assert error.kind is ErrorKind.GENERIC
        assert error.details["spawn_failed"] is True

    def test_password_masked_in_operation(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [ProcessExitError(["samba-tool"], 1, "", "ERROR: weird failure")]
        args = ["samba-tool", "user", "setpassword", "bob", "--newpassword", "S3cret!"]
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.execute(args))
        operation = excinfo.value.error.details["operation"]
        assert operation == "samba-tool user setpassword bob --newpassword ***"
        assert fake_spawner.calls[0].argv[-1] == "S3cret!"


class TestRetryOption:
    def test_retries_network_failures(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [
            ProcessExitError(["samba-tool"], 1, "", "Failed to connect to host"),
            ProcessExitError(["samba-tool"], 1, "", "Failed to connect to host"),
            "ok",
        ]
        opts = CommandOptions(retry=RetryOptions(max_attempts=3, base_delay=0))
        assert asyncio.run(tool.execute(["samba-tool", "domain", "info"], opts)) == "ok"
        assert len(fake_spawner.calls) == 3

    def test_no_retry_without_option(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [ProcessExitError(["samba-tool"], 1, "", "connection refused")]
        with pytest.raises(SambaToolError):
            asyncio.run(tool.execute(["samba-tool", "domain", "info"]))
        assert len(fake_spawner.calls) == 1

    def test_conflict_not_retried(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [
            ProcessExitError(["samba-tool"], 1, "", "user 'alice' already exists")
        ]
        opts = CommandOptions(retry=RetryOptions(max_attempts=5, base_delay=0))
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.execute(["samba-tool", "user", "create", "alice"], opts))
        assert excinfo.value.kind is ErrorKind.CONFLICT
        assert len(fake_spawner.calls) == 1

    def test_default_retry_from_settings(self) -> None:
        settings = SambaSettings(retry={"max_attempts": 7, "base_delay": 0.25, "jitter": 0.1})
        opts = SambaTool(settings).default_retry()
        assert opts.max_attempts == 7
        assert opts.base_delay == 0.25
        assert opts.jitter == 0.1


class TestHealthChecks:
    def test_get_version(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = ["Version 4.19.5-Debian\nHAVE_LDAP\n  HAVE_GNUTLS\nother\n"]
        info = asyncio.run(tool.get_version())
        assert info.version == "4.19.5"
        assert info.features == ["HAVE_LDAP", "HAVE_GNUTLS"]
        assert fake_spawner.calls[0].argv == ["samba-tool", "--version"]

    def test_get_version_unknown(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = ["custom build\n"]
        assert asyncio.run(tool.get_version()).version == "unknown"

    def test_get_version_failure(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [ProcessExitError(["samba-tool"], 127, "", "not installed")]
        with pytest.raises(SambaToolError) as excinfo:
            asyncio.run(tool.get_version())
        assert excinfo.value.code == "VERSION_ERROR"
        assert "cause" in excinfo.value.error.details

    def test_connection_ok(self, tool: SambaTool, fake_spawner) -> None:
        assert asyncio.run(tool.test_connection("dc1")) is True
        call = fake_spawner.calls[0]
        assert call.argv == ["samba-tool", "domain", "info", "dc1"]
        assert call.timeout == 5.0

    def test_connection_failure(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [ProcessTimeoutError(["samba-tool"], 5.0)]
        assert asyncio.run(tool.test_connection()) is False

    def test_command_exists(self, fake_spawner, monkeypatch) -> None:
        monkeypatch.setattr(executor_mod, "_is_root", lambda: False)
        tool = SambaTool(SambaSettings(), spawner=fake_spawner)
        assert asyncio.run(tool.command_exists("samba-tool")) is True
        assert fake_spawner.calls[0].argv == ["which", "samba-tool"]

    def test_command_missing(self, tool: SambaTool, fake_spawner) -> None:
        fake_spawner.outcomes = [ProcessExitError(["which"], 1, "", "")]
        assert asyncio.run(tool.command_exists("nope")) is False
