"""Shared pytest fixtures and test helpers for sambactl tests."""

from __future__ import annotations

import stat
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from click.testing import CliRunner

from sambactl.config.settings import SambaSettings
from sambactl.services.executor import SambaTool
from sambactl.services.telemetry import disable_telemetry


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host SAMBACTL_* variables and any system-wide config out of every test."""
    import os

    for key in list(os.environ):
        if key.startswith("SAMBACTL_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("sambactl.config.settings.SYSTEM_CONFIG", None)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    """The CLI enables telemetry in the calling context; switch it back off."""
    yield
    disable_telemetry()


@pytest.fixture
def settings() -> SambaSettings:
    """Settings with elevation off so argv is exactly what the caller built."""
    return SambaSettings(executor={"superuser": False})


# ---------------------------------------------------------------------------
# Fake spawn primitive
# ---------------------------------------------------------------------------


@dataclass
class SpawnCall:
    argv: list[str]
    timeout: float
    input: str | None
    env: dict[str, str]


@dataclass
class FakeSpawner:
    """Scripted stand-in for :func:`sambactl.infrastructure.process.spawn`.

    Each call pops the next outcome: a string is returned as stdout, an
    exception is raised. The last outcome repeats once the script runs out.
    """

    outcomes: list[str | BaseException] = field(default_factory=lambda: [""])
    calls: list[SpawnCall] = field(default_factory=list)

    async def __call__(
        self,
        argv: Sequence[str],
        *,
        timeout: float,
        input: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        self.calls.append(SpawnCall(list(argv), timeout, input, dict(env or {})))
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def fake_spawner() -> FakeSpawner:
    return FakeSpawner()


@pytest.fixture
def tool(settings: SambaSettings, fake_spawner: FakeSpawner) -> SambaTool:
    """SambaTool wired to the fake spawner."""
    return SambaTool(settings, spawner=fake_spawner)


@dataclass
class SleepRecorder:
    """Async sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


# ---------------------------------------------------------------------------
# Fake samba-tool binary for end-to-end tests
# ---------------------------------------------------------------------------


_FAKE_TOOL = """\
#!/bin/sh
case "$1 $2" in
  "--version ") printf 'Version 4.19.5-Debian\\nHAVE_LDAP\\nHAVE_GNUTLS\\n' ;;
  "user list") printf 'alice\\n\\nBob\\n  carol  \\n' ;;
  "group list") printf 'Domain Admins\\nstaff\\n' ;;
  "group listmembers") printf 'alice\\nbob\\n' ;;
  "user show")
    if [ "$3" = "ghost" ]; then
      echo "ERROR: user 'ghost' not found" >&2
      exit 255
    fi
    printf 'dn: CN=%s,CN=Users,DC=example,DC=com\\nsAMAccountName: %s\\nmemberOf: CN=staff,DC=example,DC=com\\nmemberOf: CN=ops,DC=example,DC=com\\n' "$3" "$3"
    ;;
  "fsmo show") printf 'SchemaMasterRole owner: CN=NTDS Settings,CN=DC1,DC=example,DC=com\\nRidAllocationMasterRole owner: CN=NTDS Settings,CN=DC1,DC=example,DC=com\\n' ;;
  "domain info") echo "Failed to connect to host $3" >&2; exit 1 ;;
  *) echo "unexpected: $*" >&2; exit 2 ;;
esac
"""


@pytest.fixture
def fake_samba_tool(tmp_path: Path) -> Path:
    """Executable shell script that imitates the samba-tool commands we read."""
    script = tmp_path / "bin" / "samba-tool"
    script.parent.mkdir()
    script.write_text(_FAKE_TOOL, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def fake_tool_env(fake_samba_tool: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at the fake binary, without elevation or retry delays."""
    monkeypatch.setenv("SAMBACTL_TOOL__BINARY", str(fake_samba_tool))
    monkeypatch.setenv("SAMBACTL_EXECUTOR__SUPERUSER", "false")
    monkeypatch.setenv("SAMBACTL_RETRY__BASE_DELAY", "0")
    monkeypatch.chdir(fake_samba_tool.parent)
    return fake_samba_tool

