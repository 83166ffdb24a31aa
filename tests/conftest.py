"""Shared test fixtures."""

import subprocess
import sys
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

# Add project root to path for package imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from uptimectl.core.config import Config  # noqa: E402
from uptimectl.core.controller import RunController  # noqa: E402
from uptimectl.core.logging import RunLogger  # noqa: E402
from uptimectl.lib.notify import NotifierError  # noqa: E402
from uptimectl.lib.restart import RestartError  # noqa: E402
from uptimectl.lib.triggers import TriggerError  # noqa: E402

# Wednesday, 9 AM
START_TIME = datetime(2015, 3, 18, 9, 0, 0)


class FakeStdin:
    """Records what is written to a child process."""

    def __init__(self):
        self.lines: list[str] = []
        self.closed = False

    def write(self, data: str) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed file")
        self.lines.append(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


class FakeProcess:
    """Stands in for subprocess.Popen."""

    def __init__(self, cmd: list[str]):
        self.cmd = cmd
        self.stdin = FakeStdin()
        self.terminated = False

    def terminate(self) -> None:
        self.terminated = True


class MockContext:
    """Mock Context for testing without real system access."""

    def __init__(
        self,
        command_outputs: dict[tuple, str | Exception] | None = None,
        file_contents: dict[str, str] | None = None,
        env: dict[str, str] | None = None,
        system: str = "Linux",
        uptime: int | None = None,
        clock: float = 1426683600.0,
    ):
        self.command_outputs = command_outputs or {}
        self.file_contents = dict(file_contents or {})
        if uptime is not None:
            self.file_contents["/proc/uptime"] = f"{uptime}.42 98765.43\n"
        self.env = env or {}
        self._system = system
        self.clock = clock
        self._start_clock = clock
        self.monotonic_clock = 1000.0
        self.commands_run: list[list[str]] = []
        self.processes: list[FakeProcess] = []
        self.file_modes: dict[str, int] = {}
        self.sleeps: list[float] = []

    def run(
        self,
        cmd: list[str],
        check: bool = False,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """Return mocked command output."""
        self.commands_run.append(cmd)
        key = tuple(cmd)
        if key not in self.command_outputs:
            raise KeyError(f"No mock output for command: {cmd}")

        output = self.command_outputs[key]
        if isinstance(output, Exception):
            raise output

        # Allow passing CompletedProcess directly for non-zero return codes
        if isinstance(output, subprocess.CompletedProcess):
            return output

        return subprocess.CompletedProcess(
            cmd,
            returncode=0,
            stdout=output,
            stderr="",
        )

    def popen(self, cmd: list[str], stdin: int | None = None) -> FakeProcess:
        """Start a fake process, or raise a mocked error."""
        self.commands_run.append(cmd)
        output = self.command_outputs.get(tuple(cmd))
        if isinstance(output, Exception):
            raise output
        process = FakeProcess(cmd)
        self.processes.append(process)
        return process

    def read_file(self, path: str) -> str:
        """Return mocked file content."""
        if path not in self.file_contents:
            raise FileNotFoundError(f"No mock content for: {path}")
        return self.file_contents[path]

    def write_file(self, path: str, content: str, mode: int = 0o644) -> None:
        """Store file content."""
        self.file_contents[path] = content
        self.file_modes[path] = mode

    def remove_file(self, path: str) -> None:
        """Forget a mocked file."""
        self.file_contents.pop(path, None)
        self.file_modes.pop(path, None)

    def file_exists(self, path: str) -> bool:
        """Check if path is in mocked files."""
        return path in self.file_contents

    def get_env(self, key: str, default: str | None = None) -> str | None:
        """Return mocked environment variable."""
        return self.env.get(key, default)

    def system(self) -> str:
        """Return mocked operating system name."""
        return self._system

    def time(self) -> float:
        """Return the fake clock."""
        return self.clock

    def monotonic(self) -> float:
        """Return the fake monotonic clock."""
        return self.monotonic_clock

    def now(self) -> datetime:
        """Return local time matching the fake clock."""
        return START_TIME + timedelta(seconds=self.clock - self._start_clock)

    def sleep(self, seconds: float) -> None:
        """Advance the fake clock instead of blocking."""
        self.sleeps.append(seconds)
        self.clock += seconds
        self.monotonic_clock += seconds


class FakeRegistry:
    """In-memory trigger registry."""

    def __init__(self, installed: dict[str, int] | None = None, fail_on: set[str] | None = None):
        # name -> interval
        self.installed = dict(installed or {})
        self.fail_on = set(fail_on or ())
        self.calls: list[tuple] = []

    def label(self, name: str) -> str:
        return f"com.test.{name}"

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise TriggerError(f"{op} failed")

    def exists(self, name: str) -> bool:
        self.calls.append(("exists", name))
        self._maybe_fail(f"exists:{name}")
        return name in self.installed

    def install(self, name: str, program: str, interval: int) -> bool:
        self.calls.append(("install", name, interval))
        self._maybe_fail(f"install:{name}")
        if self.installed.get(name) == interval:
            return False
        self.installed[name] = interval
        return True

    def remove(self, name: str) -> bool:
        self.calls.append(("remove", name))
        self._maybe_fail(f"remove:{name}")
        if name not in self.installed:
            return False
        del self.installed[name]
        return True


class FakeNotifier:
    """Records notifications."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.notifications: list[tuple[str, str, bool]] = []

    def notify(self, title: str, text: str, urgent: bool = False) -> None:
        if self.fail:
            raise NotifierError("no display")
        self.notifications.append((title, text, urgent))


class FakeCountdown:
    """Records countdowns and the registrations present when each started."""

    def __init__(self, registry: FakeRegistry, fail: Exception | None = None):
        self.registry = registry
        self.fail = fail
        self.runs: list[tuple[int, str, str]] = []
        self.installed_at_start: list[dict[str, int]] = []

    def run(self, duration: int, title: str, message: str) -> None:
        self.runs.append((duration, title, message))
        self.installed_at_start.append(dict(self.registry.installed))
        if self.fail is not None:
            raise self.fail


class FakeRestarter:
    """Counts restarts; exits like the real one unless told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.restarts = 0

    def restart(self):
        self.restarts += 1
        if self.fail:
            raise RestartError("shutdown: permission denied")
        raise SystemExit(0)


class RecordingLogger(RunLogger):
    """RunLogger that keeps entries in memory."""

    def __init__(self):
        super().__init__(log_path=Path("/nonexistent/uptimectl.jsonl"), run_id="test-run")
        self.entries: list[dict[str, Any]] = []

    def _emit(self, entry: dict[str, Any]) -> None:
        self.entries.append(entry)

    def messages(self, level: str | None = None) -> list[str]:
        return [e["message"] for e in self.entries if level is None or e["level"] == level]


class Harness:
    """A RunController wired to fakes."""

    def __init__(
        self,
        uptime: int | None,
        installed: dict[str, int] | None = None,
        config: Config | None = None,
        registry_fail_on: set[str] | None = None,
        notifier_fail: bool = False,
        countdown_fail: Exception | None = None,
        restart_fail: bool = False,
        command_outputs: dict[tuple, Any] | None = None,
    ):
        self.config = config or Config()
        outputs = {("who",): "alice    console  Mar 18 08:00\n"}
        outputs.update(command_outputs or {})
        self.context = MockContext(uptime=uptime, command_outputs=outputs)
        self.registry = FakeRegistry(installed, fail_on=registry_fail_on)
        self.notifier = FakeNotifier(fail=notifier_fail)
        self.countdown = FakeCountdown(self.registry, fail=countdown_fail)
        self.restarter = FakeRestarter(fail=restart_fail)
        self.logger = RecordingLogger()
        self.controller = RunController(
            config=self.config,
            context=self.context,
            registry=self.registry,
            notifier=self.notifier,
            countdown=self.countdown,
            restarter=self.restarter,
            logger=self.logger,
        )

    def run(self):
        return self.controller.run_once()


@pytest.fixture
def mock_context():
    """Factory fixture for creating MockContext instances."""
    def _create(**kwargs) -> MockContext:
        return MockContext(**kwargs)
    return _create


@pytest.fixture
def harness():
    """Factory fixture for creating controller harnesses."""
    def _create(uptime: int | None, **kwargs) -> Harness:
        return Harness(uptime, **kwargs)
    return _create


@pytest.fixture
def config_with():
    """Factory fixture for Config instances with overrides."""
    def _create(**overrides) -> Config:
        return replace(Config(), **overrides)
    return _create
