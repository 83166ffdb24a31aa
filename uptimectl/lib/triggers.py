"""Periodic re-invocation registrations (launchd and systemd)."""

import plistlib
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uptimectl.core.config import Config
    from uptimectl.core.context import Context


class TriggerError(Exception):
    """Error managing a trigger registration."""

    pass


STANDARD = "standard"
ACCELERATED = "accelerated"

# Registration name -> label suffix
LABEL_SUFFIXES = {
    STANDARD: "uptimeCheck",
    ACCELERATED: "acceleratedUptimeCheck",
}


class TriggerRegistry:
    """
    Base class for named periodic registrations.

    install() and remove() are idempotent and return True only when they
    changed something.
    """

    def __init__(self, context: "Context", label_prefix: str):
        self.context = context
        self.label_prefix = label_prefix

    def label(self, name: str) -> str:
        """Get the scheduler label for a registration name."""
        if name not in LABEL_SUFFIXES:
            raise TriggerError(f"Unknown registration: {name}")
        return f"{self.label_prefix}.{LABEL_SUFFIXES[name]}"

    def exists(self, name: str) -> bool:
        raise NotImplementedError

    def install(self, name: str, program: str, interval: int) -> bool:
        raise NotImplementedError

    def remove(self, name: str) -> bool:
        raise NotImplementedError

    def _run(self, cmd: list[str]) -> None:
        """Run a scheduler command, raising TriggerError on failure."""
        try:
            result = self.context.run(cmd)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise TriggerError(f"Command failed: {' '.join(cmd)}: {e}")
        if result.returncode != 0:
            raise TriggerError(
                f"Command failed: {' '.join(cmd)}: {result.stderr.strip()}"
            )

    def _read(self, path: str) -> str | None:
        """Read an existing registration file, or None if absent."""
        if not self.context.file_exists(path):
            return None
        try:
            return self.context.read_file(path)
        except OSError as e:
            raise TriggerError(f"Cannot read {path}: {e}")

    def _write(self, path: str, content: str) -> None:
        try:
            self.context.write_file(path, content, mode=0o644)
        except OSError as e:
            raise TriggerError(f"Cannot write {path}: {e}")

    def _delete(self, path: str) -> None:
        try:
            self.context.remove_file(path)
        except OSError as e:
            raise TriggerError(f"Cannot remove {path}: {e}")


class LaunchdRegistry(TriggerRegistry):
    """Registrations as LaunchDaemon property lists."""

    def __init__(
        self,
        context: "Context",
        directory: str = "/Library/LaunchDaemons",
        label_prefix: str = "com.uptimectl",
    ):
        super().__init__(context, label_prefix)
        self.directory = directory

    def path(self, name: str) -> str:
        return str(Path(self.directory) / f"{self.label(name)}.plist")

    def render(self, name: str, program: str, interval: int) -> str:
        """Render the property list for a registration."""
        plist = {
            "Label": self.label(name),
            "ProgramArguments": [program],
            "StartInterval": interval,
        }
        return plistlib.dumps(plist, fmt=plistlib.FMT_XML).decode()

    def exists(self, name: str) -> bool:
        return self.context.file_exists(self.path(name))

    def install(self, name: str, program: str, interval: int) -> bool:
        path = self.path(name)
        content = self.render(name, program, interval)
        existing = self._read(path)
        if existing == content:
            return False

        if existing is not None:
            self._run(["launchctl", "unload", path])
        self._write(path, content)
        self._run(["launchctl", "load", path])
        return True

    def remove(self, name: str) -> bool:
        path = self.path(name)
        if not self.context.file_exists(path):
            return False

        self._run(["launchctl", "unload", path])
        self._delete(path)
        return True


class SystemdTimerRegistry(TriggerRegistry):
    """Registrations as a oneshot service plus a timer unit."""

    def __init__(
        self,
        context: "Context",
        directory: str = "/etc/systemd/system",
        label_prefix: str = "com.uptimectl",
    ):
        super().__init__(context, label_prefix)
        self.directory = directory

    def unit_paths(self, name: str) -> tuple[str, str]:
        """Get the (service, timer) unit file paths."""
        base = Path(self.directory) / self.label(name)
        return f"{base}.service", f"{base}.timer"

    def render(self, name: str, program: str, interval: int) -> tuple[str, str]:
        """Render the (service, timer) unit files for a registration."""
        label = self.label(name)
        service = (
            "[Unit]\n"
            f"Description=uptimectl {name} uptime check\n"
            "\n"
            "[Service]\n"
            "Type=oneshot\n"
            f"ExecStart={program}\n"
        )
        timer = (
            "[Unit]\n"
            f"Description=Run uptimectl {name} uptime check every {interval} seconds\n"
            "\n"
            "[Timer]\n"
            # Relative to activation; OnBootSec would elapse at once on a
            # host that has been up longer than the interval
            f"OnActiveSec={interval}s\n"
            f"OnUnitActiveSec={interval}s\n"
            f"Unit={label}.service\n"
            "\n"
            "[Install]\n"
            "WantedBy=timers.target\n"
        )
        return service, timer

    def exists(self, name: str) -> bool:
        _, timer_path = self.unit_paths(name)
        return self.context.file_exists(timer_path)

    def install(self, name: str, program: str, interval: int) -> bool:
        service_path, timer_path = self.unit_paths(name)
        service, timer = self.render(name, program, interval)
        if self._read(service_path) == service and self._read(timer_path) == timer:
            return False

        self._write(service_path, service)
        self._write(timer_path, timer)
        self._run(["systemctl", "daemon-reload"])
        self._run(["systemctl", "enable", "--now", f"{self.label(name)}.timer"])
        return True

    def remove(self, name: str) -> bool:
        service_path, timer_path = self.unit_paths(name)
        if not self.context.file_exists(timer_path):
            return False

        self._run(["systemctl", "disable", "--now", f"{self.label(name)}.timer"])
        self._delete(timer_path)
        self._delete(service_path)
        self._run(["systemctl", "daemon-reload"])
        return True


def create_registry(config: "Config", context: "Context") -> TriggerRegistry:
    """
    Create the registry backend selected by the configuration.

    'auto' picks launchd on macOS and systemd elsewhere.
    """
    scheduler = config.scheduler
    if scheduler == "auto":
        scheduler = "launchd" if context.system() == "Darwin" else "systemd"

    if scheduler == "launchd":
        return LaunchdRegistry(
            context, directory=config.launchd_dir, label_prefix=config.label_prefix
        )
    return SystemdTimerRegistry(
        context, directory=config.systemd_dir, label_prefix=config.label_prefix
    )
