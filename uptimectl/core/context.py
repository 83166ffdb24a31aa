"""Execution context for testability."""

import os
import platform
import subprocess
import time
from datetime import datetime
from pathlib import Path


class Context:
    """
    Wraps external calls for testability.

    In production: executes real commands and touches the real clock
    In tests: can be replaced with MockContext
    """

    def run(
        self,
        cmd: list[str],
        check: bool = False,
        timeout: int | None = 60,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """
        Run a command and return result.

        Args:
            cmd: Command and arguments as list
            check: Raise on non-zero exit code
            timeout: Timeout in seconds
            **kwargs: Additional subprocess.run arguments

        Returns:
            CompletedProcess with stdout, stderr, returncode
        """
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=check,
            timeout=timeout,
            **kwargs,
        )

    def popen(self, cmd: list[str], stdin: int | None = None) -> subprocess.Popen:
        """Start a command without waiting for it."""
        return subprocess.Popen(
            cmd,
            stdin=stdin,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            text=True,
        )

    def read_file(self, path: str) -> str:
        """Read file contents."""
        return Path(path).read_text()

    def write_file(self, path: str, content: str, mode: int = 0o644) -> None:
        """Write file contents and set its permission bits."""
        target = Path(path)
        target.write_text(content)
        target.chmod(mode)

    def remove_file(self, path: str) -> None:
        """Remove a file if it exists."""
        Path(path).unlink(missing_ok=True)

    def file_exists(self, path: str) -> bool:
        """Check if file exists."""
        return Path(path).exists()

    def get_env(self, key: str, default: str | None = None) -> str | None:
        """Get environment variable."""
        return os.environ.get(key, default)

    def system(self) -> str:
        """Get the operating system name (e.g. 'Linux', 'Darwin')."""
        return platform.system()

    def time(self) -> float:
        """Get wall-clock time as a Unix timestamp."""
        return time.time()

    def monotonic(self) -> float:
        """Get a clock that is not affected by wall-clock steps."""
        return time.monotonic()

    def now(self) -> datetime:
        """Get local wall-clock time."""
        return datetime.now()

    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        time.sleep(seconds)
