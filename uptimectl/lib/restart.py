"""The terminal restart action."""

import subprocess
import sys
from typing import TYPE_CHECKING, NoReturn, Sequence

if TYPE_CHECKING:
    from uptimectl.core.context import Context


class RestartError(Exception):
    """Error issuing the restart command."""

    pass


class Restarter:
    """
    Issues the machine restart.

    restart() never returns: once the command is accepted the process exits
    and the operating system takes over.
    """

    def __init__(self, context: "Context", command: Sequence[str] | None = None):
        self.context = context
        self.command = list(command or ("shutdown", "-r", "now"))

    def restart(self) -> NoReturn:
        """
        Restart the machine.

        Raises:
            RestartError: If the restart command cannot be run or fails
        """
        try:
            result = self.context.run(self.command)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise RestartError(f"Cannot run {' '.join(self.command)}: {e}")
        if result.returncode != 0:
            raise RestartError(
                f"{' '.join(self.command)} exited with {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        sys.exit(0)
