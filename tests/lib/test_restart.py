"""Tests for the restart action."""

import subprocess

import pytest

from uptimectl.lib.restart import RestartError, Restarter
from tests.conftest import MockContext


SHUTDOWN = ("shutdown", "-r", "now")


class TestRestarter:
    def test_exits_after_restart_accepted(self):
        context = MockContext(command_outputs={SHUTDOWN: ""})

        with pytest.raises(SystemExit) as exc:
            Restarter(context).restart()

        assert exc.value.code == 0
        assert context.commands_run == [list(SHUTDOWN)]

    def test_custom_command(self):
        context = MockContext(command_outputs={("systemctl", "reboot"): ""})

        with pytest.raises(SystemExit):
            Restarter(context, ["systemctl", "reboot"]).restart()

        assert context.commands_run == [["systemctl", "reboot"]]

    def test_refused(self):
        context = MockContext(
            command_outputs={
                SHUTDOWN: subprocess.CompletedProcess(
                    list(SHUTDOWN), returncode=1, stdout="", stderr="Permission denied"
                )
            }
        )

        with pytest.raises(RestartError, match="Permission denied"):
            Restarter(context).restart()

    def test_command_missing(self):
        context = MockContext(command_outputs={SHUTDOWN: FileNotFoundError("shutdown")})

        with pytest.raises(RestartError):
            Restarter(context).restart()
