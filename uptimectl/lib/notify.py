"""User notifications and the restart countdown."""

import subprocess
from typing import TYPE_CHECKING

from uptimectl.lib.timefmt import format_seconds

if TYPE_CHECKING:
    from uptimectl.core.config import Config
    from uptimectl.core.context import Context
    from uptimectl.core.logging import RunLogger


class NotifierError(Exception):
    """Error displaying a notification or progress surface."""

    pass


class Notifier:
    """Fire-and-forget notification bubbles."""

    def notify(self, title: str, text: str, urgent: bool = False) -> None:
        raise NotImplementedError


class NullNotifier(Notifier):
    """Notifier for headless hosts."""

    def notify(self, title: str, text: str, urgent: bool = False) -> None:
        pass


class CocoaDialogNotifier(Notifier):
    """cocoaDialog bubbles (macOS)."""

    # Urgent bubbles stay until dismissed
    URGENT_STYLE = [
        "--background-top", "FFFF00",
        "--background-bottom", "FF9900",
        "--icon", "caution",
        "--no-timeout",
    ]
    SOFT_STYLE = [
        "--background-top", "66FF00",
        "--background-bottom", "99CC00",
        "--icon", "notice",
    ]

    def __init__(self, context: "Context", path: str):
        self.context = context
        self.path = path

    def notify(self, title: str, text: str, urgent: bool = False) -> None:
        style = self.URGENT_STYLE if urgent else self.SOFT_STYLE
        cmd = [self.path, "bubble", "--title", title, "--text", text, *style]
        try:
            self.context.popen(cmd)
        except OSError as e:
            raise NotifierError(f"Cannot start cocoaDialog: {e}")


class LibnotifyNotifier(Notifier):
    """Desktop notifications through notify-send (Linux)."""

    def __init__(self, context: "Context"):
        self.context = context

    def notify(self, title: str, text: str, urgent: bool = False) -> None:
        # Critical notifications are not expired by the notification daemon
        urgency = "critical" if urgent else "normal"
        cmd = ["notify-send", "-u", urgency, "-a", "uptimectl", title, text]
        try:
            self.context.popen(cmd)
        except OSError as e:
            raise NotifierError(f"Cannot start notify-send: {e}")


class ProgressSurface:
    """A progress display fed with percent-remaining updates."""

    def open(self, title: str, text: str) -> None:
        raise NotImplementedError

    def update(self, percent: int, text: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class NullProgress(ProgressSurface):
    """Progress surface for headless hosts."""

    def open(self, title: str, text: str) -> None:
        pass

    def update(self, percent: int, text: str) -> None:
        pass

    def close(self) -> None:
        pass


class PipedProgress(ProgressSurface):
    """Progress dialog fed through the stdin of a child process."""

    def __init__(self, context: "Context"):
        self.context = context
        self._process: subprocess.Popen | None = None

    def command(self, title: str, text: str) -> list[str]:
        raise NotImplementedError

    def format_update(self, percent: int, text: str) -> str:
        raise NotImplementedError

    def open(self, title: str, text: str) -> None:
        cmd = self.command(title, text)
        try:
            self._process = self.context.popen(cmd, stdin=subprocess.PIPE)
        except OSError as e:
            raise NotifierError(f"Cannot start {cmd[0]}: {e}")

    def update(self, percent: int, text: str) -> None:
        if self._process is None:
            raise NotifierError("Progress dialog is not open")
        try:
            self._process.stdin.write(self.format_update(percent, text))
            self._process.stdin.flush()
        except (OSError, ValueError) as e:
            raise NotifierError(f"Progress dialog went away: {e}")

    def close(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        try:
            process.stdin.close()
        except OSError as e:
            raise NotifierError(f"Cannot close progress dialog: {e}")


class CocoaDialogProgress(PipedProgress):
    """cocoaDialog progressbar (macOS); exits when its input closes."""

    def __init__(self, context: "Context", path: str):
        super().__init__(context)
        self.path = path

    def command(self, title: str, text: str) -> list[str]:
        return [
            self.path, "progressbar",
            "--title", title,
            "--text", text,
            "--posX", "right", "--posY", "top",
            "--width", "450", "--height", "90",
            "--float",
            "--icon", "hazard", "--icon-height", "48", "--icon-width", "48",
        ]

    def format_update(self, percent: int, text: str) -> str:
        return f"{percent} {text}".rstrip() + "\n"


class ZenityProgress(PipedProgress):
    """zenity --progress dialog (Linux)."""

    def command(self, title: str, text: str) -> list[str]:
        return [
            "zenity", "--progress",
            "--title", title,
            "--text", text,
            "--percentage", "100",
            "--no-cancel",
        ]

    def format_update(self, percent: int, text: str) -> str:
        lines = f"{percent}\n"
        if text:
            lines += f"# {text}\n"
        return lines

    def close(self) -> None:
        process = self._process
        try:
            super().close()
        finally:
            # Without --auto-close the dialog outlives its input
            if process is not None:
                process.terminate()


class Countdown:
    """
    Blocking countdown with a progress display.

    Once started it always runs to completion; display failures are logged
    and the countdown continues without a display.
    """

    def __init__(
        self,
        surface: ProgressSurface,
        context: "Context",
        logger: "RunLogger | None" = None,
    ):
        self.surface = surface
        self.context = context
        self.logger = logger
        self._visible = False

    def run(self, duration: int, title: str, message: str) -> None:
        """
        Count down `duration` seconds, updating about once per second.

        Args:
            duration: Countdown length in seconds
            title: Dialog title
            message: Text shown after the remaining time
        """
        self._visible = True
        self._render(self.surface.open, title, "Preparing to restart this computer...")
        self._render(self.surface.update, 100, "")

        stop_time = self.context.monotonic() + duration
        seconds_left = duration
        try:
            while seconds_left > 0:
                self.context.sleep(1)
                seconds_left = max(0, int(stop_time - self.context.monotonic()))
                percent = seconds_left * 100 // duration
                self._render(
                    self.surface.update,
                    percent,
                    f"{format_seconds(seconds_left)} {message}",
                )
        finally:
            self._visible = False
            self._close()

    def _close(self) -> None:
        # Runs after display failures too
        try:
            self.surface.close()
        except NotifierError as e:
            if self.logger is not None:
                self.logger.debug("Countdown display could not be closed", error=str(e))

    def _render(self, call, *args) -> None:
        if not self._visible:
            return
        try:
            call(*args)
        except NotifierError as e:
            self._visible = False
            if self.logger is not None:
                self.logger.warning("Countdown display failed, continuing", error=str(e))


def create_notifiers(
    config: "Config", context: "Context"
) -> tuple[Notifier, ProgressSurface]:
    """
    Create the notifier and progress surface selected by the configuration.

    'auto' picks cocoaDialog on macOS and notify-send/zenity elsewhere.
    """
    backend = config.notifier
    if backend == "auto":
        backend = "cocoadialog" if context.system() == "Darwin" else "libnotify"

    if backend == "cocoadialog":
        return (
            CocoaDialogNotifier(context, config.cocoadialog_path),
            CocoaDialogProgress(context, config.cocoadialog_path),
        )
    if backend == "libnotify":
        return LibnotifyNotifier(context), ZenityProgress(context)
    return NullNotifier(), NullProgress()
