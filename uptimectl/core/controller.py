"""The per-wake-up control sequence."""

from dataclasses import dataclass, field
from typing import NoReturn

from uptimectl.core.config import Config
from uptimectl.core.context import Context
from uptimectl.core.escalation import SHUTDOWN_COUNTDOWNS, Condition, classify
from uptimectl.core.logging import RunLogger
from uptimectl.lib.host import UptimeError, console_user, read_uptime
from uptimectl.lib.notify import Countdown, Notifier, NotifierError, create_notifiers
from uptimectl.lib.restart import Restarter, RestartError
from uptimectl.lib.timefmt import format_restart_time, format_seconds
from uptimectl.lib.triggers import (
    ACCELERATED,
    STANDARD,
    TriggerError,
    TriggerRegistry,
    create_registry,
)


@dataclass
class RunResult:
    """Outcome of a run that did not end in a restart."""

    uptime: int | None = None
    first_run: bool = False
    condition: Condition | None = None
    mutations: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    restart_failed: bool = False

    @property
    def success(self) -> bool:
        """True if no collaborator failed during the run."""
        return not self.errors and not self.restart_failed


class RunController:
    """
    Runs one uptime check.

    All state is rebuilt from the uptime sample and the presence of the
    standard and accelerated registrations. The standard registration is
    never removed here; its absence is what marks the first run.
    """

    def __init__(
        self,
        config: Config,
        context: Context,
        registry: TriggerRegistry,
        notifier: Notifier,
        countdown: Countdown,
        restarter: Restarter,
        logger: RunLogger,
    ):
        self.config = config
        self.context = context
        self.registry = registry
        self.notifier = notifier
        self.countdown = countdown
        self.restarter = restarter
        self.logger = logger

    def run_once(self) -> RunResult:
        """
        Sample uptime, update registrations and act on the condition.

        Does not return for the shutdown conditions unless the restart
        command fails. No exception escapes.
        """
        result = RunResult()
        self.logger.start_run(user=console_user(self.context))

        try:
            self._run(result)
        except RestartError as e:
            result.restart_failed = True
            result.errors.append(str(e))
            self.logger.error("Restart failed", error=str(e))
        except Exception as e:
            result.errors.append(f"Unexpected error: {e}")
            self.logger.error("Run failed", error=str(e), exception=type(e).__name__)
        else:
            self.logger.end_run(result)

        return result

    def _run(self, result: RunResult) -> None:
        try:
            uptime = read_uptime(self.context)
        except UptimeError as e:
            # Classifying without a sample could use up the one-time grace path
            self._record_error(result, "Uptime unavailable, no action taken", e)
            return

        result.uptime = uptime
        self.logger.info(
            f"Uptime: {format_seconds(uptime)} or {uptime} seconds", uptime=uptime
        )

        result.first_run = self._is_first_run(result)
        if result.first_run:
            self.logger.info("Initial run condition met")
            self._install(result, STANDARD, self.config.check_frequency)
            condition = self._classify(result, uptime, first_run=True)
            if condition is Condition.INITIAL_GRACE_SHUTDOWN:
                self._shutdown(condition)

        self._remove(result, ACCELERATED)
        condition = self._classify(result, uptime, first_run=False)

        if condition.terminal:
            self._shutdown(condition)
        elif condition is Condition.URGENT_WARNING:
            self._urgent_warning(result, uptime)
        elif condition is Condition.SOFT_WARNING:
            self._soft_warning(result, uptime)
        else:
            self.logger.info(
                f"No action taken - uptime was {format_seconds(uptime)}",
                uptime=uptime,
                threshold=self.config.initial_notification,
            )

    def _is_first_run(self, result: RunResult) -> bool:
        try:
            return not self.registry.exists(STANDARD)
        except TriggerError as e:
            # Assume it exists: never grant the grace path on a failed check
            self._record_error(result, "Cannot check standard registration", e)
            return False

    def _classify(self, result: RunResult, uptime: int, first_run: bool) -> Condition:
        condition = classify(uptime, self.config, first_run)
        result.condition = condition
        self.logger.classified(condition, uptime=uptime, first_run=first_run)
        return condition

    def _install(self, result: RunResult, name: str, interval: int) -> None:
        try:
            changed = self.registry.install(name, self.config.program, interval)
        except TriggerError as e:
            self._record_error(result, f"Cannot install {name} registration", e)
            return

        if changed:
            result.mutations.append(f"install:{name}")
            self.logger.info(
                f"{self.registry.label(name)} installed",
                registration=name,
                interval=interval,
            )
        else:
            self.logger.debug(f"{self.registry.label(name)} already installed", registration=name)

    def _remove(self, result: RunResult, name: str) -> None:
        try:
            changed = self.registry.remove(name)
        except TriggerError as e:
            self._record_error(result, f"Cannot remove {name} registration", e)
            return

        if changed:
            result.mutations.append(f"remove:{name}")
            self.logger.info(f"{self.registry.label(name)} removed", registration=name)

    def _notify(self, result: RunResult, title: str, text: str, urgent: bool) -> None:
        try:
            self.notifier.notify(title, text, urgent=urgent)
        except NotifierError as e:
            self._record_error(result, "Notification failed", e)

    def _soft_warning(self, result: RunResult, uptime: int) -> None:
        formatted = format_seconds(uptime)
        self._notify(
            result,
            "Reboot Needed Soon!",
            f"Computer has been running for {formatted}.",
            urgent=False,
        )
        self.logger.info(f"Soft warning provided - uptime was {formatted}", uptime=uptime)

    def _urgent_warning(self, result: RunResult, uptime: int) -> None:
        self._install(result, ACCELERATED, self.config.accelerated_check_frequency)

        remaining = self.config.max_uptime - uptime
        restart_time = format_restart_time(self.context.now(), remaining)
        self._notify(
            result,
            "Reboot Urgently Needed",
            f"Automatic restart scheduled for {restart_time}",
            urgent=True,
        )
        self.logger.warning(
            f"Urgent warning provided - uptime was {format_seconds(uptime)}",
            uptime=uptime,
            remaining=remaining,
            restart_time=restart_time,
        )

    def _shutdown(self, condition: Condition) -> NoReturn:
        countdown = SHUTDOWN_COUNTDOWNS[condition]
        self.logger.warning(
            f"{format_seconds(countdown.seconds)} countdown started",
            condition=condition.value,
            seconds=countdown.seconds,
        )
        try:
            self.countdown.run(countdown.seconds, countdown.title, countdown.message)
        except Exception as e:
            # The restart still happens; only the warning was lost
            self.logger.error("Countdown failed", error=str(e))

        self.logger.warning("Performing restart now", condition=condition.value)
        self.restarter.restart()

    def _record_error(self, result: RunResult, message: str, error: Exception) -> None:
        result.errors.append(f"{message}: {error}")
        self.logger.error(message, error=str(error))


def build_controller(config: Config, context: Context, logger: RunLogger) -> RunController:
    """Wire a controller with the host backends selected by the config."""
    notifier, surface = create_notifiers(config, context)
    return RunController(
        config=config,
        context=context,
        registry=create_registry(config, context),
        notifier=notifier,
        countdown=Countdown(surface, context, logger),
        restarter=Restarter(context, config.restart_command),
        logger=logger,
    )
