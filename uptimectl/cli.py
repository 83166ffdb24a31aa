"""Command-line interface for uptimectl."""

import argparse
import json
import sys
from pathlib import Path

from uptimectl import __version__
from uptimectl.core import (
    Condition,
    Config,
    ConfigError,
    Context,
    RunLogger,
    build_controller,
    classify,
    get_log_path,
    load_config,
)
from uptimectl.lib import (
    ACCELERATED,
    STANDARD,
    TriggerError,
    UptimeError,
    create_registry,
    format_seconds,
    read_uptime,
)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="uptimectl",
        description=(
            "Warn about long uptimes and restart the machine once the "
            "maximum uptime is reached. Without a command, performs one check."
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"uptimectl {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: /etc/uptimectl/config.yaml if present)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # status command
    status_parser = subparsers.add_parser(
        "status", help="Show uptime and the action a check would take"
    )
    status_parser.add_argument(
        "--format",
        choices=["plain", "json"],
        default="plain",
        help="Output format (default: plain)",
    )

    return parser


def cmd_check(args: argparse.Namespace, config: Config, context: Context) -> int:
    """Perform one uptime check."""
    log_path = get_log_path(Path(config.log_dir))
    with RunLogger(log_path) as logger:
        controller = build_controller(config, context, logger)
        result = controller.run_once()

    for error in result.errors:
        print(error, file=sys.stderr)

    return 1 if result.restart_failed else 0


def cmd_status(args: argparse.Namespace, config: Config, context: Context) -> int:
    """Show uptime and the action a check would take, without side effects."""
    try:
        uptime = read_uptime(context)
    except UptimeError as e:
        print(f"Cannot determine uptime: {e}", file=sys.stderr)
        return 1

    registry = create_registry(config, context)
    try:
        first_run = not registry.exists(STANDARD)
        accelerated = registry.exists(ACCELERATED)
    except TriggerError as e:
        print(f"Cannot inspect registrations: {e}", file=sys.stderr)
        return 1

    condition = classify(uptime, config, first_run)
    data = {
        "uptime": uptime,
        "uptime_formatted": format_seconds(uptime),
        "condition": condition.value,
        "first_run": first_run,
        "registrations": {STANDARD: not first_run, ACCELERATED: accelerated},
        "thresholds": {
            "initial_notification": config.initial_notification,
            "urgent_threshold": config.urgent_threshold,
            "max_uptime": config.max_uptime,
        },
    }
    if condition in (Condition.SOFT_WARNING, Condition.URGENT_WARNING):
        data["restart_in"] = format_seconds(config.max_uptime - uptime)

    if args.format == "json":
        print(json.dumps(data, indent=2))
    else:
        print(f"Uptime:       {data['uptime_formatted']} ({uptime} seconds)")
        print(f"Condition:    {condition.value}")
        print(f"First run:    {'yes' if first_run else 'no'}")
        print(f"Standard:     {'installed' if not first_run else 'missing'}")
        print(f"Accelerated:  {'installed' if accelerated else 'missing'}")
        if "restart_in" in data:
            print(f"Restart in:   {data['restart_in']}")

    return 0


def main(argv: list[str] | None = None, context: Context | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if context is None:
        context = Context()

    commands = {
        None: cmd_check,
        "status": cmd_status,
    }

    return commands[args.command](args, config, context)


if __name__ == "__main__":
    sys.exit(main())
