"""JSONL run log for uptime checks."""

import json
import sys
import uuid
from datetime import date, datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from uptimectl.core.controller import RunResult
    from uptimectl.core.escalation import Condition


DEFAULT_LOG_DIR = Path("/var/log/uptimectl")


def get_log_path(base_path: Path | None = None) -> Path:
    """
    Get today's run log file.

    Args:
        base_path: Base directory for logs (default: /var/log/uptimectl)

    Returns:
        Path to the log file: {base}/{date}/uptimectl.jsonl
    """
    if base_path is None:
        base_path = DEFAULT_LOG_DIR

    return base_path / date.today().isoformat() / "uptimectl.jsonl"


class RunLogger:
    """
    Append-only record of a single run.

    Every entry carries the run id, and the condition once one has been
    classified, so entries from overlapping or repeated runs can be told
    apart in the shared daily file.
    """

    def __init__(self, log_path: Path | None = None, run_id: str | None = None):
        self.log_path = log_path or get_log_path()
        self.run_id = run_id or uuid.uuid4().hex[:12]
        self.condition: "Condition | None" = None
        self._file = None

    def start_run(self, **extra: Any) -> None:
        """Record the start of the run."""
        self.info("Run started", **extra)

    def classified(self, condition: "Condition", **extra: Any) -> None:
        """Record a classification; later entries carry the condition."""
        self.condition = condition
        self.info("Condition classified", **extra)

    def end_run(self, result: "RunResult") -> None:
        """Record a run that ended without a restart."""
        level = "info" if result.success else "warning"
        self._log(
            level,
            "Run completed",
            uptime=result.uptime,
            first_run=result.first_run,
            mutations=result.mutations,
            errors=len(result.errors),
        )

    def debug(self, message: str, **extra: Any) -> None:
        self._log("debug", message, **extra)

    def info(self, message: str, **extra: Any) -> None:
        self._log("info", message, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        self._log("warning", message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        self._log("error", message, **extra)

    def _log(self, level: str, message: str, **extra: Any) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "run": self.run_id,
        }
        if self.condition is not None:
            entry["condition"] = self.condition.value
        entry["message"] = message
        entry.update(extra)
        self._emit(entry)

    def _emit(self, entry: dict[str, Any]) -> None:
        line = json.dumps(entry, default=str)
        try:
            if self._file is None:
                self.log_path.parent.mkdir(parents=True, exist_ok=True)
                self._file = open(self.log_path, "a")
            self._file.write(line + "\n")
            self._file.flush()
        except OSError:
            # Sink unavailable; the record still reaches stderr
            print(line, file=sys.stderr)

    def close(self) -> None:
        """Close the log file."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
