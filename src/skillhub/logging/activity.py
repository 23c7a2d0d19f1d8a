"""
Activity logger for SkillHub.

Appends one JSON object per lifecycle event to a JSONL file so that
users can audit what was staged, placed and removed.
"""

import datetime as _datetime
import json as _json
import pathlib as _pathlib
import typing as _typing


class ActivityLogger:
    """
    Logs lifecycle events to a JSONL file.

    Each line in the file is a JSON object representing an event:
    - skill_staged / skill_unstaged: store changes
    - skill_installed / skill_enabled / skill_disabled / skill_uninstalled:
      per-product changes
    - skill_acquired: a product-side copy was taken over
    - skill_removed: a registry record was deleted
    - operation_failed: an operation aborted, with the steps it completed

    Usage:
        logger = ActivityLogger(log_file=paths.activity_log)
        logger.log_staged("git-lfs", store_path, source="/src/git-lfs")
    """

    def __init__(
        self,
        *,
        log_file: _pathlib.Path | str | None = None,
        enabled: bool = True,
    ) -> None:
        """
        Initialize the activity logger.

        Args:
            log_file: JSONL file to append to.
            enabled: Whether logging is enabled. A logger without a file
                is always disabled.
        """
        self._enabled = enabled and log_file is not None
        self._file_path = _pathlib.Path(log_file) if log_file is not None else None
        self._event_count = 0

    @property
    def enabled(self) -> bool:
        """Whether events are being written."""
        return self._enabled

    @property
    def file_path(self) -> _pathlib.Path | None:
        """Log file path, if any."""
        return self._file_path

    @property
    def event_count(self) -> int:
        """Events written by this logger instance."""
        return self._event_count

    def _write_event(
        self,
        event_type: str,
        data: dict[str, _typing.Any],
    ) -> None:
        """Append an event to the log file."""
        if not self._enabled or self._file_path is None:
            return

        self._event_count += 1
        event = {
            "timestamp": _datetime.datetime.now(_datetime.UTC).isoformat(),
            "event_number": self._event_count,
            "event_type": event_type,
            **data,
        }

        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._file_path, "a", encoding="utf-8") as f:
                f.write(_json.dumps(event, default=str) + "\n")
        except OSError:
            # Silently ignore write errors - logging shouldn't break the app
            pass

    def log_staged(
        self,
        skill_id: str,
        store_path: _pathlib.Path,
        source: str | None = None,
    ) -> None:
        """Log a skill staged into the store."""
        self._write_event(
            "skill_staged",
            {"skill_id": skill_id, "store_path": str(store_path), "source": source},
        )

    def log_unstaged(self, skill_id: str, removed: bool) -> None:
        """Log a store entry deletion."""
        self._write_event("skill_unstaged", {"skill_id": skill_id, "removed": removed})

    def log_installed(self, skill_id: str, product_id: str, mode: str) -> None:
        """Log an install with its resolved mode."""
        self._write_event(
            "skill_installed",
            {"skill_id": skill_id, "product_id": product_id, "mode": mode},
        )

    def log_enabled(self, skill_id: str, product_id: str, mode: str) -> None:
        """Log a placement."""
        self._write_event(
            "skill_enabled",
            {"skill_id": skill_id, "product_id": product_id, "mode": mode},
        )

    def log_disabled(self, skill_id: str, product_id: str) -> None:
        """Log a placement removal that keeps the install record."""
        self._write_event("skill_disabled", {"skill_id": skill_id, "product_id": product_id})

    def log_uninstalled(self, skill_id: str, product_id: str) -> None:
        """Log a product removal."""
        self._write_event(
            "skill_uninstalled", {"skill_id": skill_id, "product_id": product_id}
        )

    def log_acquired(
        self,
        skill_id: str,
        product_id: str,
        backup_path: _pathlib.Path | None,
    ) -> None:
        """Log a takeover of a product-side skill."""
        self._write_event(
            "skill_acquired",
            {
                "skill_id": skill_id,
                "product_id": product_id,
                "backup_path": str(backup_path) if backup_path else None,
            },
        )

    def log_removed(self, skill_id: str, purged: bool) -> None:
        """Log a registry record deletion."""
        self._write_event("skill_removed", {"skill_id": skill_id, "purged": purged})

    def log_failed(
        self,
        operation: str,
        error: BaseException,
        completed_steps: list[str],
        *,
        skill_id: str | None = None,
        product_id: str | None = None,
    ) -> None:
        """Log an aborted operation and the durable progress it made."""
        self._write_event(
            "operation_failed",
            {
                "operation": operation,
                "skill_id": skill_id,
                "product_id": product_id,
                "error_type": type(error).__name__,
                "error": str(error),
                "completed_steps": list(completed_steps),
            },
        )


def read_activity(
    log_file: _pathlib.Path,
    limit: int | None = None,
) -> list[dict[str, _typing.Any]]:
    """
    Read events from an activity log.

    Lines that are not JSON objects are skipped.

    Args:
        log_file: JSONL file to read.
        limit: Return only the most recent N events.

    Returns:
        Events in file order (oldest first).
    """
    if not log_file.exists():
        return []

    events: list[dict[str, _typing.Any]] = []
    with open(log_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                event = _json.loads(line)
            except _json.JSONDecodeError:
                continue
            if isinstance(event, dict):
                events.append(event)

    if limit is not None:
        events = events[-limit:] if limit > 0 else []
    return events
