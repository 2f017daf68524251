"""Relay logger — append-only JSON Lines event log with rotation."""

from __future__ import annotations

import fcntl
import logging
from pathlib import Path

from capacity_relay.config import Settings
from capacity_relay.models import RelayEvent

logger = logging.getLogger(__name__)


class RelayLogger:
    """Append-only structured log of received and relayed capacity data.

    Each event is written as one JSON line under an exclusive lock, so
    concurrent writers never interleave. Write failures are reported via
    ``logging`` and swallowed: the relay log must never fail a request.
    """

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    @classmethod
    def from_settings(cls, settings: Settings) -> RelayLogger:
        return cls(
            log_path=settings.relay_log_path,
            max_bytes=settings.relay_log_max_bytes,
            backup_count=settings.relay_log_backup_count,
        )

    def _backup_path(self, generation: int) -> Path:
        return self.log_path.with_name(f"{self.log_path.name}.{generation}")

    def _rotate_if_full(self) -> None:
        """Shift backups up one generation once the live file reaches max_bytes."""
        try:
            size = self.log_path.stat().st_size
        except FileNotFoundError:
            return
        if size < self._max_bytes:
            return

        # replace() onto the last generation drops the oldest backup
        for generation in range(self._backup_count, 1, -1):
            newer = self._backup_path(generation - 1)
            if newer.exists():
                newer.replace(self._backup_path(generation))
        self.log_path.replace(self._backup_path(1))

    def log(self, event: RelayEvent) -> None:
        """Append one event. Blocks on the file lock; call from a worker thread in async code."""
        try:
            self._write(event.model_dump_json())
        except (OSError, ValueError) as exc:
            logger.warning("Failed to write relay log %s: %s", self.log_path, exc)

    def _write(self, line: str) -> None:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

        # Lock file covers rotation + write
        lock_file = self.log_path.parent / f".{self.log_path.name}.lock"
        with open(lock_file, "w") as lf:
            fcntl.flock(lf, fcntl.LOCK_EX)
            try:
                self._rotate_if_full()
                with open(self.log_path, "a") as f:
                    f.write(line + "\n")
            finally:
                fcntl.flock(lf, fcntl.LOCK_UN)
