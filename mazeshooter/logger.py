"""Timestamped server log that can also feed a console view."""

from __future__ import annotations

import queue
from datetime import datetime, timezone


class Logger:
    """Prints timestamped messages and, if enabled, queues them for a viewer."""

    def __init__(self, enable_channels: bool = False) -> None:
        self.enable_channels = enable_channels
        self._queue: queue.SimpleQueue[str] = queue.SimpleQueue()

    def log(self, message: object) -> str:
        """Print ``message`` with a UTC timestamp and return the printed line."""
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        line = f"[{stamp}]: {message}"
        if self.enable_channels:
            self._queue.put(line)
        print(line)
        return line

    def drain(self) -> list[str]:
        """Take every queued line logged since the last drain."""
        lines = []
        while True:
            try:
                lines.append(self._queue.get_nowait())
            except queue.Empty:
                return lines