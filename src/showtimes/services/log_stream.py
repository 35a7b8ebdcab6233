"""Live log side channel for scrape runs.

``LogStreamHandler`` is an ordinary logging handler that keeps a bounded
history of recent records and fans each new one out to subscriber queues.
The admin API turns a subscription into a server-sent event stream.
"""

import asyncio
import json
import logging
from collections import deque
from datetime import datetime, timezone

from showtimes.config import settings

SUBSCRIBER_QUEUE_SIZE = 1000

_LEVEL_TYPES = {
    logging.DEBUG: "log",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class LogStreamHandler(logging.Handler):
    """Buffers formatted log records and pushes them to subscribers."""

    def __init__(self, history_size: int | None = None, level: int = logging.INFO) -> None:
        super().__init__(level)
        self._history: deque[dict] = deque(maxlen=history_size or settings.log_history_size)
        self._subscribers: set[asyncio.Queue] = set()
        self.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = {
                "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
                "message": self.format(record),
                "type": _LEVEL_TYPES.get(record.levelno, "log"),
            }
        except Exception:
            self.handleError(record)
            return
        self._publish(entry)

    def _publish(self, entry: dict) -> None:
        self._history.append(entry)
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(entry)
            except asyncio.QueueFull:
                # Full queue: this subscriber misses the line
                pass

    def history(self) -> list[dict]:
        return list(self._history)

    def subscribe(self) -> asyncio.Queue:
        """New subscriber queue, pre-filled with the current history."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=max(SUBSCRIBER_QUEUE_SIZE, len(self._history)))
        for entry in self._history:
            queue.put_nowait(entry)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    @property
    def client_count(self) -> int:
        return len(self._subscribers)

    def clear_history(self) -> None:
        self._history.clear()
        self._publish(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "message": "--- Logs cleared ---",
                "type": "info",
            }
        )


def format_sse(entry: dict) -> str:
    """Encode one log entry as a server-sent event."""
    return f"data: {json.dumps(entry)}\n\n"


log_stream = LogStreamHandler()


def install(logger: logging.Logger | None = None) -> LogStreamHandler:
    """Attach the shared handler to ``logger`` (the root logger by default)."""
    target = logger or logging.getLogger()
    if log_stream not in target.handlers:
        target.addHandler(log_stream)
    return log_stream
