"""
Request Metrics
请求计数

Process-lifetime counters for served requests. The HTTP layer owns a sink
and increments it; nothing is persisted, counts reset on restart.
"""

from threading import Lock
from typing import Dict, Protocol

REQUESTS_SUCCESS = "requests_success"
REQUESTS_ERROR = "requests_error"


class MetricsSink(Protocol):
    """Anything that can count named events."""

    def increment(self, name: str, amount: int = 1) -> None:
        ...


class InMemoryMetrics:
    """
    Thread-safe in-memory counters
    线程安全的内存计数器
    """

    def __init__(self):
        self._counters: Dict[str, int] = {}
        self._lock = Lock()

    def increment(self, name: str, amount: int = 1) -> None:
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + amount

    def get(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    def snapshot(self) -> Dict[str, int]:
        """Copy of all counters, with the request counters always present."""
        with self._lock:
            counters = {REQUESTS_SUCCESS: 0, REQUESTS_ERROR: 0}
            counters.update(self._counters)
            return counters
