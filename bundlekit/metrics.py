"""A gauge of active sandbox namespaces, safe to update from anywhere."""

from __future__ import annotations

import logging
import threading

log = logging.getLogger(__name__)

SANDBOX_GAUGE_NAME = "bundlelib_sandbox"
SANDBOX_GAUGE_HELP = "Guage of all sandbox namespaces that are active."

_lock = threading.Lock()
_collector: Collector | None = None


class Gauge:
    """A value that can go up and down."""

    def __init__(self, name: str, help: str) -> None:
        self.name = name
        self.help = help
        self._value = 0.0
        self._lock = threading.Lock()

    @property
    def value(self) -> float:
        """Current value of the gauge."""
        with self._lock:
            return self._value

    def inc(self) -> None:
        """Add one to the gauge."""
        with self._lock:
            self._value += 1.0

    def dec(self) -> None:
        """Subtract one from the gauge."""
        with self._lock:
            self._value -= 1.0


class Collector:
    """Holds the library's metrics."""

    def __init__(self, sandbox: Gauge) -> None:
        self.sandbox = sandbox

    def describe(self) -> list[tuple[str, str]]:
        """Return (name, help) for every metric collected."""
        return [(self.sandbox.name, self.sandbox.help)]

    def collect(self) -> list[tuple[str, float]]:
        """Return (name, value) for every metric's current state."""
        return [(self.sandbox.name, self.sandbox.value)]


def register_collector() -> Collector:
    """Create the collector on first call and return it; later calls reuse it."""
    global _collector
    with _lock:
        if _collector is None:
            _collector = Collector(Gauge(SANDBOX_GAUGE_NAME, SANDBOX_GAUGE_HELP))
        return _collector


def _update(action: str) -> None:
    # Metric updates must never break the caller: failures are only logged.
    try:
        collector = _collector
        if collector is None:
            raise RuntimeError("metrics collector is not registered")
        getattr(collector.sandbox, action)()
    except Exception as exc:  # noqa: BLE001
        log.error("Recovering from metric function - %s", exc)


def sandbox_created() -> None:
    """Count a newly created sandbox."""
    _update("inc")


def sandbox_deleted() -> None:
    """Count a deleted sandbox."""
    _update("dec")