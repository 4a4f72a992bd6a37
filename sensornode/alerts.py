"""Alert registry with per-alert state, notification masks and optional auto-expiry."""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

MAX_ALERTS = 10
NAME_MAX_LEN = 8
ACCESS_TIMEOUT_S = 10.0
DEFAULT_PERIOD_MS = 1000


class AlertState(enum.IntEnum):
    """Life-cycle state of an alert."""

    INVALID = 0
    NORMAL = 1
    SET = 2
    EXPIRED = 3


class AlertNotify(enum.IntFlag):
    """States for which the handler of an alert is notified."""

    NONE = 0
    NORMAL = 1 << AlertState.NORMAL
    SET = 1 << AlertState.SET
    EXPIRED = 1 << AlertState.EXPIRED


@dataclass(frozen=True)
class AlertDescriptor:
    """What a state-change handler is told about an alert."""

    alert_id: int
    name: str
    timestamp_us: int
    state: AlertState


StateChangeHandler = Callable[[AlertDescriptor], bool]


@dataclass(frozen=True)
class AlertConfig:
    """Registration settings of one alert."""

    alert_id: int
    name: str = ""
    notify_mask: AlertNotify = AlertNotify.NONE
    auto_expire: bool = False
    expiry_time_ms: int = 0
    state_change_handler: StateChangeHandler | None = None


class _Alert:
    def __init__(self, alert_id: int) -> None:
        self.alert_id = alert_id
        self.name = ""
        self.lock: threading.Lock | None = None
        self.auto_expire = False
        self.expiry_time_ms = 0
        self.notify_mask = AlertNotify.NONE
        self.state = AlertState.INVALID
        self.handler: StateChangeHandler | None = None
        self.state_change_time_us = 0


def _default_clock() -> int:
    return time.monotonic_ns() // 1000


class AlertModule:
    """Holds up to ten alerts and notifies their handlers when polled."""

    def __init__(
        self,
        period_ms: int = DEFAULT_PERIOD_MS,
        clock: Callable[[], int] | None = None,
    ) -> None:
        if period_ms < 0:
            raise ValueError("period must not be negative")
        self._period_s = period_ms / 1000
        self._clock = clock if clock is not None else _default_clock
        self._alerts = [_Alert(i) for i in range(MAX_ALERTS)]
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @staticmethod
    def _check_id(alert_id: int) -> None:
        if not 0 <= alert_id < MAX_ALERTS:
            raise ValueError(f"invalid alert id {alert_id}, max alert id: {MAX_ALERTS}")

    def _registered(self, alert_id: int) -> _Alert:
        self._check_id(alert_id)
        alert = self._alerts[alert_id]
        if alert.state == AlertState.INVALID or alert.lock is None:
            raise ValueError(f"alert {alert_id} is not registered")
        return alert

    @staticmethod
    def _acquire(alert: _Alert) -> threading.Lock:
        lock = alert.lock
        assert lock is not None
        if not lock.acquire(timeout=ACCESS_TIMEOUT_S):
            raise TimeoutError(f"failed to acquire access lock for alert {alert.alert_id}")
        return lock

    def _set_state(self, alert: _Alert, state: AlertState) -> None:
        alert.state = state
        alert.state_change_time_us = self._clock()

    def register_alert(self, config: AlertConfig) -> None:
        """Register an alert; it starts in the NORMAL state."""
        if config is None:
            raise ValueError("alert config is required")
        self._check_id(config.alert_id)
        alert = self._alerts[config.alert_id]
        if alert.state != AlertState.INVALID:
            raise ValueError(
                f"alert {config.alert_id} is already registered, state: {alert.state.name}"
            )
        if alert.lock is None:
            alert.lock = threading.Lock()
        lock = self._acquire(alert)
        try:
            alert.alert_id = config.alert_id
            alert.auto_expire = config.auto_expire
            alert.expiry_time_ms = config.expiry_time_ms
            alert.handler = config.state_change_handler
            alert.state = AlertState.NORMAL
            alert.notify_mask = AlertNotify(config.notify_mask)
            alert.name = config.name[: NAME_MAX_LEN - 1]
        finally:
            lock.release()

    def unregister_alert(self, alert_id: int) -> None:
        """Remove a registered alert."""
        alert = self._registered(alert_id)
        lock = self._acquire(alert)
        try:
            alert.auto_expire = False
            alert.expiry_time_ms = 0
            alert.handler = None
            alert.state = AlertState.INVALID
            alert.notify_mask = AlertNotify.NONE
        finally:
            lock.release()

    def set_alert(self, alert_id: int) -> None:
        """Raise a registered alert."""
        alert = self._registered(alert_id)
        lock = self._acquire(alert)
        try:
            self._set_state(alert, AlertState.SET)
        finally:
            lock.release()

    def reset_alert(self, alert_id: int) -> None:
        """Return a registered alert to the NORMAL state."""
        alert = self._registered(alert_id)
        lock = self._acquire(alert)
        try:
            self._set_state(alert, AlertState.NORMAL)
        finally:
            lock.release()

    def state(self, alert_id: int) -> AlertState:
        """Current state of an alert slot."""
        self._check_id(alert_id)
        return self._alerts[alert_id].state

    def _notify(self, alert: _Alert, mask: AlertNotify) -> bool:
        if not alert.notify_mask & mask:
            return False
        if alert.handler is None:
            return False
        descriptor = AlertDescriptor(
            alert_id=alert.alert_id,
            name=alert.name[: NAME_MAX_LEN - 1],
            timestamp_us=alert.state_change_time_us,
            state=alert.state,
        )
        return bool(alert.handler(descriptor))

    def poll(self) -> None:
        """Run one pass over all alerts: expire, notify and update states."""
        for alert in self._alerts:
            if alert.lock is None:
                continue
            if not alert.lock.acquire(timeout=ACCESS_TIMEOUT_S):
                logger.error("failed to acquire access lock for alert:%u", alert.alert_id)
                continue
            try:
                if alert.state == AlertState.NORMAL:
                    self._notify(alert, AlertNotify.NORMAL)
                elif alert.state == AlertState.SET:
                    if alert.auto_expire:
                        elapsed_ms = (self._clock() - alert.state_change_time_us) // 1000
                        if elapsed_ms >= alert.expiry_time_ms:
                            self._set_state(alert, AlertState.EXPIRED)
                            continue
                    handled = self._notify(alert, AlertNotify.SET)
                    self._set_state(alert, AlertState.NORMAL if handled else AlertState.SET)
                elif alert.state == AlertState.EXPIRED:
                    handled = self._notify(alert, AlertNotify.EXPIRED)
                    self._set_state(
                        alert, AlertState.NORMAL if handled else AlertState.EXPIRED
                    )
            finally:
                alert.lock.release()

    @property
    def running(self) -> bool:
        """Whether the background polling thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start polling in a background thread; does nothing if already running."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="alert-module", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the background thread and wait for it to finish."""
        thread = self._thread
        if thread is None:
            return
        self._stop.set()
        if thread is not threading.current_thread():
            thread.join()
        self._thread = None

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll()
            except Exception:
                logger.exception("alert handler failed")
            self._stop.wait(self._period_s)

    def __enter__(self) -> "AlertModule":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()