"""Client-local controller for the shared countdown.

Any client may become a controller by calling ``start()``; from then on it
issues one relative decrement per tick against the shared record. Nothing
stops two clients from doing this at once, in which case the shared timer
drops faster than one second per second. The decrement carries a floor of
zero so the record never goes negative either way.

Tick decisions come from ``view``, normally the mirror's cache, so a tick
may act once on a snapshot that a remote write has already superseded.
"""

import enum
import logging
from typing import Callable, Optional

from gitwars.store import DocumentStore, StoreError
from .state import DEFAULT_DURATION_SEC, TimerState, round_for_duration


logger = logging.getLogger(__name__)


class ControllerState(enum.Enum):
    IDLE = 'idle'
    RUNNING = 'running'


class TimerController:

    def __init__(self, store: DocumentStore, path: str, view, scheduler,
                 interval: float = 1.0,
                 on_alert: Optional[Callable[[str], None]] = None,
                 default_duration: int = DEFAULT_DURATION_SEC,
                 name: str = 'client'):
        self.store = store
        self.path = path
        self.view = view
        self.scheduler = scheduler
        self.interval = interval
        self.on_alert = on_alert
        self.default_duration = default_duration
        self.name = name
        self.state = ControllerState.IDLE
        self._task = None

    @property
    def is_controller(self) -> bool:
        return self.state is ControllerState.RUNNING

    # ---- user transitions ----

    def start(self) -> bool:
        cached = self.view.read()
        if cached is None or cached.timer <= 0:
            logger.debug(f"[timer-start-ignored] client={self.name} nothing left to count down")
            return False
        if not self._write({'timerRunning': True}, 'Failed to start timer. Check console/permissions.'):
            return False
        self._cancel_task()
        self.state = ControllerState.RUNNING
        self._task = self.scheduler.every(self.interval, self._tick)
        logger.info(f"[timer-start] client={self.name} from timer={cached.timer}")
        return True

    def stop(self) -> bool:
        self._halt()
        return self._write({'timerRunning': False}, 'Failed to stop timer.')

    def reset(self) -> bool:
        self.stop()
        logger.info(f"[timer-reset] client={self.name} timer={self.default_duration}")
        return self._write(
            {'timer': self.default_duration, 'timerRunning': False},
            'Failed to reset timer.',
        )

    def set_duration(self, seconds) -> bool:
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
            logger.warning(f"[timer-duration-ignored] client={self.name} seconds={seconds!r}")
            return False
        self.stop()
        logger.info(f"[timer-duration] client={self.name} seconds={seconds}")
        return self._write(
            {'timer': seconds, 'timerRunning': False, 'round': round_for_duration(seconds)},
            'Failed to set timer duration.',
        )

    def close(self) -> None:
        """Drop the local loop without touching the shared record."""
        self._halt()

    # ---- mirror hook ----

    def observe(self, state: TimerState) -> None:
        if self.is_controller and not state.timer_running:
            logger.info(f"[timer-remote-stop] client={self.name} timer={state.timer}")
            self._halt()

    # ---- tick ----

    def _tick(self) -> None:
        if not self.is_controller:
            self._cancel_task()
            return
        try:
            cached = self.view.read()
            if cached is None or not cached.timer_running:
                self._halt()
                return
            if cached.timer > 0:
                snapshot = self.store.increment(self.path, 'timer', -1, floor=0)
                if (snapshot.data.get('timer') or 0) > 0:
                    return
            self._halt()
            self.store.update(self.path, {'timerRunning': False})
            logger.info(f"[timer-expired] client={self.name}")
        except StoreError as exc:
            logger.error(f"[timer-tick-failed] client={self.name} error={exc}")
        except Exception:
            # The scheduler drops a task that raises; keep the local state in step with that
            self._halt()
            raise

    # ---- internals ----

    def _halt(self) -> None:
        self.state = ControllerState.IDLE
        self._cancel_task()

    def _cancel_task(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _write(self, fields, alert_message: str) -> bool:
        try:
            self.store.update(self.path, fields)
        except StoreError:
            logger.exception(f"[timer-write-failed] client={self.name} fields={fields}")
            if self.on_alert is not None:
                self.on_alert(alert_message)
            return False
        return True
