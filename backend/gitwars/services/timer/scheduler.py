import logging
from typing import Callable


logger = logging.getLogger(__name__)


class RepeatingTask:
    """Handle for a repeating action. Cancelling never retracts a write already sent."""

    def __init__(self, fn: Callable[[], None], interval: float):
        self.fn = fn
        self.interval = interval
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class SocketIOScheduler:
    """Runs repeating actions as Socket.IO background tasks."""

    def __init__(self, socketio):
        self.socketio = socketio

    def every(self, interval: float, fn: Callable[[], None]) -> RepeatingTask:
        task = RepeatingTask(fn, interval)
        self.socketio.start_background_task(self._run, task)
        return task

    def _run(self, task: RepeatingTask) -> None:
        while True:
            self.socketio.sleep(task.interval)
            if task.cancelled:
                return
            try:
                task.fn()
            except Exception:
                logger.exception("[tick-error] repeating task raised; stopping it")
                task.cancel()
                return
