from typing import Callable, Optional

from gitwars.store import DocumentStore
from .controller import TimerController
from .mirror import StateMirror
from .state import DEFAULT_DURATION_SEC, TimerState
from .views import make_view


class TimerClient:
    """One client's mirror/controller pair over the shared timer record."""

    def __init__(self, store: DocumentStore, path: str, scheduler,
                 interval: float = 1.0,
                 consistency: str = 'cached',
                 default_duration: int = DEFAULT_DURATION_SEC,
                 on_display: Optional[Callable[[int], None]] = None,
                 on_alert: Optional[Callable[[str], None]] = None,
                 name: str = 'client'):
        self.name = name
        self.mirror = StateMirror(store, path, on_display=on_display,
                                  default_duration=default_duration)
        view = make_view(consistency, self.mirror, store, path)
        self.controller = TimerController(
            store, path, view, scheduler,
            interval=interval,
            on_alert=on_alert,
            default_duration=default_duration,
            name=name,
        )
        self.mirror.watch(self.controller.observe)

    @property
    def state(self) -> Optional[TimerState]:
        return self.mirror.cache

    @property
    def is_controller(self) -> bool:
        return self.controller.is_controller

    def open(self) -> bool:
        return self.mirror.start()

    def close(self) -> None:
        self.controller.close()
        self.mirror.stop()

    def start(self) -> bool:
        return self.controller.start()

    def stop(self) -> bool:
        return self.controller.stop()

    def reset(self) -> bool:
        return self.controller.reset()

    def set_duration(self, seconds) -> bool:
        return self.controller.set_duration(seconds)
