"""Shared countdown: a per-client mirror of the timer record and the
controller state machine that drives it.

Transport concerns (Socket.IO, HTTP) stay outside this package; everything
here talks to a :class:`gitwars.store.DocumentStore`.
"""

from .client import TimerClient
from .controller import ControllerState, TimerController
from .mirror import StateMirror
from .scheduler import RepeatingTask, SocketIOScheduler
from .state import TimerState, format_display, round_for_duration
from .views import CachedView, FreshView, make_view
