from dataclasses import dataclass
from typing import Any, Dict

DEFAULT_DURATION_SEC = 30
TIME_UP_TEXT = 'TIME UP'
ROUND_BY_DURATION = {30: 'easy', 60: 'medium'}


def round_for_duration(seconds: int) -> str:
    """Round label for a preset duration: 30s is easy, 60s medium, anything else hard."""
    return ROUND_BY_DURATION.get(seconds, 'hard')


def format_display(timer: int) -> str:
    """Render remaining seconds as MM:SS, or the end-of-round marker at zero."""
    if timer == 0:
        return TIME_UP_TEXT
    minutes, seconds = divmod(max(0, int(timer)), 60)
    return f"{minutes:02d}:{seconds:02d}"


@dataclass(frozen=True)
class TimerState:
    timer: int
    timer_running: bool
    round: str = 'easy'

    @classmethod
    def default(cls, duration: int = DEFAULT_DURATION_SEC) -> 'TimerState':
        return cls(timer=duration, timer_running=False, round=round_for_duration(duration))

    @classmethod
    def from_fields(cls, data: Dict[str, Any]) -> 'TimerState':
        return cls(
            timer=int(data.get('timer') or 0),
            timer_running=bool(data.get('timerRunning', False)),
            round=data.get('round') or 'easy',
        )

    def to_fields(self) -> Dict[str, Any]:
        return {'round': self.round, 'timer': self.timer, 'timerRunning': self.timer_running}

    def to_display(self) -> Dict[str, Any]:
        return {
            'timer': self.timer,
            'text': format_display(self.timer),
            'timeUp': self.timer == 0,
            'timerRunning': self.timer_running,
            'round': self.round,
        }
