from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from gitwars import socketio, get_store
from gitwars.services import teams as team_svc
from gitwars.services.timer import SocketIOScheduler, TimerClient
from gitwars.store import StoreError
from typing import Dict, Any


# Per-connection context: the session's timer client and raw document subscriptions
_sid_to_ctx: Dict[str, Dict[str, Any]] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _open_timer_client(sid: str, namespace: str) -> TimerClient:
    cfg = current_app.config
    client = None

    def on_display(timer: int) -> None:
        state = client.state
        payload = state.to_display() if state is not None else {'timer': timer}
        socketio.emit('timer_display', payload, to=sid, namespace=namespace)

    def on_alert(message: str) -> None:
        socketio.emit('alert', {'message': message}, to=sid, namespace=namespace)

    client = TimerClient(
        get_store(),
        cfg['TIMER_STATE_PATH'],
        SocketIOScheduler(socketio),
        interval=float(cfg.get('TIMER_TICK_SEC', 1)),
        consistency=cfg.get('TIMER_CONSISTENCY', 'cached'),
        default_duration=int(cfg.get('TIMER_DEFAULT_SEC', 30)),
        on_display=on_display,
        on_alert=on_alert,
        name=sid,
    )
    if not client.open():
        emit('error', {'message': 'Could not subscribe to the timer'})
    return client


def handle_connect():
    sid = _get_sid()
    emit('connected', {'message': f'Connected to {request.namespace}'})
    _sid_to_ctx[sid] = {
        'timer': _open_timer_client(sid, request.namespace),
        'docs': {},
    }


def handle_disconnect(reason=None):
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if not ctx:
        return
    # Local teardown only; a departing controller leaves the shared record as last written
    ctx['timer'].close()
    for sub in ctx['docs'].values():
        sub.unsubscribe()


def _timer_client():
    ctx = _sid_to_ctx.get(_get_sid())
    if not ctx:
        emit('error', {'message': 'Not connected'})
        return None
    return ctx['timer']


def handle_timer_start(data=None):
    client = _timer_client()
    if client:
        emit('timer_ack', {'action': 'start', 'ok': client.start()})


def handle_timer_stop(data=None):
    client = _timer_client()
    if client:
        emit('timer_ack', {'action': 'stop', 'ok': client.stop()})


def handle_timer_reset(data=None):
    client = _timer_client()
    if client:
        emit('timer_ack', {'action': 'reset', 'ok': client.reset()})


def handle_timer_set_duration(data):
    seconds = (data or {}).get('seconds')
    # No coercion: 45.7 or true are rejected rather than truncated to a valid duration
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        emit('error', {'message': 'seconds must be an integer'})
        return
    client = _timer_client()
    if client:
        emit('timer_ack', {'action': 'set_duration', 'ok': client.set_duration(seconds)})


def handle_subscribe_doc(data):
    path = (data or {}).get('path')
    sid = _get_sid()
    ctx = _sid_to_ctx.get(sid)
    if not path or not ctx:
        emit('error', {'message': 'path is required'})
        return
    if path in ctx['docs']:
        return
    namespace = request.namespace

    def forward(snapshot):
        socketio.emit('snapshot', snapshot.to_dict(), to=sid, namespace=namespace)

    try:
        ctx['docs'][path] = get_store().subscribe(path, forward)
    except StoreError as exc:
        current_app.logger.error(f"[subscribe-failed] sid={sid} path={path} error={exc}")
        emit('error', {'message': str(exc)})


def handle_unsubscribe_doc(data):
    path = (data or {}).get('path')
    ctx = _sid_to_ctx.get(_get_sid())
    sub = ctx['docs'].pop(path, None) if ctx else None
    if sub:
        sub.unsubscribe()
    emit('unsubscribed', {'path': path})


def handle_join_leaderboard(data=None):
    join_room(team_svc.LEADERBOARD_ROOM)
    emit('teams_update', {'teams': team_svc.leaderboard()})


def handle_leave_leaderboard(data=None):
    leave_room(team_svc.LEADERBOARD_ROOM)
    emit('left', {'room': team_svc.LEADERBOARD_ROOM})


def handle_ping(data=None):
    emit('pong', data or {})


_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'timer_start': handle_timer_start,
    'timer_stop': handle_timer_stop,
    'timer_reset': handle_timer_reset,
    'timer_set_duration': handle_timer_set_duration,
    'subscribe_doc': handle_subscribe_doc,
    'unsubscribe_doc': handle_unsubscribe_doc,
    'join_leaderboard': handle_join_leaderboard,
    'leave_leaderboard': handle_leave_leaderboard,
    'ping': handle_ping,
}


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in _HANDLERS.items():
            socketio.on_event(event, handler, namespace=namespace)
