import pytest

from gitwars.services.timer import ControllerState, TimerClient, TimerController, TimerState
from gitwars.store import MemoryStore


PATH = 'gameState/current'


def make_client(store, scheduler, name='A', **kwargs):
    client = TimerClient(store, PATH, scheduler, name=name, **kwargs)
    client.open()
    return client


def increments(store):
    return [w for w in store.writes if w[0] == 'increment']


class StubView:
    def __init__(self, state):
        self.state = state

    def read(self):
        return self.state


def test_five_ticks_count_down_to_zero(store, scheduler):
    store.create(PATH, {'timer': 5, 'timerRunning': False, 'round': 'easy'})
    client = make_client(store, scheduler)
    assert client.start()
    assert client.is_controller
    assert store.get(PATH).data['timerRunning'] is True

    scheduler.advance(4)
    assert store.get(PATH).data['timer'] == 1
    assert client.is_controller

    scheduler.advance(1)
    assert store.get(PATH).data == {'timer': 0, 'timerRunning': False, 'round': 'easy'}
    assert len(increments(store)) == 5
    assert not client.is_controller
    assert scheduler.active == []

    scheduler.advance(3)
    assert len(increments(store)) == 5


def test_start_with_no_time_left_is_a_noop(store, scheduler):
    store.create(PATH, {'timer': 0, 'timerRunning': False})
    client = make_client(store, scheduler)
    writes_before = len(store.writes)
    assert client.start() is False
    assert len(store.writes) == writes_before
    assert client.controller.state is ControllerState.IDLE
    assert scheduler.tasks == []


def test_stop_when_idle_only_clears_running_flag(store, scheduler):
    client = make_client(store, scheduler)
    writes_before = len(store.writes)
    assert client.stop()
    assert client.stop()
    assert store.writes[writes_before:] == [
        ('update', PATH, {'timerRunning': False}),
        ('update', PATH, {'timerRunning': False}),
    ]


@pytest.mark.parametrize('seconds, expected_round', [(30, 'easy'), (60, 'medium'), (45, 'hard')])
def test_set_duration_derives_round(store, scheduler, seconds, expected_round):
    client = make_client(store, scheduler)
    assert client.set_duration(seconds)
    assert store.get(PATH).data == {'timer': seconds, 'timerRunning': False, 'round': expected_round}


def test_set_duration_stops_running_loop(store, scheduler):
    client = make_client(store, scheduler)
    client.start()
    scheduler.advance(2)
    client.set_duration(60)
    assert not client.is_controller
    scheduler.advance(5)
    assert store.get(PATH).data['timer'] == 60


def test_set_duration_rejects_negative(store, scheduler):
    client = make_client(store, scheduler)
    writes_before = len(store.writes)
    assert client.set_duration(-5) is False
    assert len(store.writes) == writes_before


def test_reset_restores_default_duration(store, scheduler):
    client = make_client(store, scheduler)
    client.set_duration(60)
    client.start()
    scheduler.advance(3)
    assert client.reset()
    assert store.get(PATH).data == {'timer': 30, 'timerRunning': False, 'round': 'medium'}
    assert scheduler.active == []


def test_two_controllers_drain_faster_but_never_negative(store, scheduler):
    seen = []
    store.subscribe(PATH, lambda s: s.exists and seen.append(s.data['timer']))
    a = make_client(store, scheduler, 'A')
    b = make_client(store, scheduler, 'B')

    a.start()
    scheduler.advance(2)
    assert store.get(PATH).data['timer'] == 28
    b.start()
    assert a.is_controller and b.is_controller

    scheduler.advance(1)
    assert store.get(PATH).data['timer'] == 26

    scheduler.advance(30)
    assert store.get(PATH).data['timer'] == 0
    assert store.get(PATH).data['timerRunning'] is False
    assert not a.is_controller and not b.is_controller
    assert min(seen) == 0


def test_stale_cache_tick_acts_once_on_old_data(scheduler):
    store = MemoryStore(auto_flush=False)
    store.create(PATH, {'timer': 1, 'timerRunning': False})
    a = make_client(store, scheduler, 'A')
    b = make_client(store, scheduler, 'B')
    a.start()
    b.start()
    store.flush()

    # A's tick reaches zero; B's cache has not heard yet and decrements again
    scheduler.advance(1)
    assert len(increments(store)) == 2
    assert store.get(PATH).data == {'timer': 0, 'timerRunning': False}
    store.flush()
    assert a.state.timer == 0 and b.state.timer == 0
    assert not a.is_controller and not b.is_controller


def test_fresh_view_does_not_wait_for_push(scheduler):
    store = MemoryStore(auto_flush=False)
    store.create(PATH, {'timer': 3, 'timerRunning': False})
    client = make_client(store, scheduler, consistency='fresh')
    assert client.start()
    scheduler.advance(3)
    # No notification was ever flushed, yet every tick saw the live record
    assert store.get(PATH).data == {'timer': 0, 'timerRunning': False}
    assert client.state.timer == 3


def test_remote_stop_halts_local_loop(store, scheduler):
    a = make_client(store, scheduler, 'A')
    b = make_client(store, scheduler, 'B')
    a.start()
    scheduler.advance(2)
    count = len(increments(store))

    b.stop()
    assert not a.is_controller
    scheduler.advance(3)
    assert len(increments(store)) == count
    assert store.get(PATH).data['timer'] == 28


def test_tick_halts_when_view_says_stopped(store, scheduler):
    store.create(PATH, {'timer': 10, 'timerRunning': False})
    view = StubView(TimerState(timer=10, timer_running=True))
    controller = TimerController(store, PATH, view, scheduler, name='A')
    assert controller.start()
    scheduler.advance(1)
    assert len(increments(store)) == 1

    view.state = TimerState(timer=9, timer_running=False)
    scheduler.advance(1)
    assert len(increments(store)) == 1
    assert controller.state is ControllerState.IDLE
    assert scheduler.active == []


def test_tick_with_zero_cached_writes_stop(store, scheduler):
    store.create(PATH, {'timer': 0, 'timerRunning': True})
    view = StubView(TimerState(timer=1, timer_running=True))
    controller = TimerController(store, PATH, view, scheduler)
    controller.start()
    view.state = TimerState(timer=0, timer_running=True)
    scheduler.advance(1)
    assert increments(store) == []
    assert store.get(PATH).data['timerRunning'] is False
    assert not controller.is_controller


def test_failed_start_alerts_and_stays_idle(store, scheduler):
    alerts = []
    client = make_client(store, scheduler, on_alert=alerts.append)
    store.fail_next_write()
    assert client.start() is False
    assert alerts == ['Failed to start timer. Check console/permissions.']
    assert not client.is_controller
    assert scheduler.tasks == []


def test_failed_stop_keeps_local_transition(store, scheduler):
    alerts = []
    client = make_client(store, scheduler, on_alert=alerts.append)
    client.start()
    store.fail_next_write()
    assert client.stop() is False
    assert not client.is_controller
    assert alerts == ['Failed to stop timer.']
    # Nothing rolled back: the record still says running
    assert store.get(PATH).data['timerRunning'] is True


def test_failed_tick_keeps_loop_alive(store, scheduler):
    client = make_client(store, scheduler)
    client.start()
    store.fail_next_write()
    scheduler.advance(1)
    assert store.get(PATH).data['timer'] == 30
    scheduler.advance(1)
    assert store.get(PATH).data['timer'] == 29
    assert client.is_controller


def test_close_drops_loop_without_writing(store, scheduler):
    client = make_client(store, scheduler)
    client.start()
    writes_before = len(store.writes)
    client.close()
    scheduler.advance(2)
    assert len(store.writes) == writes_before
    assert store.get(PATH).data['timerRunning'] is True
    assert store.subscriber_count(PATH) == 0


def _drop_documents_table():
    from gitwars import db
    db.session.execute(db.text('DROP TABLE document'))
    db.session.commit()


def test_database_failure_on_start_alerts_instead_of_raising(flask_app, scheduler):
    from gitwars import get_store
    alerts = []
    client = make_client(get_store(), scheduler, on_alert=alerts.append)
    assert client.state.timer == 30

    _drop_documents_table()
    assert client.start() is False
    assert alerts == ['Failed to start timer. Check console/permissions.']
    assert not client.is_controller
    assert client.stop() is False
    assert client.set_duration(60) is False
    assert alerts[-1] == 'Failed to set timer duration.'


@pytest.mark.parametrize('consistency', ['cached', 'fresh'])
def test_database_failure_during_tick_keeps_controller_consistent(flask_app, scheduler, consistency):
    from gitwars import get_store
    client = make_client(get_store(), scheduler, consistency=consistency)
    assert client.start()

    _drop_documents_table()
    scheduler.advance(2)
    # Tick errors are logged and the loop carries on
    assert client.is_controller
    assert len(scheduler.active) == 1


def test_unexpected_tick_error_leaves_controller_idle(store, scheduler):
    store.create(PATH, {'timer': 10, 'timerRunning': False})

    class BrokenView(StubView):
        def read(self):
            if controller.is_controller:
                raise RuntimeError('view exploded')
            return self.state

    view = BrokenView(TimerState(timer=10, timer_running=True))
    controller = TimerController(store, PATH, view, scheduler)
    assert controller.start()
    with pytest.raises(RuntimeError):
        scheduler.advance(1)
    assert controller.state is ControllerState.IDLE
    assert scheduler.active == []
