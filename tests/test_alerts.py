import threading

import pytest

from sensornode.alerts import (
    MAX_ALERTS,
    AlertConfig,
    AlertDescriptor,
    AlertModule,
    AlertNotify,
    AlertState,
)


class FakeClock:
    def __init__(self):
        self.now = 0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def module(clock):
    return AlertModule(period_ms=10, clock=clock)


def recorder(result):
    seen = []

    def handler(desc):
        seen.append(desc)
        return result

    return seen, handler


def test_mask_built_from_state_bit_selects_notification(module):
    seen, handler = recorder(True)
    module.register_alert(
        AlertConfig(
            alert_id=0,
            notify_mask=1 << AlertState.SET,
            state_change_handler=handler,
        )
    )
    module.set_alert(0)
    module.poll()
    assert [d.state for d in seen] == [AlertState.SET]
    assert module.state(0) == AlertState.NORMAL


def test_register_starts_normal(module):
    module.register_alert(AlertConfig(alert_id=3, name="temp"))
    assert module.state(3) == AlertState.NORMAL
    assert module.state(4) == AlertState.INVALID


@pytest.mark.parametrize("alert_id", [-1, MAX_ALERTS])
def test_register_out_of_range(module, alert_id):
    with pytest.raises(ValueError):
        module.register_alert(AlertConfig(alert_id=alert_id))


def test_register_twice_fails(module):
    module.register_alert(AlertConfig(alert_id=1))
    with pytest.raises(ValueError):
        module.register_alert(AlertConfig(alert_id=1))


def test_unregister(module):
    module.register_alert(AlertConfig(alert_id=2))
    module.unregister_alert(2)
    assert module.state(2) == AlertState.INVALID
    with pytest.raises(ValueError):
        module.unregister_alert(2)
    module.register_alert(AlertConfig(alert_id=2))
    assert module.state(2) == AlertState.NORMAL


def test_set_and_reset_unregistered(module):
    with pytest.raises(ValueError):
        module.set_alert(0)
    with pytest.raises(ValueError):
        module.reset_alert(0)


def test_set_and_reset(module):
    module.register_alert(AlertConfig(alert_id=0))
    module.set_alert(0)
    assert module.state(0) == AlertState.SET
    module.reset_alert(0)
    assert module.state(0) == AlertState.NORMAL


def test_handled_set_returns_to_normal(module, clock):
    seen, handler = recorder(True)
    module.register_alert(
        AlertConfig(
            alert_id=5,
            name="abcdefghij",
            notify_mask=AlertNotify.SET,
            state_change_handler=handler,
        )
    )
    clock.now = 1234
    module.set_alert(5)
    clock.now = 2000
    module.poll()
    assert seen == [AlertDescriptor(5, "abcdefg", 1234, AlertState.SET)]
    assert module.state(5) == AlertState.NORMAL


def test_unhandled_set_stays_set(module):
    seen, handler = recorder(False)
    module.register_alert(
        AlertConfig(alert_id=0, notify_mask=AlertNotify.SET, state_change_handler=handler)
    )
    module.set_alert(0)
    module.poll()
    module.poll()
    assert len(seen) == 2
    assert module.state(0) == AlertState.SET


def test_mask_filters_notifications(module):
    seen, handler = recorder(True)
    module.register_alert(
        AlertConfig(alert_id=0, notify_mask=AlertNotify.NORMAL, state_change_handler=handler)
    )
    module.set_alert(0)
    module.poll()
    assert seen == []
    assert module.state(0) == AlertState.SET


def test_normal_notification_keeps_state(module):
    seen, handler = recorder(True)
    module.register_alert(
        AlertConfig(alert_id=0, notify_mask=AlertNotify.NORMAL, state_change_handler=handler)
    )
    module.poll()
    module.poll()
    assert [d.state for d in seen] == [AlertState.NORMAL, AlertState.NORMAL]
    assert module.state(0) == AlertState.NORMAL


def test_auto_expire_then_handled(module, clock):
    seen, handler = recorder(True)
    module.register_alert(
        AlertConfig(
            alert_id=7,
            notify_mask=AlertNotify.SET | AlertNotify.EXPIRED,
            auto_expire=True,
            expiry_time_ms=5,
            state_change_handler=handler,
        )
    )
    module.set_alert(7)
    clock.now = 5000
    module.poll()
    assert module.state(7) == AlertState.EXPIRED
    assert seen == []
    module.poll()
    assert [d.state for d in seen] == [AlertState.EXPIRED]
    assert module.state(7) == AlertState.NORMAL


def test_not_expired_before_deadline(module, clock):
    seen, handler = recorder(False)
    module.register_alert(
        AlertConfig(
            alert_id=0,
            notify_mask=AlertNotify.SET,
            auto_expire=True,
            expiry_time_ms=5,
            state_change_handler=handler,
        )
    )
    module.set_alert(0)
    clock.now = 4999
    module.poll()
    assert module.state(0) == AlertState.SET
    assert len(seen) == 1


def test_background_thread_notifies():
    fired = threading.Event()

    def handler(desc):
        fired.set()
        return True

    module = AlertModule(period_ms=5)
    module.register_alert(
        AlertConfig(alert_id=0, notify_mask=AlertNotify.SET, state_change_handler=handler)
    )
    with module:
        assert module.running
        module.set_alert(0)
        assert fired.wait(2)
    assert not module.running