import pytest

from mc_core.accounts.models import AccountRole
from mc_core.accounts.routing import resolve_route
from mc_core.accounts.session import SessionActivityTracker


class DictStorage:
    def __init__(self):
        self.data = {}

    def get(self, key, default=None):
        return self.data.get(key, default)

    def set(self, key, value, timeout=None):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)


class FakeClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_idle_session_expires_after_timeout():
    clock = FakeClock()
    tracker = SessionActivityTracker(clock=clock, storage=DictStorage(), timeout=1800)

    assert tracker.is_expired(7) is False  # no activity recorded yet
    tracker.touch(7)

    clock.now += 1800
    assert tracker.is_expired(7) is False

    clock.now += 1
    assert tracker.is_expired(7) is True


def test_activity_resets_the_window():
    clock = FakeClock()
    tracker = SessionActivityTracker(clock=clock, storage=DictStorage(), timeout=60)
    tracker.touch(1)

    clock.now += 50
    assert tracker.check_and_touch(1) is True
    clock.now += 50
    assert tracker.check_and_touch(1) is True

    clock.now += 61
    assert tracker.check_and_touch(1) is False
    # Expiry ends the session until the next login.
    assert tracker.last_activity(1) is None
    assert tracker.is_expired(1) is True
    assert tracker.check_and_touch(1) is False

    tracker.start(1)
    assert tracker.check_and_touch(1) is True


def test_end_marks_the_session_expired():
    clock = FakeClock()
    tracker = SessionActivityTracker(clock=clock, storage=DictStorage(), timeout=60, retention=3600)
    tracker.touch(3)
    tracker.end(3)

    assert tracker.retention == 3600
    assert tracker.is_ended(3) is True
    assert tracker.is_expired(3) is True


class _Acc:
    def __init__(self, role):
        self.role = role


@pytest.mark.parametrize(
    "account, path, expected",
    [
        (None, "/dashboard/patient", "/login"),
        (None, "/login", None),
        (None, "/register/doctor", None),
        (_Acc(AccountRole.PATIENT), "/dashboard/patient/appointments", None),
        (_Acc(AccountRole.PATIENT), "/dashboard/doctor", "/dashboard/patient"),
        (_Acc(AccountRole.DOCTOR), "/dashboard/admin/users", "/dashboard/doctor"),
        (_Acc(AccountRole.PHARMACY), "/register/pharmacy", "/dashboard/pharmacy"),
        (_Acc(AccountRole.ADMIN), "/dashboard", None),
        (_Acc("nurse"), "/dashboard/nurse", "/"),
    ],
)
def test_route_gate(account, path, expected):
    assert resolve_route(account, path) == expected
