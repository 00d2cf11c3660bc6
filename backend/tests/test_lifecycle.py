"""Tests for the event lifecycle sweeps.

Covers:
- next_status: pure, forward-only, one step per call
- Activate / Close / EnableCheckInForToday sweeps with an injected clock
- Idempotency: re-running a sweep with nothing to do is a no-op
- A failure persisting one event does not stop the sweep
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from app.models.event import Event, EventStatus
from app.models.user import User, UserRole
from app.services import lifecycle_service
from app.services.lifecycle_service import next_status, utc_day_bounds

NOW = datetime(2030, 6, 15, 14, 30, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


def _event(status=EventStatus.scheduled, start=NOW):
    return Event(title="E", status=status, start_date_time=start,
                 rsvp_deadline=start - HOUR, max_attendees=5, check_in_enabled=False)


@pytest.fixture
def host(db):
    user = User(name="Host", email="host@example.com", role=UserRole.host)
    db.add(user)
    db.commit()
    return user


def _persist(db, host, title, start, status=EventStatus.scheduled, check_in_enabled=False):
    event = Event(host_id=host.user_id, title=title, start_date_time=start, rsvp_deadline=start - HOUR,
                  max_attendees=5, status=status, check_in_enabled=check_in_enabled)
    db.add(event)
    db.commit()
    return event


class TestNextStatus:

    def test_scheduled_before_start_stays(self):
        assert next_status(_event(start=NOW + timedelta(seconds=1)), NOW) == EventStatus.scheduled

    def test_scheduled_at_start_goes_live(self):
        assert next_status(_event(start=NOW), NOW) == EventStatus.live

    def test_live_closes_after_duration(self):
        ev = _event(EventStatus.live, start=NOW - HOUR)
        assert next_status(ev, NOW, closes_after=HOUR) == EventStatus.closed
        assert next_status(ev, NOW - timedelta(seconds=1), closes_after=HOUR) == EventStatus.live

    def test_one_step_at_a_time(self):
        ev = _event(start=NOW - timedelta(days=3))
        assert next_status(ev, NOW, closes_after=HOUR) == EventStatus.live

    @pytest.mark.parametrize("now", [NOW - timedelta(days=1), NOW, NOW + timedelta(days=30)])
    def test_closed_is_terminal(self, now):
        assert next_status(_event(EventStatus.closed), now) == EventStatus.closed

    def test_never_moves_backward(self):
        for status in EventStatus:
            for offset in (-48, -1, 0, 1, 48):
                ev = _event(status, start=NOW + timedelta(hours=offset))
                target = next_status(ev, NOW, closes_after=HOUR)
                assert target == status or lifecycle_service.is_forward(status, target)


class TestAdvance:

    def test_live_opens_check_in(self):
        ev = _event()
        assert lifecycle_service.advance(ev, EventStatus.live) is True
        assert ev.status == EventStatus.live
        assert ev.check_in_enabled is True

    def test_closed_shuts_check_in(self):
        ev = _event(EventStatus.live)
        ev.check_in_enabled = True
        assert lifecycle_service.advance(ev, EventStatus.closed) is True
        assert ev.check_in_enabled is False

    @pytest.mark.parametrize("current,target", [
        (EventStatus.live, EventStatus.scheduled),
        (EventStatus.closed, EventStatus.live),
        (EventStatus.closed, EventStatus.closed),
    ])
    def test_refuses_backward_or_same(self, current, target):
        ev = _event(current)
        assert lifecycle_service.advance(ev, target) is False
        assert ev.status == current
        assert ev.check_in_enabled is False

class TestDayBounds:

    def test_bounds(self):
        start, end = utc_day_bounds(NOW)
        assert start == datetime(2030, 6, 15, tzinfo=timezone.utc)
        assert end == datetime(2030, 6, 16, tzinfo=timezone.utc)

    def test_bounds_from_other_zone(self):
        late_evening_utc_minus_5 = datetime(2030, 6, 15, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
        start, _ = utc_day_bounds(late_evening_utc_minus_5)
        assert start == datetime(2030, 6, 16, tzinfo=timezone.utc)


class TestActivateSweep:

    def test_activates_due_events(self, db, host):
        due = _persist(db, host, "Due", NOW - timedelta(minutes=1))
        future = _persist(db, host, "Future", NOW + timedelta(minutes=1))

        assert lifecycle_service.activate_due_events(db, now=NOW) == 1
        db.expire_all()
        assert due.status == EventStatus.live
        assert due.check_in_enabled is True
        assert future.status == EventStatus.scheduled
        assert future.check_in_enabled is False

    def test_idempotent(self, db, host):
        _persist(db, host, "Due", NOW - timedelta(minutes=1))
        assert lifecycle_service.activate_due_events(db, now=NOW) == 1
        assert lifecycle_service.activate_due_events(db, now=NOW) == 0

    def test_closed_events_are_not_reactivated(self, db, host):
        closed = _persist(db, host, "Done", NOW - timedelta(minutes=5), status=EventStatus.closed)
        assert lifecycle_service.activate_due_events(db, now=NOW) == 0
        db.expire_all()
        assert closed.status == EventStatus.closed


class TestCloseSweep:

    def test_closes_after_one_hour(self, db, host):
        finished = _persist(db, host, "Finished", NOW - HOUR, status=EventStatus.live, check_in_enabled=True)
        running = _persist(db, host, "Running", NOW - timedelta(minutes=30),
                           status=EventStatus.live, check_in_enabled=True)

        assert lifecycle_service.close_finished_events(db, now=NOW) == 1
        db.expire_all()
        assert finished.status == EventStatus.closed
        assert finished.check_in_enabled is False
        assert running.status == EventStatus.live
        assert running.check_in_enabled is True

    def test_scheduled_events_untouched(self, db, host):
        _persist(db, host, "Late start", NOW - timedelta(days=1))
        assert lifecycle_service.close_finished_events(db, now=NOW) == 0

    def test_full_lifecycle_across_sweeps(self, db, host):
        event = _persist(db, host, "Lifecycle", NOW)
        lifecycle_service.activate_due_events(db, now=NOW)
        lifecycle_service.close_finished_events(db, now=NOW)
        db.expire_all()
        assert event.status == EventStatus.live

        later = NOW + HOUR
        lifecycle_service.close_finished_events(db, now=later)
        lifecycle_service.activate_due_events(db, now=later)
        db.expire_all()
        assert event.status == EventStatus.closed


class TestEnableTodaysCheckIns:

    def test_enables_only_todays_events(self, db, host):
        day_start, _ = utc_day_bounds(NOW)
        early = _persist(db, host, "Early", day_start)
        late = _persist(db, host, "Late", day_start + timedelta(hours=23, minutes=59))
        tomorrow = _persist(db, host, "Tomorrow", day_start + timedelta(days=1))
        yesterday = _persist(db, host, "Yesterday", day_start - timedelta(seconds=1))

        assert lifecycle_service.enable_todays_check_ins(db, now=day_start) == 2
        db.expire_all()
        assert early.check_in_enabled and late.check_in_enabled
        assert not tomorrow.check_in_enabled
        assert not yesterday.check_in_enabled

    def test_status_is_left_alone(self, db, host):
        event = _persist(db, host, "Today", NOW + HOUR)
        lifecycle_service.enable_todays_check_ins(db, now=NOW)
        db.expire_all()
        assert event.check_in_enabled is True
        assert event.status == EventStatus.scheduled

    def test_idempotent(self, db, host):
        _persist(db, host, "Today", NOW + HOUR)
        assert lifecycle_service.enable_todays_check_ins(db, now=NOW) == 1
        assert lifecycle_service.enable_todays_check_ins(db, now=NOW) == 0


class TestPartialFailure:

    def test_failed_event_does_not_stop_sweep(self, db, host, monkeypatch):
        first = _persist(db, host, "First", NOW - timedelta(minutes=2))
        second = _persist(db, host, "Second", NOW - timedelta(minutes=1))
        failing_id = first.event_id

        real_commit = db.commit
        calls = {"n": 0}

        def flaky_commit():
            calls["n"] += 1
            if any(obj.event_id == failing_id for obj in db.dirty if isinstance(obj, Event)):
                raise OperationalError("UPDATE events", {}, Exception("connection lost"))
            real_commit()

        monkeypatch.setattr(db, "commit", flaky_commit)
        saved = lifecycle_service.activate_due_events(db, now=NOW)
        monkeypatch.undo()

        assert saved == 1
        assert calls["n"] == 2
        db.expire_all()
        assert first.status == EventStatus.scheduled
        assert second.status == EventStatus.live
