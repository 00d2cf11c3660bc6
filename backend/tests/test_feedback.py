"""Tests for live feedback.

Covers:
- Attendees post emoji or text feedback only while the event is LIVE
- The owning host pins and flags; other hosts are refused
- Listing is newest first and can be narrowed by type
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.models.feedback import Feedback, FeedbackType
from app.services import feedback_service, lifecycle_service
from app.services.exceptions import InvalidStateError
from tests.conftest import auth_headers, create_test_event, create_test_user


def _live_event(client, db):
    """Host, attendee and an event that started an hour ago, swept to LIVE."""
    host = create_test_user(client, name="Host", role="HOST")
    alice = create_test_user(client, name="Alice")
    event = create_test_event(client, host, start_offset_hours=-1, deadline_offset_hours=-2)
    assert lifecycle_service.activate_due_events(db) == 1
    return host, alice, event


def _post(client, user, event, **body):
    return client.post(f"/api/feedback/{event['event_id']}", headers=auth_headers(user), json=body)


class TestCreateFeedback:

    def test_text_comment(self, client, db):
        _, alice, event = _live_event(client, db)
        resp = _post(client, alice, event, comment="Great talk!")
        assert resp.status_code == 201
        body = resp.json()
        assert body["type"] == "TEXT"
        assert body["content"] == "Great talk!"
        assert body["user_id"] == alice["user_id"]
        assert body["pinned"] is False and body["flagged"] is False

    def test_emoji_takes_precedence(self, client, db):
        _, alice, event = _live_event(client, db)
        resp = _post(client, alice, event, emoji="\U0001F44D", comment="ignored")
        assert resp.status_code == 201
        assert resp.json()["type"] == "EMOJI"
        assert resp.json()["content"] == "\U0001F44D"

    def test_empty_feedback_rejected(self, client, db):
        _, alice, event = _live_event(client, db)
        assert _post(client, alice, event).status_code == 422

    def test_not_live_rejected(self, client):
        host = create_test_user(client, name="Host", role="HOST")
        alice = create_test_user(client, name="Alice")
        event = create_test_event(client, host)
        resp = _post(client, alice, event, comment="Too early")
        assert resp.status_code == 400
        assert resp.json() == {"error": "invalid_state", "message": "Event is not live."}

    def test_closed_event_rejected(self, client, db):
        host, alice, event = _live_event(client, db)
        client.patch(f"/api/events/{event['event_id']}/close", headers=auth_headers(host))
        with pytest.raises(InvalidStateError):
            feedback_service.create_feedback(db, alice["user_id"], event["event_id"], comment="Late")

    def test_host_cannot_post(self, client, db):
        host, _, event = _live_event(client, db)
        assert _post(client, host, event, comment="Self praise").status_code == 403

    def test_unknown_event(self, client):
        alice = create_test_user(client, name="Alice")
        resp = client.post("/api/feedback/missing", headers=auth_headers(alice), json={"comment": "?"})
        assert resp.status_code == 404


class TestModeration:

    def _feedback(self, client, db):
        host, alice, event = _live_event(client, db)
        fb = _post(client, alice, event, comment="Mic is too quiet").json()
        return host, alice, event, fb

    def test_owner_pins(self, client, db):
        host, _, event, fb = self._feedback(client, db)
        resp = client.patch(f"/api/feedback/{event['event_id']}/{fb['feedback_id']}/pin",
                            headers=auth_headers(host))
        assert resp.status_code == 200
        assert resp.json()["pinned"] is True
        assert resp.json()["flagged"] is False

    def test_owner_flags(self, client, db):
        host, _, event, fb = self._feedback(client, db)
        resp = client.patch(f"/api/feedback/{event['event_id']}/{fb['feedback_id']}/flag",
                            headers=auth_headers(host))
        assert resp.status_code == 200
        assert resp.json()["flagged"] is True
        assert db.get(Feedback, fb["feedback_id"]).flagged is True

    @pytest.mark.parametrize("action", ["pin", "flag"])
    def test_other_host_forbidden(self, client, db, action):
        _, _, event, fb = self._feedback(client, db)
        other = create_test_user(client, name="Other Host", role="HOST")
        resp = client.patch(f"/api/feedback/{event['event_id']}/{fb['feedback_id']}/{action}",
                            headers=auth_headers(other))
        assert resp.status_code == 403
        assert resp.json()["error"] == "forbidden"

    def test_attendee_cannot_moderate(self, client, db):
        _, alice, event, fb = self._feedback(client, db)
        resp = client.patch(f"/api/feedback/{event['event_id']}/{fb['feedback_id']}/pin",
                            headers=auth_headers(alice))
        assert resp.status_code == 403

    def test_feedback_from_another_event_not_found(self, client, db):
        host, _, _, fb = self._feedback(client, db)
        other_event = create_test_event(client, host, title="Other")
        resp = client.patch(f"/api/feedback/{other_event['event_id']}/{fb['feedback_id']}/pin",
                            headers=auth_headers(host))
        assert resp.status_code == 404


class TestListFeedback:

    def test_newest_first_and_type_filter(self, client, db):
        host, alice, event = _live_event(client, db)
        base = datetime.now(timezone.utc)
        first = feedback_service.create_feedback(db, alice["user_id"], event["event_id"],
                                                 comment="Opening was fun", now=base)
        second = feedback_service.create_feedback(db, alice["user_id"], event["event_id"],
                                                  emoji="\U0001F389", now=base + timedelta(minutes=1))
        third = feedback_service.create_feedback(db, alice["user_id"], event["event_id"],
                                                 comment="Q&A please", now=base + timedelta(minutes=2))

        resp = client.get(f"/api/feedback/{event['event_id']}", headers=auth_headers(alice))
        assert resp.status_code == 200
        assert [f["feedback_id"] for f in resp.json()] == [third.feedback_id, second.feedback_id, first.feedback_id]

        texts = client.get(f"/api/feedback/{event['event_id']}", params={"type": "TEXT"},
                           headers=auth_headers(host)).json()
        assert [f["feedback_id"] for f in texts] == [third.feedback_id, first.feedback_id]

        emojis = feedback_service.list_feedback(db, event["event_id"], FeedbackType.emoji)
        assert [f.feedback_id for f in emojis] == [second.feedback_id]

    def test_unknown_type_rejected(self, client, db):
        _, alice, event = _live_event(client, db)
        resp = client.get(f"/api/feedback/{event['event_id']}", params={"type": "VIDEO"},
                          headers=auth_headers(alice))
        assert resp.status_code == 422

    def test_requires_identity(self, client, db):
        _, _, event = _live_event(client, db)
        assert client.get(f"/api/feedback/{event['event_id']}").status_code == 401

    def test_deleted_with_event(self, client, db):
        host, alice, event = _live_event(client, db)
        _post(client, alice, event, comment="Bye")
        client.delete(f"/api/events/{event['event_id']}", headers=auth_headers(host))
        assert db.query(Feedback).filter(Feedback.event_id == event["event_id"]).count() == 0
