"""Tests for the notification poller."""

import threading
from unittest.mock import MagicMock

import pytest

from banking_client.exceptions import ServerError, SessionExpiredError
from banking_client.schemas import Notification
from ui.notifications import NotificationPoller


@pytest.fixture
def notifications() -> list[Notification]:
    return [
        Notification(id=1, title="Deposit", message="You received $10", is_read=False),
        Notification(id=2, title="Login", message="New login", is_read=True),
    ]


@pytest.fixture
def poller(client, notifications) -> NotificationPoller:
    client.notifications.for_user.return_value = notifications
    return NotificationPoller(client, user_id=7, interval=0.01)


class TestPollOnce:
    """Tests for a single poll."""

    def test_poll_updates_state(self, client, poller, notifications):
        on_update = MagicMock()
        poller.on_update = on_update

        result = poller.poll_once()

        assert result == notifications
        assert poller.unread_count == 1
        on_update.assert_called_once_with(notifications)
        client.notifications.for_user.assert_called_once_with(7)

    def test_unread_only(self, client, notifications):
        client.notifications.unread.return_value = notifications[:1]
        poller = NotificationPoller(client, user_id=7, unread_only=True)

        assert poller.poll_once() == notifications[:1]
        client.notifications.for_user.assert_not_called()

    def test_poll_skipped_while_in_flight(self, client, poller):
        def _overlapping(user_id):
            assert poller.poll_once() is None
            return []

        client.notifications.for_user.side_effect = _overlapping

        assert poller.poll_once() == []
        assert client.notifications.for_user.call_count == 1

    def test_failure_keeps_previous_list(self, client, poller, notifications):
        poller.poll_once()
        client.notifications.for_user.side_effect = ServerError("down", 503)

        assert poller.poll_once() is None
        assert poller.notifications == notifications
        assert poller.error == "down"

    def test_result_after_stop_is_discarded(self, client, poller):
        on_update = MagicMock()
        poller.on_update = on_update

        def _stop_midway(user_id):
            poller.stop()
            return []

        client.notifications.for_user.side_effect = _stop_midway

        assert poller.poll_once() is None
        assert poller.notifications == []
        on_update.assert_not_called()

    def test_mark_read_then_repoll(self, client, poller):
        poller.mark_read(1)

        client.notifications.mark_read.assert_called_once_with(1)
        client.notifications.for_user.assert_called_once_with(7)

    def test_mark_all_read(self, client, poller):
        poller.mark_all_read()

        client.notifications.mark_all_read.assert_called_once_with(7)


class TestLifecycle:
    """Tests for start/stop of the background thread."""

    def test_interval_must_be_positive(self, client):
        with pytest.raises(ValueError):
            NotificationPoller(client, user_id=7, interval=0)

    def test_start_polls_and_stop_joins(self, client, poller):
        polled = threading.Event()
        poller.on_update = lambda _: polled.set()

        poller.start()
        assert polled.wait(2.0)
        assert poller.running

        poller.stop()

        assert not poller.running

    def test_start_twice_keeps_one_thread(self, poller):
        poller.start()
        thread = poller._thread
        poller.start()

        assert poller._thread is thread
        poller.stop()

    def test_session_expiry_ends_thread(self, client, poller):
        client.notifications.for_user.side_effect = SessionExpiredError(
            "expired", status_code=401
        )

        poller.start()
        poller._thread.join(2.0)

        assert not poller.running
        assert client.notifications.for_user.call_count == 1
