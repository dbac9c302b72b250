"""Background polling of a user's notifications.

The poller owns one daemon thread and one stop event. ``stop()`` disposes
both; any poll that completes after ``stop()`` has its result discarded, so
a closed page never receives late updates. Polls that would overlap an
in-flight one are skipped rather than queued.
"""

import logging
from collections.abc import Callable
from threading import Event, Lock, Thread

from banking_client import BankingClient
from banking_client.exceptions import BankingClientError, SessionExpiredError
from banking_client.schemas import Notification

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 60.0


class NotificationPoller:
    def __init__(
        self,
        client: BankingClient,
        user_id: int,
        on_update: Callable[[list[Notification]], None] | None = None,
        interval: float = DEFAULT_POLL_INTERVAL,
        unread_only: bool = False,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.client = client
        self.user_id = user_id
        self.on_update = on_update
        self.interval = interval
        self.unread_only = unread_only
        self.notifications: list[Notification] = []
        self.error: str | None = None

        self._in_flight = Lock()
        self._stop = Event()
        self._thread: Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = Thread(
            target=self._run,
            name=f"notification-poller-{self.user_id}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Dispose the interval; late results are dropped."""
        self._stop.set()
        thread = self._thread
        self._thread = None
        if thread is not None and thread.is_alive():
            thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.poll_once()
            except SessionExpiredError:
                logger.info("Stopping notification polling: session expired")
                return
            self._stop.wait(self.interval)

    def poll_once(self) -> list[Notification] | None:
        """Fetch notifications once.

        Returns:
            The fetched list, or None if another poll was already in flight
            or the poller has been stopped in the meantime.
        """
        if not self._in_flight.acquire(blocking=False):
            logger.debug(
                "Skipping poll for user %s: previous poll in flight", self.user_id
            )
            return None
        try:
            if self.unread_only:
                notifications = self.client.notifications.unread(self.user_id)
            else:
                notifications = self.client.notifications.for_user(self.user_id)
        except SessionExpiredError:
            raise
        except BankingClientError as e:
            logger.warning("Notification poll failed for user %s: %s", self.user_id, e)
            self.error = str(e)
            return None
        finally:
            self._in_flight.release()

        if self._stop.is_set():
            return None
        self.notifications = notifications
        self.error = None
        if self.on_update is not None:
            self.on_update(notifications)
        return notifications

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)

    def mark_read(self, notification_id: int) -> None:
        self.client.notifications.mark_read(notification_id)
        self.poll_once()

    def mark_all_read(self) -> None:
        self.client.notifications.mark_all_read(self.user_id)
        self.poll_once()
