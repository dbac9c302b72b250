"""Pending-transaction approval queue for managers.

The queue holds a snapshot of the backend's pending list and nothing else.
Every command (approve, reject, process all) is followed by a fresh fetch;
items are never removed from the snapshot locally, so a transaction the
backend still reports as pending stays visible until a later fetch drops it.
"""

import logging

from banking_client import BankingClient
from banking_client.exceptions import BankingClientError, SessionExpiredError
from banking_client.schemas import Transaction
from ui.feedback import error_message

logger = logging.getLogger(__name__)

REASON_REQUIRED = "a rejection reason is required"
FETCH_FAILED = "Failed to load pending transactions."
APPROVE_FAILED = "Failed to approve the transaction."
REJECT_FAILED = "Failed to reject the transaction."
PROCESS_FAILED = "Failed to process pending transactions."


class ApprovalQueue:
    def __init__(self, client: BankingClient, manager_id: int):
        self.client = client
        self.manager_id = manager_id
        self.transactions: list[Transaction] = []
        self.error: str | None = None
        self.loading = False

    def refresh(self) -> list[Transaction]:
        """Replace the snapshot with the backend's current pending list."""
        self.loading = True
        try:
            self.transactions = self.client.transactions.pending_approval()
            self.error = None
        except SessionExpiredError:
            raise
        except BankingClientError as e:
            self.error = error_message(e, FETCH_FAILED)
        finally:
            self.loading = False
        return self.transactions

    def approve(self, transaction_id: int, comments: str = "Approved") -> bool:
        return self._run(
            lambda: self.client.transactions.approve(
                transaction_id, self.manager_id, comments=comments
            ),
            APPROVE_FAILED,
            f"approve {transaction_id}",
        )

    def reject(
        self,
        transaction_id: int,
        reason: str,
        comments: str = "Rejected by manager",
    ) -> bool:
        """Reject a transaction. A blank reason is refused before any request."""
        if not reason or not reason.strip():
            self.error = REASON_REQUIRED
            return False
        return self._run(
            lambda: self.client.transactions.reject(
                transaction_id, self.manager_id, reason.strip(), comments=comments
            ),
            REJECT_FAILED,
            f"reject {transaction_id}",
        )

    def process_all(self) -> bool:
        return self._run(
            self.client.transactions.process_pending,
            PROCESS_FAILED,
            "process pending",
        )

    def _run(self, command, fallback: str, action: str) -> bool:
        """Issue ``command`` then refetch, whatever the outcome."""
        failure: str | None = None
        try:
            command()
            logger.info("Manager %s: %s", self.manager_id, action)
        except SessionExpiredError:
            raise
        except BankingClientError as e:
            logger.warning("Manager %s could not %s: %s", self.manager_id, action, e)
            failure = error_message(e, fallback)

        self.refresh()
        if failure is not None:
            self.error = failure
        return failure is None
