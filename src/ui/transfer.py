"""Transfer form orchestration, independent of the rendering layer.

The form moves through::

    IDLE -> VALIDATING -> CONFIRMING -> SUBMITTING -> SUCCEEDED | FAILED

FAILED is the idle state with an error attached: the draft is kept, the
server message is in ``error``, and the form accepts the same calls as in
IDLE (edit, submit again, reset).

Validation never touches the network. Only one submit can be in flight per
form instance, and nothing is retried. After a successful transfer the
account list that feeds the selectors is fetched again; that refetch is best
effort and may still show an old balance, the backend being authoritative.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum

from banking_client import BankingClient
from banking_client.exceptions import (
    BankingClientError,
    FormValidationError,
    RequestValidationError,
    SessionExpiredError,
)
from banking_client.schemas import Account, FacadeTransferRequest, TransferRequest
from ui.feedback import error_message

logger = logging.getLogger(__name__)

AMOUNT_NOT_POSITIVE = "amount must be greater than zero"
AMOUNT_INVALID = "amount must be a number"
SAME_ACCOUNT = "cannot transfer to the same account"
SOURCE_REQUIRED = "choose the account to transfer from"
DESTINATION_REQUIRED = "choose the account to transfer to"
GENERIC_FAILURE = "The transfer failed. Please try again."


class TransferState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    CONFIRMING = "confirming"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class TransferInProgressError(RuntimeError):
    """Raised when a second submit is attempted while one is in flight."""


def parse_amount(raw: object) -> Decimal:
    """Parse a user-entered amount.

    Raises:
        FormValidationError: With a user-facing message if the amount is
            missing or not a positive number.
    """
    if raw is None or str(raw).strip() == "":
        raise FormValidationError(AMOUNT_NOT_POSITIVE)
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        raise FormValidationError(AMOUNT_INVALID)
    if not amount.is_finite():
        raise FormValidationError(AMOUNT_INVALID)
    if amount <= 0:
        raise FormValidationError(AMOUNT_NOT_POSITIVE)
    return amount


def validate_amount(raw: object) -> str | None:
    """Return the validation message for ``raw``, or None if it is valid."""
    try:
        parse_amount(raw)
    except FormValidationError as e:
        return str(e)
    return None


@dataclass
class TransferDraft:
    from_account: str = ""
    to_account: str = ""
    amount: str = ""
    description: str = ""


@dataclass
class TransferOutcome:
    message: str
    transaction_id: str | None = None


class TransferOrchestrator:
    """Drives one transfer form.

    Subclasses implement ``_send`` and may override ``_load_accounts``.
    """

    success_message = "Transfer completed successfully."

    def __init__(self, client: BankingClient, require_confirmation: bool = False):
        self.client = client
        self.require_confirmation = require_confirmation
        self.state = TransferState.IDLE
        self.draft = TransferDraft()
        self.accounts: list[Account] = []
        self.error: str | None = None
        self.outcome: TransferOutcome | None = None

    # --- account list ---

    def _load_accounts(self) -> list[Account]:
        return []

    def load_accounts(self) -> list[Account]:
        """Fetch the accounts offered in the selectors."""
        self.accounts = self._load_accounts()
        return self.accounts

    def refresh_accounts(self) -> None:
        try:
            self.load_accounts()
        except SessionExpiredError:
            raise
        except BankingClientError as e:
            logger.warning("Could not refresh accounts after transfer: %s", e)

    # --- form lifecycle ---

    def set_fields(
        self,
        from_account: str = "",
        to_account: str = "",
        amount: object = "",
        description: str = "",
    ) -> None:
        if self.state is TransferState.SUBMITTING:
            raise TransferInProgressError("transfer already in progress")
        self.draft = TransferDraft(
            from_account=str(from_account or "").strip(),
            to_account=str(to_account or "").strip(),
            amount=str(amount if amount is not None else "").strip(),
            description=(description or "").strip(),
        )

    def validate(self) -> list[str]:
        """Check the draft locally. Never calls the backend."""
        errors = []
        if not self.draft.from_account:
            errors.append(SOURCE_REQUIRED)
        if not self.draft.to_account:
            errors.append(DESTINATION_REQUIRED)
        amount_error = validate_amount(self.draft.amount)
        if amount_error:
            errors.append(amount_error)
        if (
            self.draft.from_account
            and self.draft.from_account == self.draft.to_account
        ):
            errors.append(SAME_ACCOUNT)
        return errors

    def request_submit(self) -> TransferState:
        """Validate and either ask for confirmation or submit right away."""
        if self.state is TransferState.SUBMITTING:
            raise TransferInProgressError("transfer already in progress")

        self.state = TransferState.VALIDATING
        self.error = None
        self.outcome = None
        errors = self.validate()
        if errors:
            self.error = errors[0]
            self.state = TransferState.IDLE
            return self.state

        if self.require_confirmation:
            self.state = TransferState.CONFIRMING
            return self.state
        return self._submit()

    def confirm(self) -> TransferState:
        if self.state is not TransferState.CONFIRMING:
            raise RuntimeError(f"nothing to confirm in state {self.state.value}")
        return self._submit()

    def cancel(self) -> None:
        if self.state is TransferState.CONFIRMING:
            self.state = TransferState.IDLE

    def reset(self) -> None:
        if self.state is TransferState.SUBMITTING:
            raise TransferInProgressError("transfer already in progress")
        self.state = TransferState.IDLE
        self.draft = TransferDraft()
        self.error = None
        self.outcome = None

    def _submit(self) -> TransferState:
        self.state = TransferState.SUBMITTING
        amount = parse_amount(self.draft.amount)
        try:
            self.outcome = self._send(self.draft, amount)
        except SessionExpiredError:
            self.state = TransferState.IDLE
            raise
        except BankingClientError as e:
            logger.warning("Transfer could not be sent: %s", e)
            self.error = error_message(e, GENERIC_FAILURE)
            self.state = TransferState.FAILED
            return self.state

        self.state = TransferState.SUCCEEDED
        self.draft = TransferDraft()
        self.refresh_accounts()
        return self.state

    def _send(self, draft: TransferDraft, amount: Decimal) -> TransferOutcome:
        raise NotImplementedError

    @property
    def is_busy(self) -> bool:
        return self.state is TransferState.SUBMITTING


class AccountTransferOrchestrator(TransferOrchestrator):
    """Transfer between the user's own accounts, chosen by account id."""

    def __init__(
        self,
        client: BankingClient,
        user_id: int,
        require_confirmation: bool = False,
    ):
        super().__init__(client, require_confirmation=require_confirmation)
        self.user_id = user_id

    def _load_accounts(self) -> list[Account]:
        return self.client.accounts.list_for_user(self.user_id)

    def _account_number(self, account_id: str) -> str:
        for account in self.accounts:
            if str(account.id) == account_id:
                return account.account_number
        raise ValueError(f"unknown account {account_id}")

    def validate(self) -> list[str]:
        errors = super().validate()
        if errors:
            return errors
        known = {str(a.id) for a in self.accounts}
        if self.draft.from_account not in known:
            errors.append(SOURCE_REQUIRED)
        if self.draft.to_account not in known:
            errors.append(DESTINATION_REQUIRED)
        return errors

    def _send(self, draft: TransferDraft, amount: Decimal) -> TransferOutcome:
        request = TransferRequest(
            from_account_number=self._account_number(draft.from_account),
            to_account_number=self._account_number(draft.to_account),
            amount=float(amount),
            description=draft.description or None,
        )
        result = self.client.accounts.transfer(request)
        message = (result.message if result else None) or self.success_message
        return TransferOutcome(
            message=message,
            transaction_id=result.transaction_id if result else None,
        )


class ExternalTransferOrchestrator(TransferOrchestrator):
    """Transfer from one of the user's accounts to any account number."""

    def __init__(
        self,
        client: BankingClient,
        user_id: int,
        require_confirmation: bool = True,
    ):
        super().__init__(client, require_confirmation=require_confirmation)
        self.user_id = user_id

    def _load_accounts(self) -> list[Account]:
        return self.client.accounts.list_for_user(self.user_id)

    def _send(self, draft: TransferDraft, amount: Decimal) -> TransferOutcome:
        request = FacadeTransferRequest(
            from_account_number=draft.from_account,
            to_account_number=draft.to_account,
            amount=float(amount),
            description=draft.description or None,
        )
        result = self.client.banking.transfer(request)
        if result.success is False:
            raise RequestValidationError(result.message or GENERIC_FAILURE)
        return TransferOutcome(
            message=result.message or self.success_message,
            transaction_id=result.transaction_id,
        )


class GroupTransferOrchestrator(TransferOrchestrator):
    """Transfer between two member accounts of a group."""

    def __init__(
        self,
        client: BankingClient,
        group_id: int,
        require_confirmation: bool = True,
    ):
        super().__init__(client, require_confirmation=require_confirmation)
        self.group_id = group_id

    def _load_accounts(self) -> list[Account]:
        return self.client.groups.accounts(self.group_id)

    def _send(self, draft: TransferDraft, amount: Decimal) -> TransferOutcome:
        self.client.groups.transfer(
            self.group_id, draft.from_account, draft.to_account, float(amount)
        )
        return TransferOutcome(message=self.success_message)
