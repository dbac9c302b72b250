"""Interest-strategy panel for one account.

All interest figures (reports, projections, comparisons) are computed by
the backend and only formatted here.
"""

import logging
from typing import Any

from banking_client import BankingClient
from banking_client.exceptions import BankingClientError, SessionExpiredError
from banking_client.schemas import AccountType, InterestReport
from ui.feedback import error_message

logger = logging.getLogger(__name__)

REPORT_FAILED = "Failed to load the interest report."
CHANGE_FAILED = "Failed to change the interest strategy."
APPLY_FAILED = "Failed to apply interest."


class InterestPanel:
    def __init__(self, client: BankingClient, account_id: int):
        self.client = client
        self.account_id = account_id
        self.report: InterestReport | None = None
        self.error: str | None = None

    def load(self) -> InterestReport | None:
        try:
            self.report = self.client.interest.report(self.account_id)
            self.error = None
        except SessionExpiredError:
            raise
        except BankingClientError as e:
            self.error = error_message(e, REPORT_FAILED)
        return self.report

    def change_strategy(self, strategy_name: str) -> bool:
        """Switch strategy, then fetch the report the backend now computes."""
        try:
            self.client.interest.change_strategy(self.account_id, strategy_name)
        except SessionExpiredError:
            raise
        except BankingClientError as e:
            self.error = error_message(e, CHANGE_FAILED)
            return False
        logger.info(
            "Interest strategy of account %s set to %s", self.account_id, strategy_name
        )
        self.load()
        return True

    def apply_interest(self) -> bool:
        try:
            self.client.interest.apply(self.account_id)
        except SessionExpiredError:
            raise
        except BankingClientError as e:
            self.error = error_message(e, APPLY_FAILED)
            return False
        self.load()
        return True

    def available_strategies(self, account_type: AccountType | None = None) -> list[str]:
        if account_type is None:
            strategies = self.client.interest.strategies()
        else:
            strategies = self.client.interest.strategies_for_type(account_type)
        return sorted(strategies)

    def compare(self, strategy1: str, strategy2: str) -> dict[str, Any]:
        return self.client.interest.compare(self.account_id, strategy1, strategy2)

    def future_interest(self, months: int) -> float:
        if months <= 0:
            raise ValueError("months must be positive")
        return self.client.interest.future_interest(self.account_id, months)


def format_rate(rate: float | None) -> str:
    if rate is None:
        return "--"
    return f"{rate:.2f}%"


def format_money(value: float | None) -> str:
    if value is None:
        return "--"
    return f"${value:,.2f}"
