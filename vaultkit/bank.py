"""A pocket of cash and a bank account holding the same currency."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from .ledger import AccessRules, Bucket, Ledger, LedgerError, Vault, require, to_decimal

logger = logging.getLogger(__name__)


def _fmt(amount: Decimal) -> str:
    return f"{amount.normalize():f}"


class Bank:
    """Moves money between cash and a bank account; withdrawals need the owner badge."""

    def __init__(self, ledger: Ledger, bank_account: Vault, cash: Vault, owner_badge: str, access: AccessRules) -> None:
        self._ledger = ledger
        self.bank_account = bank_account
        self.cash = cash
        self.owner_badge = owner_badge
        self._access = access

    @classmethod
    def instantiate(cls, ledger: Ledger) -> tuple["Bank", Bucket]:
        initial_cash = ledger.new_fungible(1000, metadata={"description": "USD"})
        owner_badge = ledger.new_fungible(
            1, divisibility=0, metadata={"name": "owner authorization"}
        )
        access = AccessRules().method("bank_withdraw", require(owner_badge.resource_address))
        bank = cls(
            ledger,
            Vault.with_bucket(initial_cash.take(500)),
            Vault.with_bucket(initial_cash),
            owner_badge.resource_address,
            access,
        )
        return bank, owner_badge

    def balances(self) -> tuple[Decimal, Decimal]:
        """Log and return (bank balance, cash balance)."""
        logger.info("My bank balance is: %s", _fmt(self.bank_account.amount))
        logger.info("My cash balance is: %s", _fmt(self.cash.amount))
        return self.bank_account.amount, self.cash.amount

    def _check_cash(self, exchange: Decimal) -> None:
        if not exchange < self.cash.amount:
            raise LedgerError(
                "You don't have that much of cash. Your current balance is "
                f"{_fmt(self.cash.amount)}"
            )

    def _log_balances(self) -> None:
        logger.info("Your Cash balance is now %s", _fmt(self.cash.amount))
        logger.info("Your bank balance is now %s", _fmt(self.bank_account.amount))

    def bank_deposit(self, exchange: Any) -> None:
        exchange = to_decimal(exchange)
        self._check_cash(exchange)
        self.bank_account.put(self.cash.take(exchange))
        self._log_balances()

    def bank_withdraw(self, exchange: Any) -> None:
        self._access.check("bank_withdraw", self._ledger.proofs)
        exchange = to_decimal(exchange)
        self._check_cash(exchange)
        self.cash.put(self.bank_account.take(exchange))
        self._log_balances()